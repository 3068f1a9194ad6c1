# ================================
# file: gui/visualizer.py
# ================================
from __future__ import annotations
from typing import Optional, Sequence
import numpy as np
import matplotlib

# 非交互式后端，只输出图片
matplotlib.use("Agg")

import matplotlib.pyplot as plt

# Configure Chinese font support
plt.rcParams['font.sans-serif'] = ['SimHei', 'DejaVu Sans', 'Arial Unicode MS', 'sans-serif']
plt.rcParams['axes.unicode_minus'] = False  # Fix minus sign display issue

from core.types import DoorDetectionResult
from appio.raster import make_palette, render_cluster_image


class Visualizer:
    """Matplotlib-based 3-pane overview: mask + boundary, distance field, clusters."""

    def __init__(self, logger_func=None, log_file=None) -> None:
        self.logger_func = logger_func
        self.log_file = log_file
        self.fig, (self.axL, self.axM, self.axR) = plt.subplots(1, 3, figsize=(15, 5))

    def _log_debug(self, message: str) -> None:
        if self.logger_func and self.log_file:
            self.logger_func(self.log_file, message, "GUI")
        else:
            print(f"[GUI] {message}")

    def draw(self, result: DoorDetectionResult, trial: int = 0,
             palette: Optional[Sequence] = None) -> None:
        for ax in (self.axL, self.axM, self.axR):
            ax.clear()
        H, W = result.mask.shape

        # Left: mask and sampled boundary
        self.axL.imshow(result.mask.astype(np.uint8), cmap='gray', origin='upper', vmin=0, vmax=1)
        if result.boundary:
            b = np.asarray(result.boundary, dtype=float)
            self.axL.plot(b[:, 0], b[:, 1], 'r.', ms=2)
        self.axL.set_title(f"Mask ({int(result.mask.sum())} cells, {len(result.boundary)} boundary)")

        # Middle: distance to boundary (inf shown as background)
        dist = np.where(np.isfinite(result.distance_to_boundary), result.distance_to_boundary, np.nan)
        im = self.axM.imshow(dist, cmap='viridis', origin='upper')
        self.fig.colorbar(im, ax=self.axM, fraction=0.046, pad=0.04)
        self.axM.set_title("Distance to boundary")

        # Right: clusters of one trial
        if result.trials:
            clustering = result.trials[trial]
            if palette is None:
                palette = make_palette(clustering.cluster_count(), np.random.default_rng(trial))
            image = render_cluster_image(W, H, result.subsample, clustering.centers,
                                         clustering.clusters, palette)
            self.axR.imshow(image, origin='upper')
            self.axR.set_title(f"Trial {trial}: {clustering.cluster_count()} clusters")
        else:
            self.axR.set_title("No clustering")

        for ax in (self.axL, self.axM, self.axR):
            ax.set_xlim(-0.5, W - 0.5)
            ax.set_ylim(H - 0.5, -0.5)
            ax.set_aspect('equal')

    def save(self, path: str) -> None:
        self.fig.tight_layout()
        self.fig.savefig(path, dpi=100)
        self._log_debug(f"Overview saved: {path}")

    def close(self) -> None:
        plt.close(self.fig)


def save_overview(path: str, result: DoorDetectionResult, trial: int = 0,
                  palette: Optional[Sequence] = None, logger_func=None, log_file=None) -> None:
    viz = Visualizer(logger_func, log_file)
    try:
        viz.draw(result, trial, palette)
        viz.save(path)
    finally:
        viz.close()
