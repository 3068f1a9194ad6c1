# ================================
# file: visibility/visibility.py
# ================================
"""
Visibility Module - query cell to boundary line of sight

For every cell of a coarse lattice (stride = subsample) that lies inside the
mask and far enough from the boundary, list the boundary points it can see
along a straight, unobstructed line.

Key Features:
- Half-cell ray stepping (num_steps = 2*floor(length) + 1)
- First `visibility_margin` steps near the query cell are skipped
- Rays are evaluated query -> boundary only (the margin makes it asymmetric)
- Per-cell rays are vectorized over all boundary points with numpy

Cost is O(cells x boundary x ray length), the dominant cost of the pipeline.
Each query cell is independent; results do not depend on evaluation order.
"""
from __future__ import annotations
import math
import numpy as np
from typing import List, Sequence, Tuple

from core.config import (
    CLUSTERING_SUBSAMPLE, MARGIN_FROM_BOUNDARY_FOR_VISIBILITY, VISIBILITY_MARGIN,
)
from core.coords import round_half_away
from core.errors import ConfigurationError, InvariantViolationError

# Max ray samples (boundary points x steps) evaluated per numpy batch
MAX_BATCH_SAMPLES: int = 2_000_000


class VisibilityComputer:
    """Computes per-lattice-cell visible boundary indices."""

    def __init__(self,
                 subsample: int = CLUSTERING_SUBSAMPLE,
                 min_boundary_distance: float = MARGIN_FROM_BOUNDARY_FOR_VISIBILITY,
                 visibility_margin: int = VISIBILITY_MARGIN,
                 logger_func=None,
                 log_file=None) -> None:
        if subsample < 1:
            raise ConfigurationError(f"subsample must be >= 1, got {subsample}")
        if visibility_margin < 0:
            raise ConfigurationError(f"visibility_margin must be >= 0, got {visibility_margin}")
        self.subsample = int(subsample)
        self.min_boundary_distance = float(min_boundary_distance)
        self.visibility_margin = int(visibility_margin)
        self.logger_func = logger_func
        self.log_file = log_file

    def _log_debug(self, message: str) -> None:
        if self.logger_func and self.log_file:
            self.logger_func(self.log_file, message, "VISIBILITY")
        else:
            print(f"[VISIBILITY] {message}")

    def is_visible(self, mask: np.ndarray, source: Tuple[int, int], target: Tuple[int, int]) -> bool:
        """Walk the discretized line source -> target; False at the first cell outside the mask.

        The first `visibility_margin` steps are skipped and the target cell
        itself is never tested.
        """
        H, W = mask.shape
        sx, sy = float(source[0]), float(source[1])
        dx = float(target[0]) - sx
        dy = float(target[1]) - sy
        num_steps = int(math.floor(np.sqrt(dx * dx + dy * dy))) * 2 + 1
        step_x = dx / num_steps
        step_y = dy / num_steps

        for i in range(self.visibility_margin, num_steps):
            x = round_half_away(sx + i * step_x)
            y = round_half_away(sy + i * step_y)
            if x < 0 or W <= x or y < 0 or H <= y:
                raise InvariantViolationError(
                    f"Ray step ({x}, {y}) left the {W}x{H} grid from {source} to {target}")
            if not mask[y, x]:
                return False
        return True

    def visible_from(self, mask: np.ndarray, source: Tuple[int, int], boundary_xy: np.ndarray) -> np.ndarray:
        """Vectorized is_visible against every boundary point. Returns a bool array."""
        H, W = mask.shape
        n_points = boundary_xy.shape[0]
        visible = np.ones(n_points, dtype=bool)
        if n_points == 0:
            return visible

        src = np.array(source, dtype=np.float64)
        delta = boundary_xy - src
        lengths = np.sqrt((delta * delta).sum(axis=1))
        num_steps = np.floor(lengths).astype(np.int64) * 2 + 1
        steps = delta / num_steps[:, None]

        max_steps = int(num_steps.max())
        if max_steps <= self.visibility_margin:
            return visible
        ray_len = max_steps - self.visibility_margin
        batch = max(1, MAX_BATCH_SAMPLES // ray_len)
        idx = np.arange(self.visibility_margin, max_steps, dtype=np.float64)

        for start in range(0, n_points, batch):
            sl = slice(start, min(n_points, start + batch))
            px = src[0] + idx[None, :] * steps[sl, 0][:, None]
            py = src[1] + idx[None, :] * steps[sl, 1][:, None]
            valid = idx[None, :] < num_steps[sl][:, None]
            # 四舍五入（远离零）; positions are never meaningfully negative here
            xs = np.floor(px + 0.5).astype(np.int64)
            ys = np.floor(py + 0.5).astype(np.int64)

            outside = valid & ((xs < 0) | (xs >= W) | (ys < 0) | (ys >= H))
            if outside.any():
                row, col = np.argwhere(outside)[0]
                raise InvariantViolationError(
                    f"Ray step ({xs[row, col]}, {ys[row, col]}) left the {W}x{H} grid "
                    f"from {tuple(source)} to {tuple(boundary_xy[start + row])}")

            xs = np.where(valid, xs, 0)
            ys = np.where(valid, ys, 0)
            blocked = valid & ~mask[ys, xs]
            visible[sl] = ~blocked.any(axis=1)
        return visible

    def compute(self, mask: np.ndarray, boundary: Sequence[Tuple[int, int]],
                distance_to_boundary: np.ndarray) -> List[List[int]]:
        """Visible boundary indices for every lattice cell (row-major lattice order)."""
        H, W = mask.shape
        S = self.subsample
        lattice_w, lattice_h = W // S, H // S
        boundary_xy = np.asarray(boundary, dtype=np.float64).reshape(-1, 2)
        visibility: List[List[int]] = [[] for _ in range(lattice_w * lattice_h)]

        queried = 0
        visibility_index = 0
        for sub_y in range(lattice_h):
            y = sub_y * S
            for sub_x in range(lattice_w):
                x = sub_x * S
                index = visibility_index
                visibility_index += 1
                # 只计算掩码内部且离边界足够远的格子
                if not mask[y, x]:
                    continue
                if distance_to_boundary[y, x] < self.min_boundary_distance:
                    continue
                queried += 1
                visible = self.visible_from(mask, (x, y), boundary_xy)
                visibility[index] = [int(b) for b in np.flatnonzero(visible)]

        nonempty = sum(1 for v in visibility if v)
        self._log_debug(f"ComputeVisibility: lattice={lattice_w}x{lattice_h}, queried={queried}, "
                        f"nonempty={nonempty}, boundary={boundary_xy.shape[0]}")
        return visibility
