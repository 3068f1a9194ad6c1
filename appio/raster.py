# ================================
# file: appio/raster.py
# ================================
"""Plain-text rasters (PGM/PPM) for diagnostic dumps.
Row-major, top row first, one pixel per cell.
"""
from __future__ import annotations
from typing import Sequence, Tuple
import numpy as np

from core.config import CENTER_MARK_SIZE, PGM_MAX_VALUE

Color = Tuple[int, int, int]
CENTER_COLOR: Color = (255, 0, 0)
BACKGROUND: Color = (255, 255, 255)


def write_mask_pgm(path: str, mask: np.ndarray) -> None:
    """P2 image: occupied cells are black (0), everything else white."""
    H, W = mask.shape
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"P2\n{W} {H}\n{PGM_MAX_VALUE}\n")
        for y in range(H):
            f.write("".join("0 " if mask[y, x] else f"{PGM_MAX_VALUE} " for x in range(W)))
            f.write("\n")


def write_rgb_ppm(path: str, image: np.ndarray) -> None:
    """P3 image from an (H, W, 3) uint8 array."""
    H, W = image.shape[:2]
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"P3\n{W} {H}\n{PGM_MAX_VALUE}\n")
        for y in range(H):
            f.write("".join(f"{int(r)} {int(g)} {int(b)} " for r, g, b in image[y]))
            f.write("\n")


def make_palette(count: int, rng: np.random.Generator) -> Tuple[Color, ...]:
    """One random color per cluster, drawn from the injected generator."""
    colors = rng.integers(0, 256, size=(max(0, count), 3))
    return tuple((int(r), int(g), int(b)) for r, g, b in colors)


def _paint(image: np.ndarray, x: int, y: int, half: int, color: Color) -> None:
    H, W = image.shape[:2]
    x0, x1 = max(0, x - half), min(W, x + half + 1)
    y0, y1 = max(0, y - half), min(H, y + half + 1)
    if x0 < x1 and y0 < y1:
        image[y0:y1, x0:x1] = color


def render_cluster_image(width: int, height: int, subsample: int,
                         centers: Sequence[int], clusters: Sequence[Sequence[int]],
                         palette: Sequence[Color]) -> np.ndarray:
    """Paint cluster members at grid resolution; centers get a red square on top."""
    if len(palette) < len(clusters):
        raise ValueError(f"Palette has {len(palette)} colors for {len(clusters)} clusters")
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[...] = BACKGROUND
    lattice_w = width // subsample
    half = subsample // 2

    for c, cluster in enumerate(clusters):
        for index in cluster:
            sub_y, sub_x = divmod(int(index), lattice_w)
            _paint(image, sub_x * subsample, sub_y * subsample, half, palette[c])

    for center in centers:
        sub_y, sub_x = divmod(int(center), lattice_w)
        _paint(image, sub_x * subsample, sub_y * subsample, CENTER_MARK_SIZE, CENTER_COLOR)
    return image
