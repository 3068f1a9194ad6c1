# ================================
# file: core/coords.py
# ================================
from __future__ import annotations
from typing import Tuple, Sequence
import math
import numpy as np

from core.types import Frame


class CoordinateSystem:
    """Conversions between world, grid and coarse-lattice coordinates of one Frame.

    Grid cell (x, y) covers world positions whose projection on axes[0]/axes[1]
    falls in [ranges[a][0] + k*unit, ranges[a][0] + (k+1)*unit).
    """

    def __init__(self, frame: Frame, subsample: int = 1, logger_func=None, log_file=None):
        if subsample < 1:
            raise ValueError(f"subsample must be >= 1, got {subsample}")
        self.frame = frame
        self.subsample = int(subsample)
        self.logger_func = logger_func
        self.log_file = log_file

    @property
    def lattice_width(self) -> int:
        return self.frame.width // self.subsample

    @property
    def lattice_height(self) -> int:
        return self.frame.height // self.subsample

    # 世界坐标 ↔ 网格坐标
    def world_to_grid(self, position: Sequence[float]) -> Tuple[int, int]:
        """Project a world point onto the frame axes and return its grid cell."""
        p = np.asarray(position, dtype=float)
        unit = self.frame.unit
        gx = int(math.floor((float(p.dot(self.frame.axes[0])) - self.frame.ranges[0][0]) / unit))
        gy = int(math.floor((float(p.dot(self.frame.axes[1])) - self.frame.ranges[1][0]) / unit))
        return (gx, gy)

    def grid_to_world(self, grid_x: int, grid_y: int) -> Tuple[float, float]:
        """Cell center in frame-axis coordinates (the top-down plane)."""
        unit = self.frame.unit
        wx = self.frame.ranges[0][0] + (grid_x + 0.5) * unit
        wy = self.frame.ranges[1][0] + (grid_y + 0.5) * unit
        return (float(wx), float(wy))

    # 粗网格索引 ↔ 网格坐标
    def lattice_to_grid(self, index: int) -> Tuple[int, int]:
        """Row-major lattice index -> full-resolution cell (x, y)."""
        if not (0 <= index < self.lattice_width * self.lattice_height):
            raise IndexError(f"lattice index {index} out of range")
        sy, sx = divmod(int(index), self.lattice_width)
        return (sx * self.subsample, sy * self.subsample)

    def grid_to_lattice(self, grid_x: int, grid_y: int) -> int:
        """Full-resolution cell -> lattice index of the lattice point at or below it."""
        sx = grid_x // self.subsample
        sy = grid_y // self.subsample
        if not (0 <= sx < self.lattice_width and 0 <= sy < self.lattice_height):
            raise IndexError(f"cell ({grid_x}, {grid_y}) is outside the lattice")
        return sy * self.lattice_width + sx

    def is_in_grid(self, grid_x: int, grid_y: int) -> bool:
        return 0 <= grid_x < self.frame.width and 0 <= grid_y < self.frame.height


def flat_index(width: int, x: int, y: int) -> int:
    """Row-major index used by serialized rasters."""
    return y * width + x


def round_half_away(value: float) -> int:
    """Round to nearest integer, halves away from zero (Python's round() is half-to-even)."""
    if value >= 0.0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))
