# ================================
# file: mapping/boundary.py
# ================================
"""Boundary extraction for the interior mask.
A boundary cell is an occupied cell with at least one unoccupied 4-neighbour.
"""
from __future__ import annotations
from typing import List, Sequence, Tuple
import numpy as np

from core.config import BOUNDARY_SUBSAMPLE_RATIO
from core.errors import ConfigurationError


def boundary_mask(mask: np.ndarray) -> np.ndarray:
    """Bool grid marking boundary cells. The outer ring is never boundary."""
    out = np.zeros(mask.shape, dtype=bool)
    H, W = mask.shape
    if H < 3 or W < 3:
        return out
    inner = mask[1:-1, 1:-1]
    open_nb = (~mask[1:-1, :-2]) | (~mask[1:-1, 2:]) | (~mask[:-2, 1:-1]) | (~mask[2:, 1:-1])
    out[1:-1, 1:-1] = inner & open_nb
    return out


def find_boundary(mask: np.ndarray) -> List[Tuple[int, int]]:
    """Boundary cells as (x, y), in row-major scan order (y outer, x inner)."""
    ys, xs = np.nonzero(boundary_mask(mask))
    return [(int(x), int(y)) for y, x in zip(ys, xs)]


def subsample_boundary(boundary: Sequence[Tuple[int, int]],
                       rng: np.random.Generator,
                       ratio: float = BOUNDARY_SUBSAMPLE_RATIO) -> List[Tuple[int, int]]:
    """Randomly keep int(len * ratio) boundary points, then sort by (x, y).

    Coarser sampling loses small openings; the sort makes downstream boundary
    indices independent of the shuffle order.
    """
    if not (0.0 < ratio <= 1.0):
        raise ConfigurationError(f"Boundary subsample ratio must be in (0, 1], got {ratio}")
    order = rng.permutation(len(boundary))
    keep = int(len(boundary) * ratio)
    if keep == 0:
        raise ConfigurationError(
            f"No boundary points left after subsampling {len(boundary)} points at ratio {ratio}")
    picked = [tuple(boundary[i]) for i in order[:keep]]
    return sorted((int(x), int(y)) for x, y in picked)
