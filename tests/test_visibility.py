from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import InvariantViolationError
from mapping.boundary import find_boundary
from mapping.distance_field import compute_distance_to_boundary
from visibility.visibility import VisibilityComputer


def _room(size: int = 20) -> np.ndarray:
    mask = np.zeros((size, size), dtype=bool)
    mask[1:size - 1, 1:size - 1] = True
    return mask


def _room_with_pillar() -> np.ndarray:
    mask = _room(24)
    mask[9:14, 9:14] = False
    return mask


def test_convex_room_sees_everything() -> None:
    mask = _room()
    vc = VisibilityComputer(subsample=2, min_boundary_distance=2.0, visibility_margin=0)
    assert vc.is_visible(mask, (10, 10), (1, 1))
    assert vc.is_visible(mask, (4, 15), (18, 2))
    boundary = np.asarray(find_boundary(mask), dtype=float)
    assert vc.visible_from(mask, (10, 10), boundary).all()


def test_wall_blocks_line_of_sight() -> None:
    mask = _room()
    mask[:, 10] = False
    vc = VisibilityComputer(visibility_margin=0)
    assert not vc.is_visible(mask, (5, 10), (15, 10))
    assert vc.is_visible(mask, (5, 10), (8, 12))


def test_margin_skips_steps_near_source() -> None:
    mask = _room()
    mask[10, 11] = False
    # 13 steps of 6/13: steps 2 and 3 land on the blocked cell (11, 10)
    assert not VisibilityComputer(visibility_margin=0).is_visible(mask, (10, 10), (16, 10))
    assert not VisibilityComputer(visibility_margin=3).is_visible(mask, (10, 10), (16, 10))
    assert VisibilityComputer(visibility_margin=4).is_visible(mask, (10, 10), (16, 10))


def test_ray_leaving_grid_is_an_invariant_violation() -> None:
    mask = np.ones((5, 5), dtype=bool)
    with pytest.raises(InvariantViolationError):
        VisibilityComputer(visibility_margin=0).is_visible(mask, (2, 2), (8, 2))


def test_vectorized_rays_agree_with_scalar_walk() -> None:
    mask = _room_with_pillar()
    boundary = find_boundary(mask)
    boundary_xy = np.asarray(boundary, dtype=float)
    vc = VisibilityComputer(subsample=2, min_boundary_distance=1.0, visibility_margin=2)
    for source in [(4, 4), (18, 6), (6, 19), (16, 16)]:
        fast = vc.visible_from(mask, source, boundary_xy)
        slow = np.array([vc.is_visible(mask, source, b) for b in boundary])
        assert np.array_equal(fast, slow)
        # the pillar hides part of the boundary
        assert not fast.all()


def test_compute_skips_cells_near_boundary_or_outside() -> None:
    mask = _room()
    boundary = find_boundary(mask)
    dist = compute_distance_to_boundary(mask)
    vc = VisibilityComputer(subsample=2, min_boundary_distance=2.0, visibility_margin=2)
    visibility = vc.compute(mask, boundary, dist)
    assert len(visibility) == 10 * 10
    # lattice (0, 0) is outside, lattice (1, 1) = cell (2, 2) is 1 cell from the wall
    assert visibility[0] == []
    assert visibility[11] == []
    # lattice (5, 5) = cell (10, 10) sees the whole convex room
    assert visibility[55] == list(range(len(boundary)))
    nonempty = sum(1 for v in visibility if v)
    assert nonempty == 7 * 7
