from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import ConfigurationError
from mapping.boundary import boundary_mask, find_boundary, subsample_boundary
from mapping.distance_field import DistanceFieldBuilder, compute_distance_to_boundary


def _square_mask(size: int = 10, lo: int = 2, hi: int = 8) -> np.ndarray:
    mask = np.zeros((size, size), dtype=bool)
    mask[lo:hi, lo:hi] = True
    return mask


def test_boundary_is_square_perimeter_in_scan_order() -> None:
    boundary = find_boundary(_square_mask())
    assert len(boundary) == 20
    assert boundary[0] == (2, 2)
    assert boundary[1] == (3, 2)
    assert boundary[-1] == (7, 7)
    assert (4, 4) not in boundary


def test_outer_ring_is_never_boundary() -> None:
    mask = np.ones((6, 6), dtype=bool)
    assert not boundary_mask(mask).any()


def test_subsample_size_and_membership() -> None:
    boundary = [(x, y) for y in range(20) for x in range(50)]
    picked = subsample_boundary(boundary, np.random.default_rng(3), 0.2)
    assert len(picked) == 200
    assert len(set(picked)) == 200
    assert set(picked) <= set(boundary)
    assert picked == sorted(picked)


def test_subsample_is_seed_deterministic() -> None:
    boundary = [(x, 0) for x in range(100)]
    a = subsample_boundary(boundary, np.random.default_rng(7), 0.3)
    b = subsample_boundary(boundary, np.random.default_rng(7), 0.3)
    assert a == b


def test_subsample_to_nothing_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        subsample_boundary([(1, 1), (2, 1), (3, 1), (4, 1)], np.random.default_rng(0), 0.2)


def test_subsample_ratio_out_of_range() -> None:
    with pytest.raises(ConfigurationError):
        subsample_boundary([(1, 1)], np.random.default_rng(0), 1.5)


def test_distance_field_properties() -> None:
    mask = np.zeros((12, 12), dtype=bool)
    mask[1:11, 1:11] = True
    dist = compute_distance_to_boundary(mask)
    seeds = boundary_mask(mask)
    assert np.all(dist[seeds] == 0.0)
    assert np.all(dist[mask & ~seeds] > 0.0)
    assert np.isfinite(dist[mask]).all()
    assert np.isinf(dist[~mask]).all()
    assert dist[5, 5] == pytest.approx(4.0)


def test_distance_field_uses_diagonal_steps() -> None:
    mask = np.zeros((9, 9), dtype=bool)
    mask[1:8, 1:8] = True
    dist = compute_distance_to_boundary(mask)
    # center of a 7x7 room: 3 orthogonal steps to any wall
    assert dist[4, 4] == pytest.approx(3.0)
    assert dist[2, 2] == pytest.approx(1.0)


def test_distance_field_is_consistent_with_neighbours() -> None:
    mask = np.zeros((16, 16), dtype=bool)
    mask[1:15, 1:15] = True
    mask[6:10, 6:10] = False
    dist = compute_distance_to_boundary(mask)
    ys, xs = np.nonzero(mask)
    for y, x in zip(ys, xs):
        for dx, dy, step in DistanceFieldBuilder.NEIGHBORS:
            nx, ny = x + dx, y + dy
            if mask[ny, nx]:
                assert dist[y, x] <= dist[ny, nx] + step + 1e-12


def test_distance_field_separate_components() -> None:
    mask = np.zeros((10, 20), dtype=bool)
    mask[1:9, 1:8] = True
    mask[1:9, 11:19] = True
    dist = compute_distance_to_boundary(mask)
    assert np.isfinite(dist[mask]).all()
    assert (dist[mask] >= 0.0).all()
