from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.config import MAX_FRAME_RESOLUTION
from core.coords import CoordinateSystem, flat_index, round_half_away
from core.errors import ConfigurationError
from core.frame import compute_average_distance, compute_frame, convert_points_to_sweep
from core.types import Frame, Sweep, SweepPoint


def _line_sweep() -> Sweep:
    # x = 0..99, y = 0,0,1,1,...,49,49, z = 0
    points = [SweepPoint((i, i // 2, 0.0), (0.0, 0.0, 1.0)) for i in range(100)]
    return Sweep((0.0, 0.0, 0.0), points)


def test_convert_points_to_sweep_uses_first_row_as_center() -> None:
    points = np.array([
        [1.0, 2.0, 3.0, 0.0, 0.0, 1.0],
        [4.0, 5.0, 6.0, 1.0, 0.0, 0.0],
        [7.0, 8.0, 9.0, 0.0, 1.0, 0.0],
    ])
    sweep = convert_points_to_sweep(points)
    assert np.allclose(sweep.center, [1.0, 2.0, 3.0])
    assert len(sweep.points) == 2
    assert np.allclose(sweep.points[1].position, [7.0, 8.0, 9.0])
    assert np.allclose(sweep.points[0].normal, [1.0, 0.0, 0.0])
    assert all(p.weight == 1.0 for p in sweep.points)


def test_convert_points_to_sweep_rejects_empty_input() -> None:
    with pytest.raises(ConfigurationError):
        convert_points_to_sweep(np.zeros((0, 6)))


def test_average_distance() -> None:
    sweep = Sweep((0.0, 0.0, 0.0), [SweepPoint((3.0, 4.0, 0.0), (0, 0, 1)),
                                    SweepPoint((0.0, 0.0, 2.0), (0, 0, 1))])
    assert compute_average_distance([sweep]) == pytest.approx(3.5)


def test_average_distance_without_points_falls_back_to_one() -> None:
    assert compute_average_distance([Sweep((1.0, 1.0, 1.0))]) == 1.0
    assert compute_average_distance([]) == 1.0


def test_compute_frame_percentile_ranges() -> None:
    frame = compute_frame([_line_sweep()], 50.0)
    assert frame.unit == pytest.approx(1.0)
    # x: 1st/99th percentile = 1 and 99, widened by 5% of 98
    assert frame.ranges[0][0] == pytest.approx(1.0 - 4.9)
    assert frame.ranges[0][1] == pytest.approx(99.0 + 4.9)
    assert frame.ranges[1][0] == pytest.approx(0.0 - 2.45)
    assert frame.ranges[1][1] == pytest.approx(49.0 + 2.45)
    assert frame.size == (108, 54, 0)
    assert np.allclose(frame.axes, np.eye(3))


def test_compute_frame_caps_resolution() -> None:
    frame = compute_frame([_line_sweep()], 5.0)
    assert max(frame.width, frame.height) <= MAX_FRAME_RESOLUTION
    assert frame.width == MAX_FRAME_RESOLUTION
    assert frame.unit > 0.1


def test_resolution_cap_below_twice_the_limit() -> None:
    # unit 0.13475 gives an 800-cell wide frame before the cap
    frame = compute_frame([_line_sweep()], 107.8 * 50.0 / 800.0)
    assert max(frame.width, frame.height) <= MAX_FRAME_RESOLUTION
    assert frame.width >= MAX_FRAME_RESOLUTION - 1


def test_frame_dict_round_trip_keeps_geometry() -> None:
    frame = Frame((10, 8), 0.5, ranges=[[0, 5], [0, 4], [0, 1]])
    restored = Frame.from_dict(frame.to_dict())
    assert restored.size == (10, 8, 1)
    assert restored.unit == 0.5
    assert np.allclose(restored.ranges, frame.ranges)


def test_coordinate_system_conversions() -> None:
    frame = Frame((10, 8, 1), 0.5, ranges=[[0, 5], [0, 4], [0, 1]])
    coords = CoordinateSystem(frame, subsample=2)
    assert coords.world_to_grid((1.2, 0.7, 0.0)) == (2, 1)
    assert coords.grid_to_world(2, 1) == pytest.approx((1.25, 0.75))
    assert (coords.lattice_width, coords.lattice_height) == (5, 4)
    assert coords.lattice_to_grid(7) == (4, 2)
    assert coords.grid_to_lattice(5, 3) == 7
    assert coords.is_in_grid(9, 7)
    assert not coords.is_in_grid(10, 0)
    with pytest.raises(IndexError):
        coords.lattice_to_grid(20)


def test_rounding_and_flat_index() -> None:
    assert round_half_away(2.5) == 3
    assert round_half_away(-2.5) == -3
    assert round_half_away(0.49) == 0
    assert flat_index(10, 3, 2) == 23
