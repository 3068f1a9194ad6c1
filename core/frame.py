# ================================
# file: core/frame.py
# ================================
"""
Frame estimation from scan sweeps.

Builds the top-down axis-aligned grid (Frame) that free-space evidence is
rasterized into:
- sweep construction from a raw point array (first row = scan origin)
- average sample distance (sets the grid unit)
- robust per-axis ranges from projected sample positions
"""
from __future__ import annotations
from typing import Sequence
import numpy as np

from core.config import (
    RANGE_LOW_PERCENT, RANGE_HIGH_PERCENT, RANGE_MARGIN_PERCENT,
    UNIT_FROM_AVERAGE_DISTANCE, MAX_FRAME_RESOLUTION,
)
from core.coords import round_half_away
from core.errors import ConfigurationError
from core.types import Frame, Sweep, SweepPoint


def convert_points_to_sweep(points) -> Sweep:
    """Turn an (N, 6) array of [position, normal] rows into a Sweep.

    The first row is the scan center; every other row becomes a sample with
    weight 1.0.
    """
    arr = np.asarray(points, dtype=float)
    if arr.ndim != 2 or arr.shape[0] == 0:
        raise ConfigurationError("Empty point array, cannot build a sweep")
    if arr.shape[1] < 3:
        raise ConfigurationError(f"Point rows need at least 3 columns, got {arr.shape[1]}")
    center = arr[0, :3]
    samples = []
    for row in arr[1:]:
        normal = row[3:6] if arr.shape[1] >= 6 else np.zeros(3)
        samples.append(SweepPoint(row[:3], normal, 1.0))
    return Sweep(center, samples)


def compute_average_distance(sweeps: Sequence[Sweep], logger_func=None, log_file=None) -> float:
    """Mean distance between every sample and its sweep center (1.0 when there are none)."""
    total = 0.0
    count = 0
    for sweep in sweeps:
        positions = sweep.positions()
        if positions.shape[0] == 0:
            continue
        total += float(np.linalg.norm(positions - sweep.center, axis=1).sum())
        count += positions.shape[0]

    if count == 0:
        msg = "No points in any sweep, falling back to average distance 1.0"
        if logger_func and log_file:
            logger_func(log_file, msg, "FRAME")
        else:
            print(f"[FRAME] {msg}")
        return 1.0
    return total / count


def set_ranges(sweeps: Sequence[Sweep], average_distance: float, frame: Frame) -> Frame:
    """Fill frame.ranges, frame.unit and frame.size from the sweeps (in place, also returned).

    Point weights are ignored. Ranges use the 1st/99th percentile of the
    projections on each axis plus a 5% margin, which keeps stray far samples
    from inflating the grid.
    """
    projections = [[], [], []]
    for sweep in sweeps:
        positions = sweep.positions()
        if positions.shape[0] == 0:
            continue
        for a in range(3):
            projections[a].append(positions @ frame.axes[a])

    ranges = np.zeros((3, 2))
    for a in range(3):
        if not projections[a]:
            raise ConfigurationError("No sweep samples to estimate frame ranges from")
        values = np.sort(np.concatenate(projections[a]))
        n = values.shape[0]
        low = values[n * RANGE_LOW_PERCENT // 100]
        high = values[min(n - 1, n * RANGE_HIGH_PERCENT // 100)]
        margin = (high - low) * RANGE_MARGIN_PERCENT / 100.0
        ranges[a][0] = low - margin
        ranges[a][1] = high + margin

    if average_distance <= 0.0:
        raise ConfigurationError(f"average_distance must be positive, got {average_distance}")
    unit = average_distance / UNIT_FROM_AVERAGE_DISTANCE
    width = round_half_away((ranges[0][1] - ranges[0][0]) / unit)
    height = round_half_away((ranges[1][1] - ranges[1][0]) / unit)
    # depth is not used for the resolution cap
    max_current_resolution = max(width, height)
    if MAX_FRAME_RESOLUTION < max_current_resolution:
        # Float ratio: an integer ratio would leave no cap at all for 601..1199 cells.
        unit *= max_current_resolution / float(MAX_FRAME_RESOLUTION)

    frame.ranges = ranges
    frame.unit = float(unit)
    frame.size = tuple(round_half_away((ranges[a][1] - ranges[a][0]) / unit) for a in range(3))
    return frame


def compute_frame(sweeps: Sequence[Sweep], average_distance: float) -> Frame:
    """Axis-aligned frame (identity axes) covering the sweeps."""
    frame = Frame((0, 0, 0), 1.0, axes=np.eye(3))
    return set_ranges(sweeps, average_distance, frame)
