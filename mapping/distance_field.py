# ================================
# file: mapping/distance_field.py
# ================================
from __future__ import annotations
from typing import List, Tuple
import math, heapq
import numpy as np

from mapping.boundary import boundary_mask

SQRT2 = math.sqrt(2.0)


class DistanceFieldBuilder:
    """Geodesic distance to the nearest boundary cell inside the mask.
    Multi-source Dijkstra over the 8-neighbour grid, restricted to occupied cells,
    with Euclidean step weights (1 orthogonal, sqrt(2) diagonal).
    Cells that are not occupied, or not reachable, keep +inf.
    """
    # 8-邻域及步长
    NEIGHBORS: List[Tuple[int, int, float]] = [
        (dx, dy, SQRT2 if dx != 0 and dy != 0 else 1.0)
        for dy in (-1, 0, 1) for dx in (-1, 0, 1) if not (dx == 0 and dy == 0)
    ]

    def __init__(self, logger_func=None, log_file=None) -> None:
        self.logger_func = logger_func
        self.log_file = log_file

    def _log_debug(self, message: str) -> None:
        """Add debug message to log and integrate with main log_to_file system"""
        if self.logger_func and self.log_file:
            self.logger_func(self.log_file, message, "DIST")
        else:
            print(f"[DIST] {message}")

    def build(self, mask: np.ndarray) -> np.ndarray:
        H, W = mask.shape
        dist = np.full((H, W), np.inf, dtype=np.float64)

        seeds = boundary_mask(mask)
        dist[seeds] = 0.0
        ys, xs = np.nonzero(seeds)
        water_front = [(0.0, int(y), int(x)) for y, x in zip(ys, xs)]
        heapq.heapify(water_front)

        pops = 0
        while water_front:
            score, y, x = heapq.heappop(water_front)
            if score > dist[y, x]:
                continue  # stale entry
            pops += 1
            for dx, dy, step in self.NEIGHBORS:
                nx, ny = x + dx, y + dy
                if not (0 <= nx < W and 0 <= ny < H):
                    continue
                if not mask[ny, nx]:
                    continue
                new_score = score + step
                if new_score < dist[ny, nx]:
                    dist[ny, nx] = new_score
                    heapq.heappush(water_front, (new_score, ny, nx))

        reached = np.isfinite(dist)
        max_d = float(dist[reached].max()) if reached.any() else 0.0
        self._log_debug(f"Distance field: seeds={len(ys)}, settled={pops}, max={max_d:.2f}")
        return dist


def compute_distance_to_boundary(mask: np.ndarray, logger_func=None, log_file=None) -> np.ndarray:
    return DistanceFieldBuilder(logger_func, log_file).build(mask)
