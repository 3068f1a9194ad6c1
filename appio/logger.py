# ================================
# file: appio/logger.py
# ================================
from __future__ import annotations
from typing import List, Optional
from datetime import datetime
import time
import numpy as np

from core.types import DoorDetectionResult


def log_to_file(log_file, message, module="MAIN"):
    """Write message to log file with timestamp and module"""
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    log_entry = f"[{timestamp}] [{module}] {message}\n"
    log_file.write(log_entry)
    log_file.flush()  # Ensure immediate write
    print(log_entry.strip())  # Also print to console


class DataLogger:
    """Simple NPZ logger for detection results."""
    def __init__(self) -> None:
        self.t0 = time.time()
        self.results: List[DoorDetectionResult] = []
        self.times: List[float] = []

    def log_result(self, result: DoorDetectionResult) -> None:
        self.results.append(result)
        self.times.append(time.time() - self.t0)

    @property
    def last(self) -> Optional[DoorDetectionResult]:
        return self.results[-1] if self.results else None

    def save(self, path: str) -> None:
        """Save the last logged result.

        Clusters are stored as a (trials, lattice cells) label array, -1 for
        cells outside every cluster; centers as (trials, max k) padded with -1.
        """
        result = self.last
        if result is None:
            raise ValueError("No detection result to save")
        frame = result.frame
        lattice_h, lattice_w = result.lattice_shape
        labels = cluster_labels(result, lattice_w * lattice_h)
        max_k = max((len(t.centers) for t in result.trials), default=0)
        centers = np.full((len(result.trials), max_k), -1, dtype=np.int64)
        for t, trial in enumerate(result.trials):
            centers[t, :len(trial.centers)] = trial.centers

        np.savez_compressed(
            path,
            elapsed=np.array(self.times, dtype=float),
            frame_size=np.array(frame.size, dtype=np.int64),
            frame_unit=np.array(frame.unit),
            frame_ranges=frame.ranges,
            frame_axes=frame.axes,
            subsample=np.array(result.subsample),
            mask=result.mask,
            boundary=np.array(result.boundary, dtype=np.int64).reshape(-1, 2),
            distance_to_boundary=result.distance_to_boundary,
            centers=centers,
            labels=labels,
        )


def cluster_labels(result: DoorDetectionResult, cell_count: int) -> np.ndarray:
    """(trials, cell_count) int64 array with each lattice cell's cluster id, -1 if none."""
    labels = np.full((len(result.trials), cell_count), -1, dtype=np.int64)
    for t, trial in enumerate(result.trials):
        for c, cluster in enumerate(trial.clusters):
            labels[t, np.asarray(cluster, dtype=np.int64)] = c
    return labels
