# ================================
# file: core/types.py
# ================================
"""Shared data structures for frames, sweeps, visibility signatures and results.
Use minimal typing: Tuple/Optional/List/Sequence only.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import numpy as np


class Frame:
    """Top-down grid geometry used to rasterize scan evidence.


    Attributes
    -----------
    size : [width, height, depth] in cells
    unit : physical length per cell
    ranges : 3x2 array of (min, max) per axis
    axes : 3x3 array, one projection basis vector per row
    """
    __slots__ = ("size", "unit", "ranges", "axes")


    def __init__(self, size: Sequence[int], unit: float,
        ranges: Optional[Sequence[Sequence[float]]] = None,
        axes: Optional[Sequence[Sequence[float]]] = None) -> None:
        size = [int(s) for s in size]
        if len(size) == 2:
            size.append(1)
        self.size = tuple(size)
        self.unit = float(unit)
        self.ranges = np.zeros((3, 2)) if ranges is None else np.asarray(ranges, dtype=float).reshape(3, 2)
        self.axes = np.eye(3) if axes is None else np.asarray(axes, dtype=float).reshape(3, 3)


    @property
    def width(self) -> int:
        return self.size[0]


    @property
    def height(self) -> int:
        return self.size[1]


    def to_dict(self) -> dict:
        return {
            "size": list(self.size),
            "unit": self.unit,
            "ranges": self.ranges.tolist(),
            "axes": self.axes.tolist(),
        }


    @classmethod
    def from_dict(cls, data: dict) -> "Frame":
        return cls(data["size"], data.get("unit", 1.0), data.get("ranges"), data.get("axes"))




class SweepPoint:
    """One scan sample: position, normal and weight."""
    __slots__ = ("position", "normal", "weight")


    def __init__(self, position: Sequence[float], normal: Sequence[float], weight: float = 1.0) -> None:
        self.position = np.asarray(position, dtype=float)
        self.normal = np.asarray(normal, dtype=float)
        self.weight = float(weight)




class Sweep:
    """Scan origin plus its samples.


    Parameters
    ----------
    center : Sequence[float]
    Scan origin in world coordinates.
    points : Sequence[SweepPoint]
    Samples seen from the origin.
    """
    __slots__ = ("center", "points")


    def __init__(self, center: Sequence[float], points: Sequence[SweepPoint] = ()) -> None:
        self.center = np.asarray(center, dtype=float)
        self.points = list(points)


    def positions(self) -> np.ndarray:
        if not self.points:
            return np.zeros((0, 3))
        return np.array([p.position for p in self.points], dtype=float)




class VisibilitySignature:
    """Sparse, normalized, inverse-distance weighted histogram over boundary indices.

    ``indices`` is strictly increasing; ``weights`` sums to 1 unless the
    signature is empty.
    """
    __slots__ = ("indices", "weights")


    def __init__(self, indices: Sequence[int] = (), weights: Sequence[float] = ()) -> None:
        self.indices = np.asarray(indices, dtype=np.int64)
        self.weights = np.asarray(weights, dtype=np.float64)


    def __len__(self) -> int:
        return int(self.indices.shape[0])


    def is_empty(self) -> bool:
        return self.indices.shape[0] == 0


    def as_pairs(self) -> List[Tuple[int, float]]:
        return [(int(i), float(w)) for i, w in zip(self.indices, self.weights)]




class ClusteringResult:
    """Final centers (lattice indices) and membership lists of one cluster/merge run."""
    __slots__ = ("centers", "clusters")


    def __init__(self, centers: Sequence[int], clusters: Sequence[Sequence[int]]) -> None:
        self.centers = [int(c) for c in centers]
        self.clusters = [[int(i) for i in cluster] for cluster in clusters]


    def cluster_count(self) -> int:
        return len(self.clusters)


    def member_count(self) -> int:
        return sum(len(c) for c in self.clusters)




class DoorDetectionResult:
    """Everything one detection run produced, including intermediate grids.

    ``trials`` holds one ClusteringResult per random restart; ``clustering``
    is the first of them.
    """
    __slots__ = ("frame", "subsample", "mask", "boundary", "distance_to_boundary",
                 "visibility", "signatures", "trials")


    def __init__(self, frame: Frame, subsample: int, mask: np.ndarray,
        boundary: List[Tuple[int, int]], distance_to_boundary: np.ndarray,
        visibility: List[List[int]], signatures: List[VisibilitySignature],
        trials: List[ClusteringResult]) -> None:
        self.frame = frame
        self.subsample = int(subsample)
        self.mask = mask
        self.boundary = boundary
        self.distance_to_boundary = distance_to_boundary
        self.visibility = visibility
        self.signatures = signatures
        self.trials = trials


    @property
    def clustering(self) -> Optional[ClusteringResult]:
        return self.trials[0] if self.trials else None


    @property
    def lattice_shape(self) -> Tuple[int, int]:
        """(height, width) of the coarse lattice."""
        return (self.frame.height // self.subsample, self.frame.width // self.subsample)
