# ================================
# file: core/__init__.py
# ================================
"""
Core Package

Exports fundamental types, configuration, errors and coordinate utilities.
"""
from core.types import (
    Frame, Sweep, SweepPoint, VisibilitySignature, ClusteringResult, DoorDetectionResult,
)
from core.errors import (
    DoorDetectionError, ConfigurationError, NumericalDegeneracyError, InvariantViolationError,
)
from core.coords import CoordinateSystem, flat_index, round_half_away
from core.frame import (
    convert_points_to_sweep, compute_average_distance, set_ranges, compute_frame,
)
from core.config import (
    # Mask & morphology
    GOOD_FREE_SPACE_EVIDENCE, OPEN_KERNEL_WIDTH, OPEN_REPEAT,

    # Boundary & visibility
    BOUNDARY_SUBSAMPLE_RATIO, CLUSTERING_SUBSAMPLE,
    MARGIN_FROM_BOUNDARY_FOR_VISIBILITY, VISIBILITY_MARGIN,

    # Clustering
    INITIAL_CLUSTER_NUM, MERGE_THRESHOLD, KMEANS_ITERATIONS,
    CLUSTER_MERGE_ROUNDS, CLUSTER_TRIALS,
)

__all__ = [
    # Types
    'Frame', 'Sweep', 'SweepPoint', 'VisibilitySignature',
    'ClusteringResult', 'DoorDetectionResult',

    # Errors
    'DoorDetectionError', 'ConfigurationError',
    'NumericalDegeneracyError', 'InvariantViolationError',

    # Coordinates & frame estimation
    'CoordinateSystem', 'flat_index', 'round_half_away',
    'convert_points_to_sweep', 'compute_average_distance', 'set_ranges', 'compute_frame',

    # Configuration
    'GOOD_FREE_SPACE_EVIDENCE', 'OPEN_KERNEL_WIDTH', 'OPEN_REPEAT',
    'BOUNDARY_SUBSAMPLE_RATIO', 'CLUSTERING_SUBSAMPLE',
    'MARGIN_FROM_BOUNDARY_FOR_VISIBILITY', 'VISIBILITY_MARGIN',
    'INITIAL_CLUSTER_NUM', 'MERGE_THRESHOLD', 'KMEANS_ITERATIONS',
    'CLUSTER_MERGE_ROUNDS', 'CLUSTER_TRIALS',
]
