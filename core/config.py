# ================================
# file: core/config.py
# ================================
"""
Global configuration for visibility-based door detection.
All grid quantities are in cells unless noted otherwise.

Organization:
1. Mask & Morphology
2. Boundary Sampling
3. Visibility
4. Clustering & Merging
5. Frame Estimation
6. Diagnostics & Logging
"""
from __future__ import annotations

# ================================
# 1. MASK & MORPHOLOGY
# ================================
GOOD_FREE_SPACE_EVIDENCE: float = 100.0   # Evidence must exceed this to be occupiable
OPEN_KERNEL_WIDTH: int = 9                # Square kernel width for binary open (odd)
OPEN_REPEAT: int = 20                     # Number of open passes (empirical)

# ================================
# 2. BOUNDARY SAMPLING
# ================================
BOUNDARY_SUBSAMPLE_RATIO: float = 0.2     # Fraction of boundary cells kept (20%)

# ================================
# 3. VISIBILITY
# ================================
CLUSTERING_SUBSAMPLE: int = 4             # Lattice stride for visibility queries
MARGIN_FROM_BOUNDARY_FOR_VISIBILITY: float = 5.0  # Skip query cells closer than this to the boundary
VISIBILITY_MARGIN: int = 10               # Ray steps skipped near the query cell (half-cell steps)

# ================================
# 4. CLUSTERING & MERGING
# ================================
INITIAL_CLUSTER_NUM: int = 20             # Random initial centers
MERGE_THRESHOLD: float = 0.5              # Merge clusters whose centers are closer than this
KMEANS_ITERATIONS: int = 10               # Inner k-means iterations (typically converges by 10)
CLUSTER_MERGE_ROUNDS: int = 5             # Outer cluster/merge rounds
CLUSTER_TRIALS: int = 5                   # Independent random restarts per detection
MEDOID_CHUNK_ROWS: int = 1024             # Rows per chunk when summing pairwise distances

# ================================
# 5. FRAME ESTIMATION
# ================================
RANGE_LOW_PERCENT: int = 1                # Lower percentile of projected positions
RANGE_HIGH_PERCENT: int = 99              # Upper percentile of projected positions
RANGE_MARGIN_PERCENT: int = 5             # Margin added on both ends (% of extent)
UNIT_FROM_AVERAGE_DISTANCE: float = 50.0  # unit = average_distance / this
MAX_FRAME_RESOLUTION: int = 600           # Cap on max(width, height) in cells

# ================================
# 6. DIAGNOSTICS & LOGGING
# ================================
DEFAULT_RANDOM_SEED: int = 0              # Seed used by the CLI when none is given
CENTER_MARK_SIZE: int = 2                 # Half-size of the red center square in cluster images
PGM_MAX_VALUE: int = 255                  # Max gray level of text rasters
DEBUG_MASK_BEFORE_OPEN: str = "mask_before_open.pgm"
DEBUG_MASK_AFTER_OPEN: str = "mask_after_open.pgm"
DEBUG_CLUSTER_PATTERN: str = "cluster-{:02d}.ppm"
DEBUG_OVERVIEW_PNG: str = "overview.png"
RESULT_NPZ: str = "door_detection.npz"
