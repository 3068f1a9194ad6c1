# ================================
# file: mapping/__init__.py
# ================================
"""
Mapping Package

Exports:
- MaskBuilder: evidence threshold + morphological cleanup
- find_boundary / subsample_boundary: mask frontier extraction
- DistanceFieldBuilder: geodesic distance to the boundary
"""
from mapping.mask_builder import MaskBuilder, count_mask
from mapping.boundary import boundary_mask, find_boundary, subsample_boundary
from mapping.distance_field import DistanceFieldBuilder, compute_distance_to_boundary

__all__ = [
    'MaskBuilder',
    'count_mask',
    'boundary_mask',
    'find_boundary',
    'subsample_boundary',
    'DistanceFieldBuilder',
    'compute_distance_to_boundary',
]
