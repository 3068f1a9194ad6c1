# ================================
# file: clustering/__init__.py
# ================================
"""Signature clustering: k-medoids with threshold merging."""
from .cluster_merge import VisibilityClusterer


__all__ = ["VisibilityClusterer"]
