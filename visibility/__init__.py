# ================================
# file: visibility/__init__.py
# ================================
"""Visibility computation and weighted visibility signatures."""
from .visibility import VisibilityComputer
from .signature import (
    encode_weighted_visibility, signature_distance, SignatureMatrix,
)


__all__ = ["VisibilityComputer", "encode_weighted_visibility", "signature_distance", "SignatureMatrix"]
