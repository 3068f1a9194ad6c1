# ================================
# file: detection/__init__.py
# ================================
"""Door detection pipeline entry point."""
from detection.door_detector import DoorDetector

__all__ = ["DoorDetector"]
