# ================================
# file: gui/__init__.py
# ================================
from gui.visualizer import Visualizer, save_overview

__all__ = ["Visualizer", "save_overview"]
