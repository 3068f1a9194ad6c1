# ================================
# file: appio/__init__.py
# ================================
from appio.logger import DataLogger, log_to_file, cluster_labels
from appio.raster import write_mask_pgm, write_rgb_ppm, make_palette, render_cluster_image

__all__ = ["DataLogger", "log_to_file", "cluster_labels",
           "write_mask_pgm", "write_rgb_ppm", "make_palette", "render_cluster_image"]
