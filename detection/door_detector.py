# ================================
# file: detection/door_detector.py
# ================================
"""Door detection pipeline.
Wires mask building, boundary extraction, distance field, visibility and
signature clustering into one call, with optional diagnostic dumps.

Pipeline:
    evidence -> mask -> open -> boundary -> subsample -> distance field
             -> visibility (lattice) -> signatures -> N x (init + cluster/merge)
"""
from __future__ import annotations
import os
from typing import List, Optional

import numpy as np

from core.config import (
    GOOD_FREE_SPACE_EVIDENCE, OPEN_KERNEL_WIDTH, OPEN_REPEAT,
    BOUNDARY_SUBSAMPLE_RATIO, CLUSTERING_SUBSAMPLE,
    MARGIN_FROM_BOUNDARY_FOR_VISIBILITY, VISIBILITY_MARGIN,
    INITIAL_CLUSTER_NUM, MERGE_THRESHOLD, KMEANS_ITERATIONS,
    CLUSTER_MERGE_ROUNDS, CLUSTER_TRIALS, MEDOID_CHUNK_ROWS,
    DEBUG_MASK_BEFORE_OPEN, DEBUG_MASK_AFTER_OPEN, DEBUG_CLUSTER_PATTERN, DEBUG_OVERVIEW_PNG,
)
from core.errors import ConfigurationError
from core.types import ClusteringResult, DoorDetectionResult, Frame
from mapping.mask_builder import MaskBuilder
from mapping.boundary import find_boundary, subsample_boundary
from mapping.distance_field import DistanceFieldBuilder
from visibility.visibility import VisibilityComputer
from visibility.signature import encode_weighted_visibility, SignatureMatrix
from clustering.cluster_merge import VisibilityClusterer
from appio.raster import write_mask_pgm, write_rgb_ppm, make_palette, render_cluster_image


class DoorDetector:
    """Segments free space into visibility regions; doorways sit between regions."""

    def __init__(self,
                 evidence_threshold: float = GOOD_FREE_SPACE_EVIDENCE,
                 kernel_width: int = OPEN_KERNEL_WIDTH,
                 open_repeat: int = OPEN_REPEAT,
                 boundary_ratio: float = BOUNDARY_SUBSAMPLE_RATIO,
                 subsample: int = CLUSTERING_SUBSAMPLE,
                 min_boundary_distance: float = MARGIN_FROM_BOUNDARY_FOR_VISIBILITY,
                 visibility_margin: int = VISIBILITY_MARGIN,
                 initial_clusters: int = INITIAL_CLUSTER_NUM,
                 merge_threshold: float = MERGE_THRESHOLD,
                 kmeans_iterations: int = KMEANS_ITERATIONS,
                 rounds: int = CLUSTER_MERGE_ROUNDS,
                 trials: int = CLUSTER_TRIALS,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None,
                 debug_dir: Optional[str] = None,
                 overview: bool = False,
                 logger_func=None,
                 log_file=None) -> None:
        if trials < 1:
            raise ConfigurationError(f"trials must be >= 1, got {trials}")
        self.logger_func = logger_func
        self.log_file = log_file
        self.boundary_ratio = float(boundary_ratio)
        self.subsample = int(subsample)
        self.initial_clusters = int(initial_clusters)
        self.trials = int(trials)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        # 调色板用独立的随机源, 不影响聚类的随机序列
        self.palette_seed = 0 if seed is None else int(seed)
        self.debug_dir = debug_dir
        self.overview = overview

        self.mask_builder = MaskBuilder(evidence_threshold, kernel_width, open_repeat,
                                        logger_func=logger_func, log_file=log_file)
        self.distance_builder = DistanceFieldBuilder(logger_func, log_file)
        self.visibility = VisibilityComputer(subsample, min_boundary_distance, visibility_margin,
                                             logger_func=logger_func, log_file=log_file)
        self.clusterer = VisibilityClusterer(merge_threshold, kmeans_iterations, rounds,
                                             MEDOID_CHUNK_ROWS, logger_func=logger_func, log_file=log_file)

    def _log(self, message: str, module: str = "DOOR_DETECT") -> None:
        """Log message using the provided logger function"""
        if self.logger_func and self.log_file:
            self.logger_func(self.log_file, message, module)
        else:
            print(f"[{module}] {message}")

    def _debug_path(self, name: str) -> Optional[str]:
        if not self.debug_dir:
            return None
        os.makedirs(self.debug_dir, exist_ok=True)
        return os.path.join(self.debug_dir, name)

    def detect(self, frame: Frame, free_space_evidence) -> DoorDetectionResult:
        """Run the whole pipeline on one evidence grid."""
        width, height = frame.width, frame.height
        self._log(f"开始检测: frame={width}x{height}, subsample={self.subsample}, trials={self.trials}")

        # 1) mask + cleanup
        mask = self.mask_builder.build(frame, free_space_evidence)
        path = self._debug_path(DEBUG_MASK_BEFORE_OPEN)
        if path:
            write_mask_pgm(path, mask)
        self.mask_builder.clean(mask)
        path = self._debug_path(DEBUG_MASK_AFTER_OPEN)
        if path:
            write_mask_pgm(path, mask)
        if not mask.any():
            raise ConfigurationError("Mask is empty: no cell above the free-space evidence threshold")

        # 2) boundary
        boundary = find_boundary(mask)
        self._log(f"Boundary: {len(boundary)} cells")
        boundary = subsample_boundary(boundary, self.rng, self.boundary_ratio)
        self._log(f"Boundary subsampled: {len(boundary)} cells (ratio={self.boundary_ratio})")

        # 3) distance field
        distance = self.distance_builder.build(mask)

        # 4) visibility + signatures
        visibility = self.visibility.compute(mask, boundary, distance)
        signatures = encode_weighted_visibility(visibility, boundary, width, self.subsample)
        matrix = SignatureMatrix(signatures, len(boundary))

        # 5) clustering trials
        results: List[ClusteringResult] = []
        for t in range(self.trials):
            clustering = self.clusterer.run(matrix, self.initial_clusters, self.rng)
            self._log(f"Trial {t}: {clustering.cluster_count()} clusters, "
                      f"{clustering.member_count()} cells, centers={clustering.centers}")
            path = self._debug_path(DEBUG_CLUSTER_PATTERN.format(t))
            if path:
                palette = make_palette(clustering.cluster_count(),
                                       np.random.default_rng([self.palette_seed, t]))
                image = render_cluster_image(width, height, self.subsample,
                                             clustering.centers, clustering.clusters, palette)
                write_rgb_ppm(path, image)
            results.append(clustering)

        result = DoorDetectionResult(frame, self.subsample, mask, boundary, distance,
                                     visibility, signatures, results)
        path = self._debug_path(DEBUG_OVERVIEW_PNG) if self.overview else None
        if path:
            from gui.visualizer import save_overview
            save_overview(path, result, logger_func=self.logger_func, log_file=self.log_file)
        return result
