# ================================
# file: clustering/cluster_merge.py
# ================================
"""
Cluster/Merge Module - k-medoids over visibility signatures

Cells are grouped by how similar their visibility signatures are. Two phases
alternate for a fixed number of rounds:
- Cluster: k-means style assignment to the closest center, followed by an
  exact medoid update (signatures have no natural average)
- Merge: agglomerate cluster pairs whose centers are closer than a threshold
The last phase is always Cluster so the reported membership matches the
reported centers.

Scaling: the medoid update sums all pairwise distances inside a cluster,
O(n^2) per cluster. This is fine on the subsampled lattice; on full-resolution
grids it becomes the bottleneck. Rows are processed in chunks so memory stays
O(chunk * n).
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple, Union
import numpy as np

from core.config import (
    MERGE_THRESHOLD, KMEANS_ITERATIONS, CLUSTER_MERGE_ROUNDS, MEDOID_CHUNK_ROWS,
)
from core.errors import ConfigurationError, InvariantViolationError
from core.types import ClusteringResult, VisibilitySignature
from visibility.signature import SignatureMatrix


class VisibilityClusterer:
    """Iterative k-medoids with threshold merging over a SignatureMatrix."""

    def __init__(self,
                 merge_threshold: float = MERGE_THRESHOLD,
                 kmeans_iterations: int = KMEANS_ITERATIONS,
                 rounds: int = CLUSTER_MERGE_ROUNDS,
                 chunk_rows: int = MEDOID_CHUNK_ROWS,
                 logger_func=None,
                 log_file=None) -> None:
        if kmeans_iterations < 1:
            raise ConfigurationError(f"kmeans_iterations must be >= 1, got {kmeans_iterations}")
        if rounds < 0:
            raise ConfigurationError(f"rounds must be >= 0, got {rounds}")
        self.merge_threshold = float(merge_threshold)
        self.kmeans_iterations = int(kmeans_iterations)
        self.rounds = int(rounds)
        self.chunk_rows = max(1, int(chunk_rows))
        self.logger_func = logger_func
        self.log_file = log_file

    def _log_debug(self, message: str) -> None:
        if self.logger_func and self.log_file:
            self.logger_func(self.log_file, message, "CLUSTER")
        else:
            print(f"[CLUSTER] {message}")

    # ----------------- 初始化 -----------------
    @staticmethod
    def nonempty_cells(matrix: SignatureMatrix) -> np.ndarray:
        return np.array([i for i, s in enumerate(matrix.signatures) if not s.is_empty()], dtype=np.int64)

    def initial_centers(self, matrix: SignatureMatrix, count: int, rng: np.random.Generator) -> List[int]:
        """Pick `count` distinct random cells among those with a nonempty signature."""
        candidates = self.nonempty_cells(matrix)
        if count < 1:
            raise ConfigurationError(f"Initial cluster count must be >= 1, got {count}")
        if count > candidates.size:
            raise ConfigurationError(
                f"Initial cluster count {count} exceeds the {candidates.size} cells with a visibility signature")
        order = rng.permutation(candidates.size)
        return [int(candidates[i]) for i in order[:count]]

    # ----------------- Cluster 阶段 -----------------
    def assign(self, matrix: SignatureMatrix, centers: Sequence[int]) -> List[List[int]]:
        """Assign every nonempty cell to its closest center (ties: lowest center position)."""
        clusters: List[List[int]] = [[] for _ in centers]
        cells = self.nonempty_cells(matrix)
        if cells.size == 0:
            return clusters
        if len(centers) == 0:
            raise InvariantViolationError("No center to assign cells to")
        for start in range(0, cells.size, self.chunk_rows):
            chunk = cells[start:start + self.chunk_rows]
            distances = matrix.pairwise(chunk, centers)
            closest = np.argmin(distances, axis=1)
            for cell, c in zip(chunk, closest):
                clusters[int(c)].append(int(cell))
        return clusters

    def medoid(self, matrix: SignatureMatrix, members: Sequence[int]) -> int:
        """Member with the smallest sum of squared distances to the other members."""
        members = np.asarray(members, dtype=np.int64)
        if members.size == 1:
            return int(members[0])
        costs = np.zeros(members.size, dtype=np.float64)
        for start in range(0, members.size, self.chunk_rows):
            distances = matrix.pairwise(members[start:start + self.chunk_rows], members)
            costs[start:start + distances.shape[0]] = (distances * distances).sum(axis=1)
        return int(members[int(np.argmin(costs))])

    def update_centers(self, matrix: SignatureMatrix, clusters: Sequence[Sequence[int]],
                       centers: Sequence[int]) -> List[int]:
        """Recompute each center as its cluster's medoid; empty clusters keep their center."""
        new_centers = []
        for c, cluster in enumerate(clusters):
            if len(cluster) == 0:
                new_centers.append(int(centers[c]))
            else:
                new_centers.append(self.medoid(matrix, cluster))
        return new_centers

    def cluster(self, matrix: SignatureMatrix, centers: Sequence[int]) -> Tuple[List[int], List[List[int]]]:
        """Fixed number of assign/update iterations from the given centers."""
        centers = list(centers)
        clusters: List[List[int]] = [[] for _ in centers]
        for _ in range(self.kmeans_iterations):
            clusters = self.assign(matrix, centers)
            centers = self.update_centers(matrix, clusters, centers)
        return centers, clusters

    # ----------------- Merge 阶段 -----------------
    def merge(self, matrix: SignatureMatrix, centers: Sequence[int],
              clusters: Sequence[Sequence[int]]) -> Tuple[bool, List[int], List[List[int]]]:
        """Merge cluster pairs whose centers are closer than merge_threshold.

        Pairs are taken closest first. Once a cluster takes part in a merge,
        every distance involving it is invalidated for the rest of the pass,
        so each slot merges at most once. The higher-indexed cluster of a pair
        is appended to the lower one and removed.
        """
        centers = list(centers)
        clusters = [list(c) for c in clusters]
        k = len(centers)
        if k < 2:
            return False, centers, clusters

        distances = matrix.pairwise(centers, centers)
        distances[np.tril_indices(k)] = np.inf  # upper triangle only (i < j)

        pairs_to_merge: List[Tuple[int, int]] = []
        while True:
            flat = int(np.argmin(distances))
            i, j = divmod(flat, k)
            closest_distance = distances[i, j]
            if not closest_distance < self.merge_threshold:
                break
            pairs_to_merge.append((i, j))
            # Avoid merging these 2 clusters any more in this pass.
            distances[[i, j], :] = np.inf
            distances[:, [i, j]] = np.inf

        if not pairs_to_merge:
            self._log_debug(f"Merge: no pair below {self.merge_threshold} among {k} clusters")
            return False, centers, clusters

        erase_ids = []
        for i, j in pairs_to_merge:
            clusters[i].extend(clusters[j])
            erase_ids.append(j)
        for j in sorted(erase_ids, reverse=True):
            del clusters[j]
            del centers[j]

        centers = self.update_centers(matrix, clusters, centers)
        self._log_debug(f"Merge: {len(pairs_to_merge)} pairs, {k} -> {len(clusters)} clusters")
        return True, centers, clusters

    # ----------------- 主流程 -----------------
    def cluster_merge(self, matrix: SignatureMatrix, centers: Sequence[int]) -> ClusteringResult:
        """Cluster, Merge, Cluster, Merge, ... and a final Cluster."""
        centers = list(centers)
        clusters: List[List[int]] = []
        for t in range(self.rounds):
            centers, clusters = self.cluster(matrix, centers)
            merged, centers, clusters = self.merge(matrix, centers, clusters)
            self._log_debug(f"Round {t}: {len(centers)} clusters")
            if not merged:
                break
        # Last one should be Cluster instead of Merge.
        centers, clusters = self.cluster(matrix, centers)
        return ClusteringResult(centers, clusters)

    def run(self, signatures: Union[SignatureMatrix, Sequence[VisibilitySignature]],
            initial_clusters: int, rng: np.random.Generator,
            boundary_size: Optional[int] = None) -> ClusteringResult:
        """Random initial centers followed by cluster_merge."""
        matrix = self._as_matrix(signatures, boundary_size)
        centers = self.initial_centers(matrix, initial_clusters, rng)
        return self.cluster_merge(matrix, centers)

    @staticmethod
    def _as_matrix(signatures, boundary_size: Optional[int]) -> SignatureMatrix:
        if isinstance(signatures, SignatureMatrix):
            return signatures
        if boundary_size is None:
            boundary_size = 1 + max((int(s.indices[-1]) for s in signatures if len(s)), default=0)
        return SignatureMatrix(signatures, boundary_size)
