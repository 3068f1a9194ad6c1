# ================================
# file: visibility/signature.py
# ================================
"""
Visibility signatures and the distance between them.

A signature is the set of boundary points visible from a cell, weighted by
inverse distance and normalized to sum to 1. The distance between two
signatures is half the weight that does not find a matching boundary index on
the other side, so it lies in [0, 1]; merge thresholds are tuned on that scale.
"""
from __future__ import annotations
from typing import List, Sequence, Tuple
import numpy as np
from scipy import sparse

from core.config import CLUSTERING_SUBSAMPLE
from core.errors import NumericalDegeneracyError
from core.types import VisibilitySignature


def encode_weighted_visibility(visibility: Sequence[Sequence[int]],
                               boundary: Sequence[Tuple[int, int]],
                               width: int,
                               subsample: int = CLUSTERING_SUBSAMPLE) -> List[VisibilitySignature]:
    """Turn visible-index lists into inverse-distance weighted signatures.

    weight = 1 / (|cell - boundary point| + 1), then normalized per cell.
    Cells with nothing visible stay empty.
    """
    lattice_w = width // subsample
    boundary_xy = np.asarray(boundary, dtype=np.float64).reshape(-1, 2)
    signatures: List[VisibilitySignature] = []
    for index, visible in enumerate(visibility):
        if len(visible) == 0:
            signatures.append(VisibilitySignature())
            continue
        sub_y, sub_x = divmod(index, lattice_w)
        cell = np.array([sub_x * subsample, sub_y * subsample], dtype=np.float64)
        ids = np.asarray(visible, dtype=np.int64)
        distances = np.linalg.norm(boundary_xy[ids] - cell, axis=1)
        weights = 1.0 / (distances + 1.0)
        weight_sum = float(weights.sum())
        if not np.isfinite(weight_sum) or weight_sum <= 0.0:
            raise NumericalDegeneracyError(
                f"Signature weights of lattice cell {index} sum to {weight_sum}")
        order = np.argsort(ids, kind="stable")
        signatures.append(VisibilitySignature(ids[order], weights[order] / weight_sum))
    return signatures


def signature_distance(lhs: VisibilitySignature, rhs: VisibilitySignature) -> float:
    """Half the sum of unmatched weight between two signatures.

    Same result as a merge scan over both sorted index lists: a shared index
    contributes nothing, an index on one side only contributes its weight.
    """
    _, lhs_hit, rhs_hit = np.intersect1d(lhs.indices, rhs.indices,
                                         assume_unique=True, return_indices=True)
    lhs_unmatched = np.ones(len(lhs), dtype=bool)
    lhs_unmatched[lhs_hit] = False
    rhs_unmatched = np.ones(len(rhs), dtype=bool)
    rhs_unmatched[rhs_hit] = False
    distance = float(lhs.weights[lhs_unmatched].sum()) + float(rhs.weights[rhs_unmatched].sum())
    # By dividing by 2, the maximum distance is 1.0.
    return distance / 2.0


class SignatureMatrix:
    """All signatures of a lattice as sparse rows, for bulk distance matrices.

    For rows a and columns b the distance is
    ((total_a - shared_a) + (total_b - shared_b)) / 2, where shared_a is the
    weight of a on indices that b also has. It equals signature_distance up
    to floating-point rounding.
    """

    def __init__(self, signatures: Sequence[VisibilitySignature], boundary_size: int) -> None:
        n = len(signatures)
        lengths = np.array([len(s) for s in signatures], dtype=np.int64)
        indptr = np.zeros(n + 1, dtype=np.int64)
        np.cumsum(lengths, out=indptr[1:])
        if n and indptr[-1] > 0:
            cols = np.concatenate([s.indices for s in signatures if len(s)])
            data = np.concatenate([s.weights for s in signatures if len(s)])
        else:
            cols = np.zeros(0, dtype=np.int64)
            data = np.zeros(0, dtype=np.float64)
        shape = (n, max(int(boundary_size), 1))
        self.weights = sparse.csr_matrix((data, cols, indptr), shape=shape)
        self.support = sparse.csr_matrix((np.ones_like(data), cols, indptr), shape=shape)
        self.totals = np.array([float(s.weights.sum()) for s in signatures], dtype=np.float64)
        self.signatures = signatures

    def __len__(self) -> int:
        return len(self.signatures)

    def pairwise(self, rows: Sequence[int], cols: Sequence[int]) -> np.ndarray:
        """Dense (len(rows), len(cols)) distance matrix."""
        rows = np.asarray(rows, dtype=np.int64)
        cols = np.asarray(cols, dtype=np.int64)
        if rows.size == 0 or cols.size == 0:
            return np.zeros((rows.size, cols.size), dtype=np.float64)
        shared_rows = (self.weights[rows] @ self.support[cols].T).toarray()
        shared_cols = (self.support[rows] @ self.weights[cols].T).toarray()
        unmatched_rows = self.totals[rows][:, None] - shared_rows
        unmatched_cols = self.totals[cols][None, :] - shared_cols
        distances = (unmatched_rows + unmatched_cols) / 2.0
        np.maximum(distances, 0.0, out=distances)
        # a signature is always at distance 0 from itself
        distances[rows[:, None] == cols[None, :]] = 0.0
        return distances

    def distance(self, a: int, b: int) -> float:
        return signature_distance(self.signatures[a], self.signatures[b])
