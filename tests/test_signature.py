from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import NumericalDegeneracyError
from core.types import VisibilitySignature
from visibility.signature import SignatureMatrix, encode_weighted_visibility, signature_distance


def _random_signatures(count: int, boundary_size: int, seed: int = 5):
    rng = np.random.default_rng(seed)
    signatures = [VisibilitySignature()]
    for _ in range(count):
        size = int(rng.integers(1, boundary_size))
        indices = np.sort(rng.choice(boundary_size, size=size, replace=False))
        weights = rng.random(size) + 0.01
        signatures.append(VisibilitySignature(indices, weights / weights.sum()))
    return signatures


def test_partial_overlap_distance() -> None:
    a = VisibilitySignature([0, 1, 2], [0.5, 0.25, 0.25])
    b = VisibilitySignature([1, 2, 3], [0.5, 0.25, 0.25])
    # unmatched: 0.5 on a (index 0), 0.25 on b (index 3)
    assert signature_distance(a, b) == pytest.approx(0.375)
    assert signature_distance(b, a) == pytest.approx(0.375)


def test_identity_and_disjoint_bounds() -> None:
    a = VisibilitySignature([0, 4], [0.3, 0.7])
    b = VisibilitySignature([1, 5, 6], [0.2, 0.2, 0.6])
    assert signature_distance(a, a) == 0.0
    assert signature_distance(a, b) == pytest.approx(1.0)


def test_distance_is_symmetric_and_bounded() -> None:
    signatures = _random_signatures(12, 30)
    for a in signatures:
        for b in signatures:
            d = signature_distance(a, b)
            assert d == signature_distance(b, a)
            assert 0.0 <= d <= 1.0 + 1e-12


def test_matrix_agrees_with_scalar_distance() -> None:
    signatures = _random_signatures(12, 30)
    matrix = SignatureMatrix(signatures, 30)
    ids = list(range(len(signatures)))
    bulk = matrix.pairwise(ids, ids)
    for a in ids:
        assert bulk[a, a] == 0.0
        for b in ids:
            assert bulk[a, b] == pytest.approx(signature_distance(signatures[a], signatures[b]), abs=1e-9)
    assert matrix.distance(1, 2) == signature_distance(signatures[1], signatures[2])


def test_matrix_empty_selection() -> None:
    matrix = SignatureMatrix(_random_signatures(3, 10), 10)
    assert matrix.pairwise([], [0, 1]).shape == (0, 2)


def test_encode_weights_by_inverse_distance() -> None:
    boundary = [(0, 0), (3, 0)]
    # lattice cell 0 is grid cell (0, 0); visible list deliberately unsorted
    signatures = encode_weighted_visibility([[1, 0], []], boundary, width=8, subsample=4)
    first = signatures[0]
    assert list(first.indices) == [0, 1]
    # raw weights 1/(0+1) and 1/(3+1)
    assert np.allclose(first.weights, [0.8, 0.2])
    assert first.weights.sum() == pytest.approx(1.0)
    assert signatures[1].is_empty()


def test_encode_uses_lattice_position() -> None:
    boundary = [(4, 4), (0, 0)]
    # width 8 / subsample 4 -> lattice row of 2; index 3 is cell (4, 4)
    signatures = encode_weighted_visibility([[], [], [], [0]], boundary, width=8, subsample=4)
    assert signatures[3].as_pairs() == [(0, 1.0)]


def test_encode_degenerate_weights_raise() -> None:
    boundary = [(np.nan, 0.0)]
    with pytest.raises(NumericalDegeneracyError):
        encode_weighted_visibility([[0]], boundary, width=4, subsample=4)
