from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import ConfigurationError
from core.types import Frame
from mapping.mask_builder import MaskBuilder, count_mask


def test_build_excludes_outer_ring() -> None:
    frame = Frame((5, 4, 1), 1.0)
    mask = MaskBuilder().build(frame, np.full(20, 200.0))
    assert mask.shape == (4, 5)
    assert mask[1:-1, 1:-1].all()
    assert not mask[0, :].any() and not mask[-1, :].any()
    assert not mask[:, 0].any() and not mask[:, -1].any()
    assert count_mask(mask) == 6


def test_build_threshold_is_strict() -> None:
    frame = Frame((4, 4, 1), 1.0)
    evidence = np.full((4, 4), 100.0)
    evidence[1, 1] = 100.5
    mask = MaskBuilder(evidence_threshold=100.0).build(frame, evidence)
    assert mask[1, 1]
    assert count_mask(mask) == 1


def test_build_rejects_wrong_evidence_size() -> None:
    with pytest.raises(ConfigurationError):
        MaskBuilder().build(Frame((5, 5, 1), 1.0), np.zeros(24))


def test_even_kernel_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        MaskBuilder(kernel_width=4)


def test_clean_removes_thin_filament_in_place() -> None:
    mask = np.zeros((30, 30), dtype=bool)
    mask[5:25, 2:22] = True      # 20x20 room
    mask[15, 22:28] = True       # 1-cell wide spur
    builder = MaskBuilder(kernel_width=3, open_repeat=20)
    cleaned = builder.clean(mask)
    assert cleaned is mask
    assert not mask[15, 25]
    assert mask[10, 10]
    assert count_mask(mask) == 400


def test_zero_repeat_leaves_mask_untouched() -> None:
    mask = np.zeros((10, 10), dtype=bool)
    mask[4, 2:8] = True
    before = mask.copy()
    MaskBuilder(kernel_width=3, open_repeat=0).clean(mask)
    assert np.array_equal(mask, before)
