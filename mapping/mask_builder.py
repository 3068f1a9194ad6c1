# ================================
# file: mapping/mask_builder.py
# ================================
"""
Occupancy Mask Module

Turns a free-space evidence grid into the boolean interior mask the rest of
the pipeline works on.

Key Features:
- Hard threshold on free-space evidence
- Outer grid ring always excluded
- Repeated binary open to remove thin spurious filaments
"""
from __future__ import annotations
import numpy as np
from scipy.ndimage import binary_opening

from core.config import GOOD_FREE_SPACE_EVIDENCE, OPEN_KERNEL_WIDTH, OPEN_REPEAT
from core.errors import ConfigurationError
from core.types import Frame


class MaskBuilder:
    """Builds and cleans the interior mask for one frame."""

    def __init__(self,
                 evidence_threshold: float = GOOD_FREE_SPACE_EVIDENCE,
                 kernel_width: int = OPEN_KERNEL_WIDTH,
                 open_repeat: int = OPEN_REPEAT,
                 logger_func=None,
                 log_file=None) -> None:
        """
        Args:
            evidence_threshold: Evidence strictly above this marks a cell occupiable
            kernel_width: Width of the square open kernel (odd)
            open_repeat: Number of open passes (stops early once stable)
        """
        if kernel_width < 1 or kernel_width % 2 == 0:
            raise ConfigurationError(f"kernel_width must be a positive odd number, got {kernel_width}")
        if open_repeat < 0:
            raise ConfigurationError(f"open_repeat must be >= 0, got {open_repeat}")
        self.evidence_threshold = float(evidence_threshold)
        self.kernel_width = int(kernel_width)
        self.open_repeat = int(open_repeat)
        self._structure = np.ones((self.kernel_width, self.kernel_width), dtype=bool)
        self.logger_func = logger_func
        self.log_file = log_file

    def build(self, frame: Frame, free_space_evidence) -> np.ndarray:
        """Threshold evidence into a (height, width) bool mask; the outer ring stays False."""
        width, height = frame.width, frame.height
        evidence = np.asarray(free_space_evidence, dtype=np.float64)
        if evidence.size != width * height:
            raise ConfigurationError(
                f"Evidence has {evidence.size} cells, frame expects {width}x{height}={width * height}")
        # row-major: index = y * width + x
        evidence = evidence.reshape(height, width)

        mask = np.zeros((height, width), dtype=bool)
        if width < 3 or height < 3:
            return mask
        mask[1:-1, 1:-1] = evidence[1:-1, 1:-1] > self.evidence_threshold
        self._log_debug(f"阈值掩码: {int(mask.sum())}/{width * height} cells above {self.evidence_threshold}")
        return mask

    def clean(self, mask: np.ndarray) -> np.ndarray:
        """Apply binary open up to open_repeat times, in place. Returns the same array."""
        before = int(mask.sum())
        passes = 0
        for _ in range(self.open_repeat):
            opened = binary_opening(mask, structure=self._structure)
            passes += 1
            if np.array_equal(opened, mask):
                break
            mask[...] = opened
        self._log_debug(f"Open x{passes} (kernel={self.kernel_width}): {before} -> {int(mask.sum())} cells")
        return mask

    def build_clean(self, frame: Frame, free_space_evidence) -> np.ndarray:
        mask = self.build(frame, free_space_evidence)
        return self.clean(mask)

    def _log_debug(self, msg: str) -> None:
        """Log debug message"""
        if self.logger_func and self.log_file:
            self.logger_func(self.log_file, msg, "MASK")
        else:
            print(f"[MASK] {msg}")


def count_mask(mask: np.ndarray) -> int:
    return int(np.count_nonzero(mask))
