# ================================
# file: core/errors.py
# ================================
"""Typed failures raised by the detection pipeline.

Every stage fails synchronously; a failure aborts the whole invocation.
"""
from __future__ import annotations


class DoorDetectionError(Exception):
    """Base class for all pipeline failures."""


class ConfigurationError(DoorDetectionError, ValueError):
    """Inputs or parameters that make the run meaningless (rejected before work is done)."""


class NumericalDegeneracyError(DoorDetectionError, ArithmeticError):
    """A normalization denominator was zero or not finite."""


class InvariantViolationError(DoorDetectionError, RuntimeError):
    """An internal invariant was broken (e.g. a ray left the grid)."""
