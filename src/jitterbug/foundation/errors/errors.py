"""Error types for retry and jitter handling.

Separates two failure sources so callers can tell them apart:
- ConfigValidationError: a caller supplied an out-of-domain value
- JitterInvariantError: a jitter computation broke its own output range
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Machine-readable classification for jitterbug errors."""
    INVALID_CONFIG = "INVALID_CONFIG"
    JITTER_INVARIANT = "JITTER_INVARIANT"


class JitterbugError(Exception):
    """Base class for all errors raised by jitterbug itself."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigValidationError(JitterbugError, ValueError):
    """A retry or jitter configuration value violates its domain.

    Raised synchronously before any wait is scheduled and never retried.

    Attributes:
        field: Name of the offending option (e.g. ``min``, ``base_delay``)
        value: The rejected value
        variant: Jitter variant being validated, if any
    """

    code = ErrorCode.INVALID_CONFIG

    def __init__(self, message: str, *, field: str | None = None, value: object = None, variant: str | None = None) -> None:
        super().__init__(message)
        self.field, self.value, self.variant = field, value, variant

    @classmethod
    def non_negative(cls, field: str, label: str, value: float, variant: str | None = None) -> Self:
        """Standard rejection for a value that must be a non-negative finite number."""
        return cls(f"Invalid {label}: {_fmt(value)}. Must be a non-negative finite number.",
                   field=field, value=value, variant=variant)


class JitterInvariantError(JitterbugError, ArithmeticError):
    """A jitter calculation produced a value outside its documented range.

    Indicates a defect in the engine rather than a caller mistake.
    """

    code = ErrorCode.JITTER_INVARIANT

    def __init__(self, message: str, *, variant: str, result: object = None) -> None:
        super().__init__(message)
        self.variant, self.result = variant, result


def _fmt(value: object) -> str:
    """Render numbers the way they appear in messages (100 not 100.0, inf as Infinity)."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def format_validation_error(exc: ValidationError, *, context: str = "retry options") -> str:
    """Flatten a pydantic ValidationError into a single line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')} (got {err.get('input')!r})")
    return f"Invalid {context}: " + "; ".join(parts)
