"""Error handling for jitterbug.

- ErrorCode: classification of library errors
- ConfigValidationError: bad retry/jitter configuration (fail fast, never retried)
- JitterInvariantError: jitter engine broke its own output range
"""

from .errors import (
    ConfigValidationError,
    ErrorCode,
    JitterbugError,
    JitterInvariantError,
    format_validation_error,
)

__all__ = [
    "ErrorCode",
    "JitterbugError",
    "ConfigValidationError",
    "JitterInvariantError",
    "format_validation_error",
]
