"""Foundation - Core building blocks for jitterbug.

Contains: error handling, config.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "JitterbugError", "ConfigValidationError", "JitterInvariantError",
    "format_validation_error",
    # Config
    "JitterbugSettings", "get_settings", "clear_settings_cache", "LoggingSettings", "RetrySettings",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("ErrorCode", "JitterbugError", "ConfigValidationError", "JitterInvariantError", "format_validation_error"):
        from . import errors
        return getattr(errors, name)

    if name in ("JitterbugSettings", "get_settings", "clear_settings_cache", "LoggingSettings", "RetrySettings"):
        from . import config
        return getattr(config, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
