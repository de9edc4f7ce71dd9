"""Runtime - Execution flow, control, and monitoring.

Contains: retry, concurrency, observability.
"""

from __future__ import annotations

__all__ = [
    # Retry
    "Backoff", "BackoffStrategy", "ExponentialBackoff", "LinearBackoff", "FixedBackoff",
    "backoff_for", "calculate_delay",
    "JitterConfig", "NoJitter", "EqualJitter", "FullJitter", "FixedJitter", "RandomJitter", "DecorrelatedJitter",
    "jitter_from_mapping", "apply_jitter",
    "calculate_equal_jitter", "calculate_full_jitter", "calculate_fixed_jitter",
    "calculate_random_jitter", "calculate_decorrelated_jitter",
    "AttemptState", "RetryOptions", "wrap_with_retry", "execute_with_retry", "execute_with_retry_sync",
    # Concurrency
    "sleep", "sleep_sync",
    # Observability
    "BoundLogger", "ConsoleRenderer", "JsonRenderer", "LogEntry", "LogRenderer", "NoOpRenderer",
    "configure_logging", "configure_from_settings", "get_logger", "log_context",
]

_RETRY = frozenset(__all__[:__all__.index("sleep")])
_CONCURRENCY = frozenset({"sleep", "sleep_sync"})


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in _RETRY:
        from . import retry
        return getattr(retry, name)

    if name in _CONCURRENCY:
        from . import concurrency
        return getattr(concurrency, name)

    if name in __all__:
        from . import observability
        return getattr(observability, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
