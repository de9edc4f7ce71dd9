"""Jitterbug - Retry with backoff and jitter for flaky operations.

Wraps sync or async operations so transient failures are retried after a
growing, randomized delay. Jitter keeps many clients that failed together
from retrying together.

Quick Start:
    >>> from jitterbug import retry
    >>>
    >>> @retry(max_attempts=5, delay=100, jitter_config={"type": "equal"})
    ... async def fetch(url: str) -> bytes:
    ...     async with session.get(url) as resp:
    ...         resp.raise_for_status()
    ...         return await resp.read()

Observing retries:
    >>> def log_retry(error: BaseException, attempt: int, wait_ms: float) -> None:
    ...     print(f"attempt {attempt} failed ({error}); retrying in {wait_ms:.0f}ms")
    >>>
    >>> send = retry(send_message, max_attempts=3, backoff="linear", on_retry=log_retry)

Standalone calculators:
    >>> from jitterbug import calculate_delay, calculate_decorrelated_jitter
    >>> calculate_delay(100, 3, "exponential")
    400
    >>> calculate_decorrelated_jitter(1000, 10_000, prev_delay_ms=2000, rand=lambda: 1.0)
    6000.0

Configuration via environment (pydantic-settings):
    JITTERBUG_RETRY_MAX_ATTEMPTS=5
    JITTERBUG_RETRY_DELAY=250
    JITTERBUG_RETRY_JITTER='{"type": "full", "min": 0, "max": 500}'
    JITTERBUG_LOG_FORMAT=json
"""

from __future__ import annotations

from .foundation.config import JitterbugSettings, clear_settings_cache, get_settings
from .foundation.errors import ConfigValidationError, ErrorCode, JitterbugError, JitterInvariantError
from .runtime.concurrency import sleep, sleep_sync
from .runtime.observability import configure_from_settings, configure_logging, get_logger
from .runtime.retry import (
    Backoff,
    BackoffStrategy,
    DecorrelatedJitter,
    EqualJitter,
    ExponentialBackoff,
    FixedBackoff,
    FixedJitter,
    FullJitter,
    JitterConfig,
    LinearBackoff,
    NoJitter,
    RandomJitter,
    RetryOptions,
    apply_jitter,
    calculate_decorrelated_jitter,
    calculate_delay,
    calculate_equal_jitter,
    calculate_fixed_jitter,
    calculate_full_jitter,
    calculate_random_jitter,
    execute_with_retry,
    execute_with_retry_sync,
    jitter_from_mapping,
    retry,
    wrap_with_retry,
)

__version__ = "0.1.0"

__all__ = [
    # Retry loop
    "retry", "wrap_with_retry", "RetryOptions", "execute_with_retry", "execute_with_retry_sync",
    # Backoff
    "calculate_delay", "BackoffStrategy", "Backoff", "ExponentialBackoff", "LinearBackoff", "FixedBackoff",
    # Jitter
    "JitterConfig", "NoJitter", "EqualJitter", "FullJitter", "FixedJitter", "RandomJitter", "DecorrelatedJitter",
    "jitter_from_mapping", "apply_jitter",
    "calculate_equal_jitter", "calculate_full_jitter", "calculate_fixed_jitter",
    "calculate_random_jitter", "calculate_decorrelated_jitter",
    # Waiting
    "sleep", "sleep_sync",
    # Errors
    "ErrorCode", "JitterbugError", "ConfigValidationError", "JitterInvariantError",
    # Config & logging
    "JitterbugSettings", "get_settings", "clear_settings_cache",
    "configure_logging", "configure_from_settings", "get_logger",
]
