"""Retry with backoff and jitter.

Wrap any sync or async operation so transient failures are retried with a
growing, randomized delay.

Example:
    >>> from jitterbug.runtime.retry import retry, DecorrelatedJitter
    >>>
    >>> @retry(
    ...     max_attempts=5,
    ...     delay=200,
    ...     backoff="exponential",
    ...     jitter_config=DecorrelatedJitter(max_delay=10_000),
    ...     on_retry=lambda err, attempt, wait_ms: print(f"#{attempt} {err}, waiting {wait_ms:.0f}ms"),
    ... )
    ... async def fetch_orders(account_id: str) -> list[dict]:
    ...     return await api.get(f"/accounts/{account_id}/orders")
"""

from .backoff import (
    Backoff,
    BackoffStrategy,
    ExponentialBackoff,
    FixedBackoff,
    LinearBackoff,
    backoff_for,
    calculate_delay,
)
from .jitter import (
    DecorrelatedJitter,
    EqualJitter,
    FixedJitter,
    FullJitter,
    JitterConfig,
    NoJitter,
    RandomJitter,
    calculate_decorrelated_jitter,
    calculate_equal_jitter,
    calculate_fixed_jitter,
    calculate_full_jitter,
    calculate_random_jitter,
    jitter_from_mapping,
)
from .policy import (
    AttemptState,
    RetryOptions,
    execute_with_retry,
    execute_with_retry_sync,
    retry,
    wrap_with_retry,
)
from .validation import apply_jitter

__all__ = [
    # Backoff strategies
    "Backoff",
    "BackoffStrategy",
    "ExponentialBackoff",
    "LinearBackoff",
    "FixedBackoff",
    "backoff_for",
    "calculate_delay",
    # Jitter
    "JitterConfig",
    "NoJitter",
    "EqualJitter",
    "FullJitter",
    "FixedJitter",
    "RandomJitter",
    "DecorrelatedJitter",
    "jitter_from_mapping",
    "calculate_equal_jitter",
    "calculate_full_jitter",
    "calculate_fixed_jitter",
    "calculate_random_jitter",
    "calculate_decorrelated_jitter",
    "apply_jitter",
    # Loop
    "AttemptState",
    "RetryOptions",
    "retry",
    "wrap_with_retry",
    "execute_with_retry",
    "execute_with_retry_sync",
]
