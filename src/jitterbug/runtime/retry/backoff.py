"""Backoff strategies for retry loops.

Maps an attempt number to the un-jittered wait before the next retry:
- ExponentialBackoff: doubles each attempt
- LinearBackoff: grows by the base delay each attempt
- FixedBackoff: same delay every attempt

Attempt numbers are 1-indexed (the first failed attempt is attempt 1).
All delays are in milliseconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable


class BackoffStrategy(StrEnum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    FIXED = "fixed"


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation."""

    def delay(self, attempt: int) -> float:
        """Calculate delay in milliseconds after the given failed attempt.

        Args:
            attempt: 1-indexed attempt number that just failed

        Returns:
            Delay in milliseconds before the next attempt
        """
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff.

    Delay = base * 2 ^ (attempt - 1), so attempt 1 waits exactly ``base``.

    Attributes:
        base: Initial delay in milliseconds (default: 1000)
    """

    base: float = 1000.0

    def delay(self, attempt: int) -> float:
        return self.base * 2 ** (attempt - 1)


@dataclass(frozen=True, slots=True)
class LinearBackoff:
    """Linear backoff.

    Delay = base * attempt

    Attributes:
        base: Delay unit in milliseconds (default: 1000)
    """

    base: float = 1000.0

    def delay(self, attempt: int) -> float:
        return self.base * attempt


@dataclass(frozen=True, slots=True)
class FixedBackoff:
    """Fixed delay between retries.

    Simple strategy for rate-limited APIs with known cooldown.
    """

    base: float = 1000.0

    def delay(self, attempt: int) -> float:
        return self.base


_STRATEGIES: dict[str, type[ExponentialBackoff] | type[LinearBackoff] | type[FixedBackoff]] = {
    BackoffStrategy.EXPONENTIAL: ExponentialBackoff,
    BackoffStrategy.LINEAR: LinearBackoff,
    BackoffStrategy.FIXED: FixedBackoff,
}


def is_known_strategy(strategy: object) -> bool:
    return isinstance(strategy, str) and strategy in _STRATEGIES


def backoff_for(strategy: BackoffStrategy | str, base_delay: float) -> Backoff:
    """Resolve a strategy name to a Backoff. Unrecognized names fall back to FixedBackoff."""
    cls = _STRATEGIES.get(strategy, FixedBackoff) if isinstance(strategy, str) else FixedBackoff
    return cls(base_delay)


def calculate_delay(base_delay: float, attempt: int, backoff: BackoffStrategy | str = BackoffStrategy.EXPONENTIAL) -> float:
    """Un-jittered wait in milliseconds after ``attempt`` failed.

    Unrecognized strategies behave like ``fixed``.

    Example:
        >>> calculate_delay(100, 3, "exponential")
        400
        >>> calculate_delay(100, 3, "linear")
        300
    """
    return backoff_for(backoff, base_delay).delay(attempt)
