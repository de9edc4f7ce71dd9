"""Jitter strategies that randomize retry delays.

Each calculator returns an amount in milliseconds that the retry loop adds
on top of the backoff delay. Spreading delays out keeps many clients that
failed together from retrying together.

Every calculator accepts an optional ``rand`` source returning floats in
[0, 1); it defaults to ``random.random``. Pass a fixed source for
deterministic results.

Reference: https://aws.amazon.com/blogs/architecture/exponential-backoff-and-jitter/
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from jitterbug.foundation.errors import ConfigValidationError

Rand = Callable[[], float]


def _draw(rand: Rand | None) -> float:
    return (rand or random.random)()


def calculate_equal_jitter(base_delay_ms: float, rand: Rand | None = None) -> float:
    """Half of the delay fixed, the other half random. Result in [base/2, base]."""
    half = base_delay_ms / 2
    return half + _draw(rand) * half


def calculate_full_jitter(min_delay_ms: float, max_delay_ms: float, rand: Rand | None = None) -> float:
    """Uniformly random delay in [min, max)."""
    return min_delay_ms + _draw(rand) * (max_delay_ms - min_delay_ms)


def calculate_fixed_jitter(base_delay_ms: float, jitter_amount: float) -> float:
    """Subtract a constant from the delay, never going below zero. Deterministic."""
    return max(0.0, base_delay_ms - jitter_amount)


def calculate_random_jitter(base_delay_ms: float, jitter_fraction: float, rand: Rand | None = None) -> float:
    """Swing the delay up or down by at most ``jitter_fraction`` (0.2 = ±20%), clamped at zero."""
    swing = (_draw(rand) * 2 - 1) * jitter_fraction
    return max(0.0, base_delay_ms * (1 + swing))


def calculate_decorrelated_jitter(
    base_delay_ms: float, max_delay_ms: float, prev_delay_ms: float = 0.0, rand: Rand | None = None,
) -> float:
    """AWS-style decorrelated jitter.

    Picks a delay between ``base`` and three times the previous delay, then
    caps it at ``max_delay_ms``. The caller threads the previous result back
    in on the next attempt.
    """
    upper = max(base_delay_ms, prev_delay_ms * 3)
    return min(max_delay_ms, base_delay_ms + _draw(rand) * (upper - base_delay_ms))


# ─────────────────────────────────────────────────────────────────────────────
# Jitter configuration variants
# ─────────────────────────────────────────────────────────────────────────────
# Plain data: nothing is checked on construction. apply_jitter() validates
# each field when the variant is used.


@dataclass(frozen=True, slots=True)
class NoJitter:
    type: ClassVar[str] = "none"


@dataclass(frozen=True, slots=True)
class EqualJitter:
    type: ClassVar[str] = "equal"


@dataclass(frozen=True, slots=True)
class FullJitter:
    min: float
    max: float
    type: ClassVar[str] = "full"


@dataclass(frozen=True, slots=True)
class FixedJitter:
    amount: float
    type: ClassVar[str] = "fixed"


@dataclass(frozen=True, slots=True)
class RandomJitter:
    fraction: float
    type: ClassVar[str] = "random"


@dataclass(frozen=True, slots=True)
class DecorrelatedJitter:
    max_delay: float
    type: ClassVar[str] = "decorrelated"


JitterConfig = NoJitter | EqualJitter | FullJitter | FixedJitter | RandomJitter | DecorrelatedJitter

_VARIANTS: dict[str, type[JitterConfig]] = {
    cls.type: cls for cls in (NoJitter, EqualJitter, FullJitter, FixedJitter, RandomJitter, DecorrelatedJitter)
}

# camelCase spellings accepted from JSON payloads
_ALIASES = {"maxDelay": "max_delay"}


def jitter_from_mapping(data: Mapping[str, Any]) -> JitterConfig:
    """Build a jitter variant from ``{"type": ..., **fields}``.

    Field values are passed through untouched; range checks happen when the
    config is applied.

    Raises:
        ConfigValidationError: Unknown ``type`` or fields that don't belong to it
    """
    kind = data.get("type")
    if (cls := _VARIANTS.get(kind) if isinstance(kind, str) else None) is None:
        raise ConfigValidationError(f"Unknown jitter type: {kind}", field="type", value=kind)
    fields = {_ALIASES.get(k, k): v for k, v in data.items() if k != "type"}
    try:
        return cls(**fields)
    except TypeError as e:
        raise ConfigValidationError(f"Invalid fields for {kind} jitter: {sorted(fields)}",
                                    field="type", value=kind, variant=kind) from e
