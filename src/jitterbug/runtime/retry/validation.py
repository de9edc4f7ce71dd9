"""Validated jitter application.

apply_jitter() is the only path the retry loop uses to reach the jitter
calculators. It checks inputs before computing and re-checks the result
afterwards:

- Bad inputs raise ConfigValidationError (caller mistake, never retried)
- Out-of-range results raise JitterInvariantError (engine defect)
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from jitterbug.foundation.errors import ConfigValidationError, JitterbugError, JitterInvariantError

from .jitter import (
    DecorrelatedJitter,
    EqualJitter,
    FixedJitter,
    FullJitter,
    JitterConfig,
    NoJitter,
    RandomJitter,
    Rand,
    calculate_decorrelated_jitter,
    calculate_equal_jitter,
    calculate_fixed_jitter,
    calculate_full_jitter,
    calculate_random_jitter,
    jitter_from_mapping,
)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_non_negative(field: str, label: str, value: Any, variant: str | None = None) -> None:
    """Reject negative, infinite, NaN or non-numeric values."""
    if not _is_number(value) or math.isnan(value) or math.isinf(value) or value < 0:
        raise ConfigValidationError.non_negative(field, label, value, variant)


def _check_result(result: Any, variant: str) -> None:
    if not _is_number(result):
        raise JitterInvariantError(f"Jitter calculation ({variant}) returned non-number: {type(result).__name__}",
                                   variant=variant, result=result)
    if math.isnan(result):
        raise JitterInvariantError(f"Jitter calculation ({variant}) returned NaN", variant=variant, result=result)
    if math.isinf(result):
        raise JitterInvariantError(f"Jitter calculation ({variant}) returned non-finite value: {result}",
                                   variant=variant, result=result)
    if result < 0:
        raise JitterInvariantError(f"Jitter calculation ({variant}) returned negative value: {result}",
                                   variant=variant, result=result)


def _check_range(result: float, low: float, high: float, variant: str) -> None:
    if result < low or result > high:
        raise JitterInvariantError(
            f"{variant.capitalize()} jitter result {result} outside expected range [{low}, {high}]",
            variant=variant, result=result,
        )


def apply_jitter(
    base_delay: float,
    jitter: JitterConfig | Mapping[str, Any] | None,
    prev_delay: float = 0.0,
    *,
    rand: Rand | None = None,
) -> float:
    """Compute the additive jitter for one retry.

    Args:
        base_delay: Backoff delay (ms) the jitter is applied to
        jitter: Jitter variant, a ``{"type": ...}`` mapping, or None for no jitter
        prev_delay: Jitter returned for the previous retry (seeds decorrelated jitter)
        rand: Optional uniform [0, 1) source

    Returns:
        Jitter amount in milliseconds, to be added to ``base_delay``

    Raises:
        ConfigValidationError: An input or config field is out of its domain
        JitterInvariantError: The calculation produced an out-of-range result
    """
    if isinstance(jitter, Mapping):
        jitter = jitter_from_mapping(jitter)
    if jitter is None or isinstance(jitter, NoJitter):
        return 0.0

    _require_non_negative("base_delay", "base_delay", base_delay)
    _require_non_negative("prev_delay", "prev_delay", prev_delay)

    variant = getattr(jitter, "type", type(jitter).__name__)
    try:
        match jitter:
            case EqualJitter():
                result = calculate_equal_jitter(base_delay, rand)
                _check_result(result, variant)
                _check_range(result, base_delay / 2, base_delay, variant)

            case FullJitter(min=lo, max=hi):
                _require_non_negative("min", "min delay", lo, variant)
                _require_non_negative("max", "max delay", hi, variant)
                if lo >= hi:
                    raise ConfigValidationError(f"Invalid delay range: min ({lo}) must be less than max ({hi}).",
                                                field="min", value=lo, variant=variant)
                result = calculate_full_jitter(lo, hi, rand)
                _check_result(result, variant)
                _check_range(result, lo, hi, variant)

            case FixedJitter(amount=amount):
                _require_non_negative("amount", "jitter amount", amount, variant)
                result = calculate_fixed_jitter(base_delay, amount)
                _check_result(result, variant)
                if result > base_delay:
                    raise JitterInvariantError(f"Fixed jitter result {result} exceeds base_delay {base_delay}",
                                               variant=variant, result=result)

            case RandomJitter(fraction=fraction):
                if not _is_number(fraction) or not math.isfinite(fraction) or not 0 <= fraction <= 1:
                    raise ConfigValidationError(f"Invalid jitter fraction: {fraction}. Must be between 0 and 1.",
                                                field="fraction", value=fraction, variant=variant)
                result = calculate_random_jitter(base_delay, fraction, rand)
                _check_result(result, variant)
                _check_range(result, base_delay * (1 - fraction), base_delay * (1 + fraction), variant)

            case DecorrelatedJitter(max_delay=max_delay):
                _require_non_negative("max_delay", "max_delay", max_delay, variant)
                if max_delay < base_delay:
                    raise ConfigValidationError(
                        f"max_delay ({max_delay}) must be greater than or equal to base_delay ({base_delay}).",
                        field="max_delay", value=max_delay, variant=variant,
                    )
                result = calculate_decorrelated_jitter(base_delay, max_delay, prev_delay, rand)
                _check_result(result, variant)
                if result > max_delay:
                    raise JitterInvariantError(f"Decorrelated jitter result {result} exceeds max_delay {max_delay}",
                                               variant=variant, result=result)

            case _:
                raise ConfigValidationError(f"Unknown jitter type: {variant}", field="type", value=jitter)
    except JitterbugError:
        raise
    except Exception as e:
        raise JitterInvariantError(f"Error applying jitter ({variant}): {e}", variant=variant) from e

    return float(result)
