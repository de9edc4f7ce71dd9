"""Tests for apply_jitter input and output validation."""

from __future__ import annotations

import math
import re

import pytest

from jitterbug.foundation.errors import ConfigValidationError, ErrorCode, JitterbugError, JitterInvariantError
from jitterbug.runtime.retry import (
    DecorrelatedJitter,
    EqualJitter,
    FixedJitter,
    FullJitter,
    NoJitter,
    RandomJitter,
    apply_jitter,
    validation,
)


def always(value: float):
    return lambda: value


def raises_config(message: str):
    return pytest.raises(ConfigValidationError, match=re.escape(message))


# ═════════════════════════════════════════════════════════════════════════════
# No jitter
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("config", [None, NoJitter(), {"type": "none"}])
def test_no_jitter_is_zero(config: object) -> None:
    assert apply_jitter(1000, config, 0) == 0


def test_no_jitter_skips_input_checks() -> None:
    assert apply_jitter(-1, None, -1) == 0


# ═════════════════════════════════════════════════════════════════════════════
# Shared inputs
# ═════════════════════════════════════════════════════════════════════════════


class TestSharedInputs:

    def test_negative_base_delay(self) -> None:
        with raises_config("Invalid base_delay: -100. Must be a non-negative finite number."):
            apply_jitter(-100, EqualJitter(), 0)

    def test_infinite_base_delay(self) -> None:
        with raises_config("Invalid base_delay: Infinity. Must be a non-negative finite number."):
            apply_jitter(math.inf, EqualJitter(), 0)

    def test_nan_base_delay(self) -> None:
        with raises_config("Invalid base_delay: NaN. Must be a non-negative finite number."):
            apply_jitter(math.nan, EqualJitter(), 0)

    def test_negative_prev_delay(self) -> None:
        with raises_config("Invalid prev_delay: -50. Must be a non-negative finite number."):
            apply_jitter(100, EqualJitter(), -50)

    def test_infinite_prev_delay(self) -> None:
        with raises_config("Invalid prev_delay: Infinity. Must be a non-negative finite number."):
            apply_jitter(100, DecorrelatedJitter(max_delay=1000), math.inf)

    def test_non_numeric_base_delay(self) -> None:
        with pytest.raises(ConfigValidationError) as info:
            apply_jitter("100", EqualJitter(), 0)  # type: ignore[arg-type]
        assert info.value.field == "base_delay"
        assert info.value.value == "100"

    def test_error_carries_field_and_code(self) -> None:
        with pytest.raises(ConfigValidationError) as info:
            apply_jitter(-1, EqualJitter(), 0)
        assert info.value.field == "base_delay"
        assert info.value.value == -1
        assert info.value.code is ErrorCode.INVALID_CONFIG
        assert isinstance(info.value, ValueError)


# ═════════════════════════════════════════════════════════════════════════════
# Variant pre-checks
# ═════════════════════════════════════════════════════════════════════════════


class TestFullJitterConfig:

    def test_negative_min(self) -> None:
        with raises_config("Invalid min delay: -10. Must be a non-negative finite number."):
            apply_jitter(100, FullJitter(min=-10, max=100), 0)

    def test_negative_max(self) -> None:
        with raises_config("Invalid max delay: -100. Must be a non-negative finite number."):
            apply_jitter(100, FullJitter(min=10, max=-100), 0)

    def test_min_above_max(self) -> None:
        with raises_config("Invalid delay range: min (500) must be less than max (100)."):
            apply_jitter(100, FullJitter(min=500, max=100), 0)

    def test_min_equals_max(self) -> None:
        with raises_config("Invalid delay range: min (100) must be less than max (100)."):
            apply_jitter(100, FullJitter(min=100, max=100), 0)

    def test_infinite_min(self) -> None:
        with raises_config("Invalid min delay: Infinity. Must be a non-negative finite number."):
            apply_jitter(100, FullJitter(min=math.inf, max=1000), 0)

    def test_mapping_config_is_validated_at_use(self) -> None:
        with pytest.raises(ConfigValidationError) as info:
            apply_jitter(100, {"type": "full", "min": 500, "max": 100}, 0)
        assert info.value.variant == "full"


class TestFixedJitterConfig:

    def test_negative_amount(self) -> None:
        with raises_config("Invalid jitter amount: -50. Must be a non-negative finite number."):
            apply_jitter(100, FixedJitter(amount=-50), 0)

    def test_infinite_amount(self) -> None:
        with raises_config("Invalid jitter amount: Infinity. Must be a non-negative finite number."):
            apply_jitter(100, FixedJitter(amount=math.inf), 0)


class TestRandomJitterConfig:

    def test_negative_fraction(self) -> None:
        with raises_config("Invalid jitter fraction: -0.5. Must be between 0 and 1."):
            apply_jitter(100, RandomJitter(fraction=-0.5), 0)

    def test_fraction_above_one(self) -> None:
        with raises_config("Invalid jitter fraction: 1.5. Must be between 0 and 1."):
            apply_jitter(100, RandomJitter(fraction=1.5), 0)

    def test_infinite_fraction(self) -> None:
        with raises_config("Invalid jitter fraction"):
            apply_jitter(100, RandomJitter(fraction=math.inf), 0)

    @pytest.mark.parametrize("fraction", [0, 1])
    def test_fraction_bounds_allowed(self, fraction: float) -> None:
        assert 0 <= apply_jitter(100, RandomJitter(fraction=fraction), 0) <= 200


class TestDecorrelatedJitterConfig:

    def test_negative_max_delay(self) -> None:
        with raises_config("Invalid max_delay: -1000. Must be a non-negative finite number."):
            apply_jitter(100, DecorrelatedJitter(max_delay=-1000), 0)

    def test_max_delay_below_base(self) -> None:
        with raises_config("max_delay (500) must be greater than or equal to base_delay (1000)."):
            apply_jitter(1000, DecorrelatedJitter(max_delay=500), 0)

    def test_infinite_max_delay(self) -> None:
        with raises_config("Invalid max_delay: Infinity. Must be a non-negative finite number."):
            apply_jitter(100, DecorrelatedJitter(max_delay=math.inf), 0)

    def test_max_delay_equal_to_base(self) -> None:
        assert apply_jitter(1000, DecorrelatedJitter(max_delay=1000), 0) == 1000


def test_unknown_variant_object() -> None:
    with raises_config("Unknown jitter type: str"):
        apply_jitter(100, "equal", 0)  # type: ignore[arg-type]


# ═════════════════════════════════════════════════════════════════════════════
# Result post-checks
# ═════════════════════════════════════════════════════════════════════════════


class TestResultInvariants:

    def test_equal_out_of_range(self) -> None:
        with pytest.raises(JitterInvariantError, match="Equal jitter result") as info:
            apply_jitter(1000, EqualJitter(), 0, rand=always(2))
        assert info.value.variant == "equal"
        assert info.value.result == 1500

    def test_full_out_of_range(self) -> None:
        with pytest.raises(JitterInvariantError, match="Full jitter result"):
            apply_jitter(100, FullJitter(min=200, max=400), 0, rand=always(2))

    def test_random_out_of_range(self) -> None:
        with pytest.raises(JitterInvariantError, match="Random jitter result"):
            apply_jitter(1000, RandomJitter(fraction=0.2), 0, rand=always(2))

    def test_negative_result(self) -> None:
        with pytest.raises(JitterInvariantError, match=re.escape("Jitter calculation (decorrelated) returned negative value")):
            apply_jitter(1000, DecorrelatedJitter(max_delay=10_000), 2000, rand=always(-1))

    def test_nan_result(self) -> None:
        with pytest.raises(JitterInvariantError, match=re.escape("Jitter calculation (equal) returned NaN")):
            apply_jitter(1000, EqualJitter(), 0, rand=always(math.nan))

    def test_fixed_exceeding_base(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(validation, "calculate_fixed_jitter", lambda base, amount: base + 1)
        with pytest.raises(JitterInvariantError, match="Fixed jitter result 101 exceeds base_delay 100"):
            apply_jitter(100, FixedJitter(amount=10), 0)

    def test_decorrelated_exceeding_max(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(validation, "calculate_decorrelated_jitter", lambda *a, **kw: 20_000)
        with pytest.raises(JitterInvariantError, match="exceeds max_delay 10000"):
            apply_jitter(1000, DecorrelatedJitter(max_delay=10_000), 0)

    def test_non_number_result(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(validation, "calculate_equal_jitter", lambda *a, **kw: "fast")
        with pytest.raises(JitterInvariantError, match="returned non-number: str"):
            apply_jitter(1000, EqualJitter(), 0)

    def test_invariant_error_is_not_config_error(self) -> None:
        with pytest.raises(JitterInvariantError) as info:
            apply_jitter(1000, EqualJitter(), 0, rand=always(2))
        assert not isinstance(info.value, ConfigValidationError)
        assert info.value.code is ErrorCode.JITTER_INVARIANT


class TestForeignErrors:

    def test_wrapped_with_variant_context(self) -> None:
        def broken() -> float:
            raise RuntimeError("entropy pool empty")

        with pytest.raises(JitterInvariantError, match=re.escape("Error applying jitter (equal): entropy pool empty")) as info:
            apply_jitter(1000, EqualJitter(), 0, rand=broken)
        assert isinstance(info.value.__cause__, RuntimeError)

    def test_own_errors_pass_through_unwrapped(self) -> None:
        with pytest.raises(JitterbugError) as info:
            apply_jitter(100, FullJitter(min=5, max=1), 0)
        assert type(info.value) is ConfigValidationError
        assert "Error applying jitter" not in str(info.value)


# ═════════════════════════════════════════════════════════════════════════════
# Valid edge inputs
# ═════════════════════════════════════════════════════════════════════════════


def test_zero_base_delay() -> None:
    assert apply_jitter(0, EqualJitter(), 0) == 0
    assert apply_jitter(0, FixedJitter(amount=10), 0) == 0
    assert apply_jitter(0, DecorrelatedJitter(max_delay=0), 0) == 0


def test_large_values() -> None:
    result = apply_jitter(1e12, DecorrelatedJitter(max_delay=1e13), 1e12, rand=always(0.5))
    assert 1e12 <= result <= 1e13


@pytest.mark.parametrize(("config", "expected"), [
    (EqualJitter(), 750),
    (FullJitter(min=200, max=400), 300),
    (FixedJitter(amount=300), 700),
    (RandomJitter(fraction=0.5), 1000),
    (DecorrelatedJitter(max_delay=10_000), 1000),
])
def test_valid_configs_with_pinned_source(config: object, expected: float) -> None:
    assert apply_jitter(1000, config, 0, rand=always(0.5)) == expected  # type: ignore[arg-type]
