"""Tests for the millisecond waits used between attempts."""

from __future__ import annotations

import asyncio
import math
import time

import pytest

from jitterbug.foundation.errors import ConfigValidationError
from jitterbug.runtime.concurrency import sleep, sleep_sync


@pytest.mark.asyncio
async def test_sleep_converts_milliseconds(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[float] = []
    real_sleep = asyncio.sleep

    async def fake(seconds: float) -> None:
        seen.append(seconds)
        await real_sleep(0)

    monkeypatch.setattr(asyncio, "sleep", fake)
    await sleep(250)
    assert seen == [0.25]


@pytest.mark.asyncio
async def test_sleep_yields_to_other_tasks() -> None:
    order: list[str] = []

    async def waiter() -> None:
        await sleep(5)
        order.append("waiter")

    async def other() -> None:
        order.append("other")

    await asyncio.gather(waiter(), other())
    assert order == ["other", "waiter"]


def test_sleep_sync_converts_milliseconds(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[float] = []
    monkeypatch.setattr(time, "sleep", seen.append)
    sleep_sync(1500)
    assert seen == [1.5]


def test_zero_wait_is_allowed(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[float] = []
    monkeypatch.setattr(time, "sleep", seen.append)
    sleep_sync(0)
    assert seen == [0]


@pytest.mark.parametrize("ms", [-1, math.inf, math.nan])
def test_sleep_sync_rejects_invalid_durations(ms: float) -> None:
    with pytest.raises(ConfigValidationError, match="sleep duration"):
        sleep_sync(ms)


@pytest.mark.asyncio
async def test_sleep_rejects_negative_duration() -> None:
    with pytest.raises(ConfigValidationError, match="Invalid sleep duration: -5"):
        await sleep(-5)
