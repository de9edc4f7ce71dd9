"""Shared fixtures for jitterbug tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from jitterbug.foundation.config import clear_settings_cache
from jitterbug.runtime.observability import configure_logging
from jitterbug.runtime.retry import policy


@pytest.fixture(autouse=True)
def quiet_logs() -> Iterator[None]:
    """Silence retry logging and reset cached settings around each test."""
    configure_logging("none")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace both waits in the retry loop; returns the list of requested waits (ms)."""
    recorded: list[float] = []

    async def fake_sleep(ms: float) -> None:
        recorded.append(ms)

    def fake_sleep_sync(ms: float) -> None:
        recorded.append(ms)

    monkeypatch.setattr(policy, "sleep", fake_sleep)
    monkeypatch.setattr(policy, "sleep_sync", fake_sleep_sync)
    return recorded
