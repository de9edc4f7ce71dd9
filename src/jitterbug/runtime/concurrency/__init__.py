"""Scheduling primitives for the retry loop.

Only timed waits are needed: attempts run strictly one after another,
and the wait between them yields to the event loop so concurrent
retry loops are not blocked.
"""

from __future__ import annotations

from .wait import sleep, sleep_sync

__all__ = ["sleep", "sleep_sync"]
