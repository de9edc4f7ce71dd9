"""Timed waits between retry attempts.

Durations are in milliseconds to match retry option units.
    - sleep: cooperative suspend, lets other tasks run
    - sleep_sync: blocking wait for synchronous callers

Example:
    >>> await sleep(250)  # other coroutines proceed meanwhile
"""

from __future__ import annotations

import asyncio
import math
import time

from jitterbug.foundation.errors import ConfigValidationError


def _seconds(ms: float) -> float:
    if not isinstance(ms, (int, float)) or math.isnan(ms) or ms < 0 or math.isinf(ms):
        raise ConfigValidationError.non_negative("ms", "sleep duration", ms)
    return ms / 1000


async def sleep(ms: float) -> None:
    """Suspend the current task for ``ms`` milliseconds."""
    await asyncio.sleep(_seconds(ms))


def sleep_sync(ms: float) -> None:
    """Block the current thread for ``ms`` milliseconds."""
    time.sleep(_seconds(ms))
