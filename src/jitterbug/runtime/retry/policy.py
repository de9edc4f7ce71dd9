"""Retry options and the retry loop.

An operation wrapped with retry() is invoked up to ``max_attempts`` times.
After each failure except the last, the loop computes backoff plus jitter,
notifies ``on_retry``, waits, and tries again. Only the final error reaches
the caller; intermediate errors are visible through ``on_retry`` alone.

Example:
    >>> @retry(max_attempts=5, delay=200, jitter_config={"type": "equal"})
    ... async def fetch_quote(symbol: str) -> dict:
    ...     return await client.get(f"/quotes/{symbol}")
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Callable, ParamSpec, TypeVar, overload

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from jitterbug.foundation.errors import ConfigValidationError, format_validation_error
from jitterbug.runtime.concurrency import sleep, sleep_sync
from jitterbug.runtime.observability import BoundLogger, get_logger

from .backoff import BackoffStrategy, calculate_delay, is_known_strategy
from .jitter import JitterConfig, jitter_from_mapping
from .validation import apply_jitter

if TYPE_CHECKING:
    from jitterbug.foundation.config import RetrySettings

P = ParamSpec("P")
T = TypeVar("T")

OnRetry = Callable[[BaseException, int, float], object]

logger = get_logger("jitterbug.retry")


class RetryOptions(BaseModel):
    """Configuration for a wrapped operation.

    Immutable once built. Jitter fields are checked when a retry delay is
    computed, not here.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        delay: Base delay in milliseconds
        backoff: "exponential", "linear" or "fixed"; anything else acts as "fixed"
        jitter_config: Jitter variant or ``{"type": ...}`` mapping
        on_retry: Called as ``on_retry(error, attempt, wait_ms)`` before each wait

    Example:
        >>> RetryOptions(max_attempts=4, delay=100, backoff="linear",
        ...              jitter_config=FullJitter(min=0, max=50))
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # For jitter dataclasses and callbacks
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
    )

    max_attempts: Annotated[int, Field(ge=1, strict=True)] = 3
    delay: Annotated[float, Field(ge=0, allow_inf_nan=False)] = 1000.0
    backoff: BackoffStrategy | str = BackoffStrategy.EXPONENTIAL
    jitter_config: Any = None  # JitterConfig | None, checked by apply_jitter()
    on_retry: OnRetry | None = Field(default=None, exclude=True, repr=False)

    @field_validator("jitter_config", mode="before")
    @classmethod
    def _coerce_jitter(cls, v: JitterConfig | Mapping[str, Any] | None) -> JitterConfig | None:
        """Accept ``{"type": "full", "min": 100, "max": 200}`` style mappings."""
        return jitter_from_mapping(v) if isinstance(v, Mapping) else v

    @classmethod
    def build(cls, options: RetryOptions | Mapping[str, Any] | None = None, **overrides: Any) -> RetryOptions:
        """Merge ``options`` with keyword overrides, raising ConfigValidationError on bad values."""
        if isinstance(options, RetryOptions):
            if not overrides:
                return options
            base = {name: getattr(options, name) for name in cls.model_fields}
        else:
            base = dict(options or {})
        try:
            return cls(**{**base, **overrides})
        except ValidationError as e:
            raise ConfigValidationError(format_validation_error(e)) from e

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None, **overrides: Any) -> RetryOptions:
        """Defaults from JITTERBUG_RETRY_* environment settings."""
        if settings is None:
            from jitterbug.foundation.config import get_settings
            settings = get_settings().retry
        return cls.build({
            "max_attempts": settings.max_attempts,
            "delay": settings.delay,
            "backoff": settings.backoff,
            "jitter_config": settings.jitter,
        }, **overrides)


@dataclass(slots=True)
class AttemptState:
    """Per-call loop state. Never shared between calls."""

    attempt: int = 1
    last_error: BaseException | None = None
    prev_jitter_delay: float = 0.0


def _schedule_retry(state: AttemptState, options: RetryOptions, log: BoundLogger) -> float:
    """Compute the wait after a failed attempt and notify the observer. Returns wait in ms."""
    base_wait = calculate_delay(options.delay, state.attempt, options.backoff)
    jitter = apply_jitter(base_wait, options.jitter_config, state.prev_jitter_delay)
    state.prev_jitter_delay = jitter
    total = base_wait + jitter
    log.warning(
        "retry scheduled", attempt=state.attempt, max_attempts=options.max_attempts,
        wait_ms=total, error=f"{type(state.last_error).__name__}: {state.last_error}",
    )
    if options.on_retry is not None:
        options.on_retry(state.last_error, state.attempt, total)  # type: ignore[arg-type]
    return total


def _exhausted(state: AttemptState, options: RetryOptions, log: BoundLogger) -> BaseException:
    log.error("retries exhausted", attempts=options.max_attempts,
              error=f"{type(state.last_error).__name__}: {state.last_error}")
    return state.last_error  # type: ignore[return-value]


def _operation_logger(operation: Callable[..., Any], options: RetryOptions) -> BoundLogger:
    if not is_known_strategy(options.backoff):
        logger.debug("unknown backoff strategy, using fixed", backoff=str(options.backoff))
    return logger.bind(operation=_operation_name(operation))


def _operation_name(operation: Callable[..., Any]) -> str:
    return getattr(operation, "__qualname__", None) or type(operation).__qualname__


def _is_async_callable(operation: Callable[..., Any]) -> bool:
    """Coroutine functions, partials of them, and objects with ``async def __call__``."""
    return inspect.iscoroutinefunction(operation) or inspect.iscoroutinefunction(getattr(operation, "__call__", None))


def _discard(awaitable: Awaitable[Any]) -> None:
    if (close := getattr(awaitable, "close", None)) is not None:
        close()


async def _run_async(
    operation: Callable[..., Any],
    options: RetryOptions,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    *,
    pending: Awaitable[Any] | None = None,
    log: BoundLogger | None = None,
) -> Any:
    """Async loop. ``pending`` stands in for the first attempt's result when it was already started."""
    log = _operation_logger(operation, options) if log is None else log
    state = AttemptState()
    while True:
        try:
            if pending is not None:
                result, pending = pending, None
            else:
                result = operation(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            state.last_error = e
        if state.attempt >= options.max_attempts:
            raise _exhausted(state, options, log)
        await sleep(_schedule_retry(state, options, log))
        state.attempt += 1


def _run_sync(
    operation: Callable[..., Any],
    options: RetryOptions,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    *,
    adopt_awaitable: bool = False,
) -> Any:
    """Blocking loop. With ``adopt_awaitable``, an awaitable first result hands the call over to the async loop."""
    log = _operation_logger(operation, options)
    state = AttemptState()
    while True:
        try:
            result = operation(*args, **kwargs)
        except Exception as e:
            state.last_error = e
        else:
            if not inspect.isawaitable(result):
                return result
            if adopt_awaitable and state.attempt == 1:
                return _run_async(operation, options, args, kwargs, pending=result, log=log)
            _discard(result)
            raise TypeError(
                f"{_operation_name(operation)} returned an awaitable; "
                "use execute_with_retry() to retry async operations"
            )
        if state.attempt >= options.max_attempts:
            raise _exhausted(state, options, log)
        sleep_sync(_schedule_retry(state, options, log))
        state.attempt += 1


async def execute_with_retry(
    operation: Callable[..., Awaitable[T] | T],
    options: RetryOptions,
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run ``operation(*args, **kwargs)`` with retries, waiting cooperatively between attempts.

    Both raising synchronously and returning an awaitable that fails count as
    a failed attempt.

    Returns:
        The first successful result

    Raises:
        The last attempt's error, unchanged, once attempts are exhausted.
        ConfigValidationError if the jitter config is invalid (on the first retry).
    """
    return await _run_async(operation, options, args, kwargs)


def execute_with_retry_sync(
    operation: Callable[..., T],
    options: RetryOptions,
    *args: Any,
    **kwargs: Any,
) -> T:
    """Synchronous version for plain callables. Blocks the thread between attempts.

    Raises:
        TypeError: ``operation`` returned an awaitable. It is closed unawaited;
            async operations belong in execute_with_retry().
    """
    return _run_sync(operation, options, args, kwargs)


@overload
def retry(operation: Callable[P, T], options: RetryOptions | Mapping[str, Any] | None = None, **overrides: Any) -> Callable[P, T]: ...
@overload
def retry(operation: None = None, options: RetryOptions | Mapping[str, Any] | None = None, **overrides: Any) -> Callable[[Callable[P, T]], Callable[P, T]]: ...


def retry(
    operation: Callable[P, T] | None = None,
    options: RetryOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> Callable[P, T] | Callable[[Callable[P, T]], Callable[P, T]]:
    """Wrap ``operation`` so transient failures are retried with backoff and jitter.

    The wrapper has the same signature as ``operation``. Coroutine functions
    and objects with ``async def __call__`` get an async wrapper; other
    callables get a blocking sync wrapper. If a plain callable turns out to
    return an awaitable (``lambda: client.fetch()``), the sync wrapper returns
    a coroutine that runs the whole retry loop when awaited.
    Options are validated here, so bad ``max_attempts``/``delay`` fail at
    wrap time; jitter fields are validated on the first retry.

    Args:
        operation: Function to wrap. Omit to use as a decorator factory.
        options: RetryOptions or a mapping of its fields
        **overrides: Individual RetryOptions fields

    Example:
        >>> fetch = retry(fetch_page, max_attempts=5, delay=10)
        >>> @retry(backoff="linear", on_retry=lambda e, n, ms: print(n, ms))
        ... async def send(msg): ...
    """
    opts = RetryOptions.build(options, **overrides)

    def decorator(fn: Callable[P, T]) -> Callable[P, T]:
        if _is_async_callable(fn):
            @functools.wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                return await _run_async(fn, opts, args, kwargs)
            async_wrapper.retry_options = opts  # type: ignore[attr-defined]
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return _run_sync(fn, opts, args, kwargs, adopt_awaitable=True)
        wrapper.retry_options = opts  # type: ignore[attr-defined]
        return wrapper

    return decorator(operation) if operation is not None else decorator


wrap_with_retry = retry
