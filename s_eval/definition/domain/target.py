"""Target adapters — a uniform awaitable interface over sync and async callables."""

import asyncio
import contextlib
import contextvars
import threading
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from pydantic import BaseModel, Field

from s_eval.grading.domain.grader import is_async_callable


class TargetOutput(BaseModel, frozen=True):
    """Optional richer return value for targets that report trace payloads."""

    output: Any = None
    trace_data: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class Target(Protocol):
    """Structural interface consumed by the executor.

    ``invoke`` produces output or raises; the executor bounds it with a timeout.
    """

    @property
    def name(self) -> str: ...

    async def invoke(self, input: Any) -> TargetOutput: ...


def _wrap(value: Any) -> TargetOutput:
    if isinstance(value, TargetOutput):
        return value
    return TargetOutput(output=value)


def _settle(
    future: asyncio.Future[Any], value: Any, exc: BaseException | None
) -> None:
    if future.done():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(value)


class SyncTarget:
    """Runs a plain callable on its own daemon thread so it cannot stall the event loop.

    Each call gets a fresh thread, which starts at once: the trial's deadline
    covers only the call itself, and a call abandoned on timeout never holds
    a slot that a later trial would wait for. Daemon threads do not delay
    interpreter shutdown; an abandoned call runs on and its result is dropped.
    """

    def __init__(self, fn: Callable[[Any], Any]) -> None:
        self._fn = fn

    @property
    def name(self) -> str:
        return getattr(self._fn, "__name__", type(self._fn).__name__)

    async def invoke(self, input: Any) -> TargetOutput:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        ctx = contextvars.copy_context()

        def work() -> None:
            value: Any = None
            error: BaseException | None = None
            try:
                value = ctx.run(self._fn, input)
            except BaseException as exc:
                error = exc
            # The loop is gone once an abandoned call outlives the run.
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(_settle, future, value, error)

        thread = threading.Thread(
            target=work, name=f"s-eval-target-{self.name}", daemon=True
        )
        thread.start()
        return _wrap(await future)


class AsyncTarget:
    """Awaits a coroutine function directly; cancellation reaches the coroutine."""

    def __init__(self, fn: Callable[[Any], Awaitable[Any]]) -> None:
        self._fn = fn

    @property
    def name(self) -> str:
        return getattr(self._fn, "__name__", type(self._fn).__name__)

    async def invoke(self, input: Any) -> TargetOutput:
        return _wrap(await self._fn(input))


def as_target(fn: Callable[[Any], Any]) -> Target:
    """Return the adapter matching the callable's calling convention."""
    if is_async_callable(fn):
        return AsyncTarget(fn)
    return SyncTarget(fn)
