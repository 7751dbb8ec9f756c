"""Grading inputs and the structural types of checks and evaluators."""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, Field

from s_eval.evaluation.domain.trial import Trial


class GradingInput(BaseModel, frozen=True):
    """What an inline check sees: the captured input, output and reference."""

    input: Any = None
    output: Any = None
    reference: Any = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    trace_data: dict[str, Any] | None = None


# A check returns None, a bool, a Score, a score mapping, or a list of those,
# and signals failure with AssertionError.
type Check = Callable[[GradingInput], Any]

# An evaluator receives the finalized trial and may be sync or async.
type Evaluator = Callable[[Trial], Any] | Callable[[Trial], Awaitable[Any]]


def callable_name(fn: Callable[..., Any]) -> str:
    """Best-effort display name for a check or evaluator."""
    name = getattr(fn, "__name__", None)
    if isinstance(name, str) and name != "<lambda>":
        return name
    return type(fn).__name__ if name is None else "lambda"


def is_async_callable(fn: Callable[..., Any]) -> bool:
    """True for coroutine functions and objects whose ``__call__`` is one."""
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )
