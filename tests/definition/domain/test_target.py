"""Tests for target adapters."""

import threading

from s_eval.definition.domain.target import (
    AsyncTarget,
    SyncTarget,
    TargetOutput,
    as_target,
)


def _double(value: int) -> int:
    return value * 2


async def _adouble(value: int) -> int:
    return value * 2


class TestAsTarget:
    def test_plain_function_gets_sync_adapter(self) -> None:
        assert isinstance(as_target(_double), SyncTarget)

    def test_coroutine_function_gets_async_adapter(self) -> None:
        assert isinstance(as_target(_adouble), AsyncTarget)

    def test_callable_object_with_async_call_gets_async_adapter(self) -> None:
        class Agent:
            async def __call__(self, value: int) -> int:
                return value

        assert isinstance(as_target(Agent()), AsyncTarget)

    def test_name_comes_from_callable(self) -> None:
        assert as_target(_double).name == "_double"


class TestInvoke:
    async def test_sync_target_wraps_plain_value(self) -> None:
        produced = await SyncTarget(_double).invoke(4)

        assert produced == TargetOutput(output=8)

    async def test_sync_target_runs_off_the_event_loop_thread(self) -> None:
        seen: list[int] = []

        def record_thread(_: object) -> None:
            seen.append(threading.get_ident())

        await SyncTarget(record_thread).invoke(None)

        assert seen and seen[0] != threading.get_ident()

    async def test_async_target_awaits_coroutine(self) -> None:
        produced = await AsyncTarget(_adouble).invoke(5)

        assert produced.output == 10

    async def test_target_output_passes_through_with_trace(self) -> None:
        async def traced(value: str) -> TargetOutput:
            return TargetOutput(output=value.upper(), trace_data={"messages": [value]})

        produced = await as_target(traced).invoke("hi")

        assert produced.output == "HI"
        assert produced.trace_data == {"messages": ["hi"]}
