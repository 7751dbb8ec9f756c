"""Fake JudgeObserver for use in tests — records events without mocking."""

from dataclasses import dataclass


@dataclass(frozen=True)
class JudgeStartedEvent:
    judge: str
    trial_index: int
    model: str


@dataclass(frozen=True)
class JudgeCompletedEvent:
    judge: str
    trial_index: int
    duration_ms: int


@dataclass(frozen=True)
class JudgeFailedEvent:
    judge: str
    trial_index: int
    reason: str


@dataclass(frozen=True)
class JudgeTemperatureWarningEvent:
    judge: str
    temperature: float


class FakeJudgeObserver:
    def __init__(self) -> None:
        self._started: list[JudgeStartedEvent] = []
        self._completed: list[JudgeCompletedEvent] = []
        self._failed: list[JudgeFailedEvent] = []
        self._temperature_warnings: list[JudgeTemperatureWarningEvent] = []

    @property
    def started(self) -> list[JudgeStartedEvent]:
        return self._started

    @property
    def completed(self) -> list[JudgeCompletedEvent]:
        return self._completed

    @property
    def failed(self) -> list[JudgeFailedEvent]:
        return self._failed

    @property
    def temperature_warnings(self) -> list[JudgeTemperatureWarningEvent]:
        return self._temperature_warnings

    def judge_scoring_started(self, judge: str, trial_index: int, model: str) -> None:
        self._started.append(
            JudgeStartedEvent(judge=judge, trial_index=trial_index, model=model)
        )

    def judge_scoring_completed(
        self, judge: str, trial_index: int, duration_ms: int
    ) -> None:
        self._completed.append(
            JudgeCompletedEvent(
                judge=judge, trial_index=trial_index, duration_ms=duration_ms
            )
        )

    def judge_scoring_failed(self, judge: str, trial_index: int, reason: str) -> None:
        self._failed.append(
            JudgeFailedEvent(judge=judge, trial_index=trial_index, reason=reason)
        )

    def judge_high_temperature_warned(self, judge: str, temperature: float) -> None:
        self._temperature_warnings.append(
            JudgeTemperatureWarningEvent(judge=judge, temperature=temperature)
        )
