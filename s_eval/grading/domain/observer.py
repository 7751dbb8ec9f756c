"""Observer port for the grading domain."""

from typing import Protocol


class GradingObserver(Protocol):
    def grading_failed(
        self,
        task: str,
        trial_index: int,
        grader: str,
        reason: str,
    ) -> None: ...


class JudgeObserver(Protocol):
    def judge_scoring_started(self, judge: str, trial_index: int, model: str) -> None: ...

    def judge_scoring_completed(
        self, judge: str, trial_index: int, duration_ms: int
    ) -> None: ...

    def judge_scoring_failed(self, judge: str, trial_index: int, reason: str) -> None: ...

    def judge_high_temperature_warned(self, judge: str, temperature: float) -> None: ...
