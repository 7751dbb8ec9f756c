"""Structlog implementation of the JudgeObserver port."""

import structlog


class StructlogJudgeObserver:
    """Delegates judge events to structlog.

    Satisfies the JudgeObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def judge_scoring_started(self, judge: str, trial_index: int, model: str) -> None:
        self._log.info(
            "judge.scoring_started",
            judge=judge,
            trial_index=trial_index,
            model=model,
        )

    def judge_scoring_completed(
        self, judge: str, trial_index: int, duration_ms: int
    ) -> None:
        self._log.info(
            "judge.scoring_completed",
            judge=judge,
            trial_index=trial_index,
            duration_ms=duration_ms,
        )

    def judge_scoring_failed(self, judge: str, trial_index: int, reason: str) -> None:
        self._log.error(
            "judge.scoring_failed",
            judge=judge,
            trial_index=trial_index,
            reason=reason,
        )

    def judge_high_temperature_warned(self, judge: str, temperature: float) -> None:
        self._log.warning(
            "judge.high_temperature_warned",
            judge=judge,
            temperature=temperature,
        )
