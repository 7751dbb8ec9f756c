"""LiteLLMJudge — an LLM-backed evaluator that turns a model verdict into a Score."""

import time

import litellm
from pydantic import BaseModel, ValidationError

from s_eval.evaluation.domain.trial import Trial
from s_eval.grading.domain.observer import JudgeObserver
from s_eval.grading.domain.score import DEFAULT_SCORE_KEY, Score
from s_eval.grading.infrastructure.errors import GradingError


class JudgeVerdict(BaseModel, frozen=True):
    """Structured response requested from the judge model."""

    passed: bool | None = None
    value: float | None = None
    notes: str | None = None


class LiteLLMJudge:
    """Evaluator that asks an LLM to grade a trial.

    The prompt template is supplied by the caller and formatted with
    ``{input}``, ``{output}`` and ``{reference}``. The model must answer with a
    JSON object ``{"passed": bool?, "value": float?, "notes": str?}``.

    Instances are async callables, so the grading pipeline awaits them
    directly. Any failure raises GradingError, which the pipeline records as a
    grading error keyed by the judge's ``name``.
    """

    def __init__(
        self,
        model: str,
        prompt_template: str,
        observer: JudgeObserver,
        score_key: str = DEFAULT_SCORE_KEY,
        temperature: float = 0.0,
        name: str = "llm_judge",
    ) -> None:
        self._model = model
        self._prompt_template = prompt_template
        self._observer = observer
        self._score_key = score_key
        self._temperature = temperature
        self.__name__ = name

        if temperature > 0.0:
            self._observer.judge_high_temperature_warned(
                judge=name, temperature=temperature
            )

    def render_prompt(self, trial: Trial) -> str:
        try:
            return self._prompt_template.format(
                input=trial.input,
                output=trial.output,
                reference=trial.reference,
            )
        except (KeyError, IndexError) as exc:
            raise GradingError(reason=f"prompt template references {exc}") from exc

    async def __call__(self, trial: Trial) -> Score:
        """Invoke the judge model and return its verdict as a Score.

        Raises:
            GradingError: if the LLM call fails or its response cannot be
                parsed into a valid Score.
        """
        prompt = self.render_prompt(trial)
        self._observer.judge_scoring_started(
            judge=self.__name__, trial_index=trial.trial_index, model=self._model
        )

        start = time.monotonic()
        try:
            response = await litellm.acompletion(
                model=self._model,
                temperature=self._temperature,
                response_format=JudgeVerdict,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as exc:
            self._fail(trial=trial, reason=str(exc))
            raise GradingError(reason=str(exc), retriable=True) from exc

        duration_ms = int((time.monotonic() - start) * 1000)

        raw_content: str = response.choices[0].message.content
        try:
            verdict = JudgeVerdict.model_validate_json(raw_content)
            score = Score(
                key=self._score_key,
                passed=verdict.passed,
                value=verdict.value,
                notes=verdict.notes,
            )
        except (ValidationError, TypeError) as exc:
            reason = f"unparseable judge response: {exc}"
            self._fail(trial=trial, reason=reason)
            raise GradingError(reason=reason) from exc

        self._observer.judge_scoring_completed(
            judge=self.__name__, trial_index=trial.trial_index, duration_ms=duration_ms
        )
        return score

    def _fail(self, trial: Trial, reason: str) -> None:
        self._observer.judge_scoring_failed(
            judge=self.__name__, trial_index=trial.trial_index, reason=reason
        )
