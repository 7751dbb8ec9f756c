"""Score — a single named metric (boolean and/or numeric) with optional notes."""

from typing import Any

from pydantic import BaseModel, Field, model_serializer, model_validator

DEFAULT_SCORE_KEY = "pass"


class Score(BaseModel, frozen=True):
    """Immutable metric record produced by grading.

    At least one of ``value`` or ``passed`` must be set, and ``value`` must be
    finite: JSON has no NaN or infinity, so neither could be stored.
    """

    key: str = DEFAULT_SCORE_KEY
    value: float | None = Field(default=None, allow_inf_nan=False)
    passed: bool | None = None
    notes: str | None = None
    grading_error: str | None = None

    @model_validator(mode="after")
    def _require_value_or_passed(self) -> "Score":
        if self.value is None and self.passed is None:
            raise ValueError(
                f"score '{self.key}' must set at least one of 'value' or 'passed'"
            )
        return self

    @model_serializer(mode="wrap")
    def _omit_empty_grading_error(self, handler: Any) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if data.get("grading_error") is None:
            data.pop("grading_error", None)
        return data

    @property
    def numeric(self) -> float | None:
        """Return the score as a number: ``value`` if set, else passed as 1.0/0.0."""
        if self.value is not None:
            return self.value
        if self.passed is not None:
            return 1.0 if self.passed else 0.0
        return None
