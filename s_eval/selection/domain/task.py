"""TaskId and Task — the addressable unit of evaluation."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from s_eval.evaluation.domain.reduction import TrialReduction
from s_eval.grading.domain.grader import Check, Evaluator


class TaskId(BaseModel, frozen=True):
    """Stable identity of a task across runs: (dataset, function, case_id)."""

    dataset: str
    function: str
    case_id: str | None = None

    @property
    def address(self) -> str:
        """Selector identifier for this task: ``function`` or ``function@case``."""
        if self.case_id is None:
            return self.function
        return f"{self.function}@{self.case_id}"

    def __str__(self) -> str:
        return f"{self.dataset}::{self.address}"


@dataclass(frozen=True)
class Task:
    """Immutable, fully-resolved task ready for scheduling.

    Built by the selector resolver from an EvalDefinition and, where the
    definition has cases, one of its cases.
    """

    id: TaskId
    target: Callable[[Any], Any]
    input: Any = None
    reference: Any = None
    labels: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    trials: int = 1
    timeout: float | None = None
    checks: tuple[Check, ...] = ()
    evaluators: tuple[Evaluator, ...] = ()
    short_circuit: bool = False
    reduction: TrialReduction | None = None
