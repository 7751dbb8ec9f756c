"""EvalDefinition — a declared eval: target, input template, cases and graders."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from s_eval.definition.domain.case import Case
from s_eval.evaluation.domain.reduction import TrialReduction
from s_eval.grading.domain.grader import Check, Evaluator


@dataclass(frozen=True)
class EvalDefinition:
    """Immutable declaration of one eval function.

    A stdlib frozen dataclass rather than a Pydantic model because it carries
    callables (the target, checks and evaluators).
    """

    function: str
    target: Callable[[Any], Any]
    dataset: str | None = None
    input: Any = None
    reference: Any = None
    cases: tuple[Case, ...] = ()
    labels: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    trials: int = 1
    timeout: float | None = None
    checks: tuple[Check, ...] = ()
    evaluators: tuple[Evaluator, ...] = ()
    short_circuit: bool = False
    reduction: TrialReduction | None = None

    def case(self, case_id: str) -> Case | None:
        for case in self.cases:
            if case.id == case_id:
                return case
        return None
