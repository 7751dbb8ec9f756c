"""Result filter models for querying stored runs."""

import operator
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, Field

type ComparisonOp = Literal["gt", "gte", "lt", "lte", "eq", "neq"]

OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
    "eq": operator.eq,
    "neq": operator.ne,
}


class ScoreFilter(BaseModel, frozen=True):
    """Keep results whose score ``key`` compares to ``value`` under ``op``.

    The comparison uses the score's numeric form: ``value`` when present,
    else ``passed`` as 1.0/0.0. Results without the key never match.
    """

    key: str = Field(min_length=1)
    op: ComparisonOp
    value: float


class PassedFilter(BaseModel, frozen=True):
    key: str = Field(min_length=1)
    passed: bool


class ResultFilter(BaseModel, frozen=True):
    """Conjunction of criteria; an unset criterion matches everything."""

    datasets: list[str] = Field(default_factory=list)
    exclude_datasets: list[str] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    exclude_labels: list[str] = Field(default_factory=list)
    search: str | None = None
    has_error: bool | None = None
    has_trace: bool | None = None
    has_url: bool | None = None
    has_messages: bool | None = None
    score_filters: list[ScoreFilter] = Field(default_factory=list)
    passed_filters: list[PassedFilter] = Field(default_factory=list)
