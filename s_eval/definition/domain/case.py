"""Case — one entry in an eval definition's case list."""

from typing import Any

from pydantic import BaseModel, Field


class Case(BaseModel, frozen=True):
    """Immutable value object for a single input/reference pair."""

    id: str = Field(min_length=1, pattern=r"^[^,@:\s]+$")
    input: Any = None
    reference: Any = None
    labels: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
