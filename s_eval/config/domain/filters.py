"""Task selection filters applied after explicit selector resolution."""

from pydantic import BaseModel, Field


class SelectionFilters(BaseModel, frozen=True):
    datasets: list[str] = Field(default_factory=list)
    exclude_datasets: list[str] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    exclude_labels: list[str] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=0)
