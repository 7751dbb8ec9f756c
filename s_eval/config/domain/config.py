"""Top-level EngineConfig aggregate — the root configuration object."""

from pydantic import BaseModel, Field

from s_eval.config.domain.execution import ExecutionConfig
from s_eval.config.domain.filters import SelectionFilters
from s_eval.config.domain.storage import StorageConfig
from s_eval.storage.domain.naming import SESSION_NAME_PATTERN


class EngineConfig(BaseModel, frozen=True):
    """Root configuration aggregate for an s-eval run.

    Every section has defaults, so an empty config file (or none at all) is
    valid. CLI options are merged on top and the result is re-validated.
    """

    session_name: str = Field(default="default", pattern=SESSION_NAME_PATTERN)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    filters: SelectionFilters = Field(default_factory=SelectionFilters)
    verbose: bool = False
