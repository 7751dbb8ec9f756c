"""RunRef and Session — references to stored runs, not their bodies."""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel


class RunRef(BaseModel, frozen=True):
    session_name: str
    run_name: str
    run_id: str
    path: Path
    created_at: datetime
    primary_score_key: str
    total_evaluations: int
    total_passed: int
    total_errors: int


class Session(BaseModel, frozen=True):
    """A named, ordered collection of run references."""

    name: str
    runs: list[RunRef]
