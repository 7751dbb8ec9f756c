"""CorrectionEntry — one human amendment to a persisted result."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class CorrectionEntry(BaseModel, frozen=True):
    """Audit record of a manual override: which field, old and new value, when."""

    field: str
    before: Any = None
    after: Any = None
    timestamp: datetime
