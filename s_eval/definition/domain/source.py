"""EvalSource Protocol — structural interface for loading eval definitions."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from s_eval.definition.domain.registry import EvalRegistry


@dataclass(frozen=True)
class EvalFile:
    """One eval file and the definitions it declared."""

    path: Path
    registry: EvalRegistry


class EvalSource(Protocol):
    """Loads the eval files found at a path (a single file or a directory)."""

    def load(self, path: Path) -> list[EvalFile]: ...
