"""Error types raised while loading eval files."""

from pathlib import Path

from s_eval.core.errors import SEvalError


class EvalLoadError(SEvalError):
    """Raised when an eval file cannot be found or imported."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load evals from {path}: {reason}")


class EvalRegistryMissingError(EvalLoadError):
    """Raised when an imported file declares no module-level EvalRegistry."""

    def __init__(self, path: Path) -> None:
        super().__init__(path=path, reason="no EvalRegistry defined at module level")
