"""Error types raised by run storage."""

from pathlib import Path

from s_eval.core.errors import SEvalError


class StorageError(SEvalError):
    """Raised when a run artifact cannot be written, renamed, or read."""

    def __init__(self, reason: str, path: Path | None = None) -> None:
        self.path = path
        location = f" ({path})" if path is not None else ""
        super().__init__(f"Failed to access run storage{location}: {reason}")


class RunNotFoundError(SEvalError):
    """Raised when no stored run matches a lookup."""

    def __init__(self, ref: str, session_name: str | None = None) -> None:
        scope = f" in session '{session_name}'" if session_name else ""
        super().__init__(f"Failed to find run '{ref}'{scope}")


class AmbiguousRunError(SEvalError):
    """Raised when a run id matches runs in several sessions."""

    def __init__(self, ref: str, sessions: list[str]) -> None:
        self.sessions = sessions
        super().__init__(
            f"Failed to locate run '{ref}': it exists in sessions "
            f"{', '.join(sorted(sessions))}; specify a session"
        )
