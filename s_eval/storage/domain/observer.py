"""Observer port for the storage domain."""

from typing import Protocol


class StorageObserver(Protocol):
    def run_recorded(self, session_name: str, run_id: str, path: str) -> None: ...

    def run_renamed(self, run_id: str, old_name: str, new_name: str, path: str) -> None: ...

    def run_saved(self, run_id: str, path: str) -> None: ...

    def artifact_skipped(self, path: str, reason: str) -> None: ...
