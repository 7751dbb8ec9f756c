"""Structlog implementation of the StorageObserver port."""

import structlog


class StructlogStorageObserver:
    """Delegates storage domain events to structlog.

    Satisfies the StorageObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def run_recorded(self, session_name: str, run_id: str, path: str) -> None:
        self._log.info(
            "storage.run_recorded",
            session_name=session_name,
            run_id=run_id,
            path=path,
        )

    def run_renamed(self, run_id: str, old_name: str, new_name: str, path: str) -> None:
        self._log.info(
            "storage.run_renamed",
            run_id=run_id,
            old_name=old_name,
            new_name=new_name,
            path=path,
        )

    def run_saved(self, run_id: str, path: str) -> None:
        self._log.info("storage.run_saved", run_id=run_id, path=path)

    def artifact_skipped(self, path: str, reason: str) -> None:
        self._log.warning("storage.artifact_skipped", path=path, reason=reason)
