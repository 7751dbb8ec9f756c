"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, path: str, session_name: str) -> None:
        self._log.info("config.loaded", path=path, session_name=session_name)

    def config_no_timeout_warning(self, concurrency: int) -> None:
        self._log.warning(
            "config.no_timeout_warning",
            concurrency=concurrency,
            message="No timeout_seconds set; a hung target holds its worker slot until the run is stopped",
        )
