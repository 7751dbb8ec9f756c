"""Observer port for the config domain — defines events in domain language."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, path: str, session_name: str) -> None: ...

    def config_no_timeout_warning(self, concurrency: int) -> None: ...
