"""Selector parsing — ``path::identifier[,identifier...]``."""

from dataclasses import dataclass
from pathlib import Path

from s_eval.selection.domain.errors import SelectorResolutionError

_SEPARATOR = "::"


@dataclass(frozen=True)
class Identifier:
    """One selector identifier: a function, optionally narrowed to one case."""

    function: str
    case_id: str | None = None

    def __str__(self) -> str:
        if self.case_id is None:
            return self.function
        return f"{self.function}@{self.case_id}"


@dataclass(frozen=True)
class Selector:
    """Parsed selector. ``identifiers`` is None when the whole path is selected."""

    path: Path
    identifiers: tuple[Identifier, ...] | None


def _parse_identifier(raw: str) -> Identifier:
    function, sep, case_id = raw.partition("@")
    if not function or (sep and not case_id) or "@" in case_id:
        raise SelectorResolutionError(invalid=[raw], reason="malformed identifier")
    return Identifier(function=function, case_id=case_id if sep else None)


def parse_selector(selector: str, root: Path | None = None) -> Selector:
    """Split a selector into its path (relative to *root*) and identifiers.

    Raises:
        SelectorResolutionError: if the identifier list is present but empty or
            contains malformed entries.
    """
    raw_path, sep, raw_ids = selector.partition(_SEPARATOR)
    path = Path(raw_path) if raw_path else Path(".")
    if root is not None and not path.is_absolute():
        path = root / path
    if not sep:
        return Selector(path=path, identifiers=None)

    parts = [p.strip() for p in raw_ids.split(",")]
    if not any(parts):
        raise SelectorResolutionError(invalid=[selector], reason="no identifiers")
    malformed = [p for p in parts if not p]
    if malformed:
        raise SelectorResolutionError(invalid=[selector], reason="empty identifier")
    return Selector(
        path=path,
        identifiers=tuple(_parse_identifier(p) for p in parts),
    )
