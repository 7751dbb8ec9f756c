"""Correctable field paths of the form ``scores.<key>.<attribute>``."""

from dataclasses import dataclass
from typing import Literal, cast

from s_eval.correction.domain.errors import CorrectionError

type ScoreAttribute = Literal["passed", "value", "notes"]

_ATTRIBUTES: tuple[str, ...] = ("passed", "value", "notes")


@dataclass(frozen=True)
class FieldPath:
    key: str
    attribute: ScoreAttribute

    def __str__(self) -> str:
        return f"scores.{self.key}.{self.attribute}"


def parse_field(field: str) -> FieldPath:
    """Parse ``scores.<key>.passed|value|notes``; the key may contain dots.

    Raises:
        CorrectionError: if *field* is not a correctable path.
    """
    prefix, _, rest = field.partition(".")
    key, _, attribute = rest.rpartition(".")
    if prefix != "scores" or not key or attribute not in _ATTRIBUTES:
        raise CorrectionError(
            f"unsupported field '{field}'; expected scores.<key>.passed|value|notes"
        )
    return FieldPath(key=key, attribute=cast(ScoreAttribute, attribute))


def coerce_value(path: FieldPath, raw: object) -> bool | float | str | None:
    """Convert a raw (often CLI string) value to the attribute's type.

    Raises:
        CorrectionError: if *raw* cannot be interpreted.
    """
    if raw is None:
        return None
    if path.attribute == "notes":
        return str(raw)
    if path.attribute == "passed":
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in ("true", "yes", "1", "pass", "passed"):
            return True
        if text in ("false", "no", "0", "fail", "failed"):
            return False
        if text in ("null", "none", ""):
            return None
        raise CorrectionError(f"cannot interpret '{raw}' as a boolean for {path}")
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, str) and raw.strip().lower() in ("null", "none", ""):
        return None
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise CorrectionError(f"cannot interpret '{raw}' as a number for {path}") from exc
