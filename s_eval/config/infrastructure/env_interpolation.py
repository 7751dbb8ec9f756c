"""${ENV_VAR} and ${ENV_VAR:-fallback} substitution over parsed YAML."""

import os
import re

_REFERENCE = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<fallback>[^}]*))?\}"
)

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def _walk_strings(data: RawValue) -> list[str]:
    if isinstance(data, str):
        return [data]
    if isinstance(data, list):
        return [s for item in data for s in _walk_strings(item)]
    if isinstance(data, dict):
        return [s for value in data.values() for s in _walk_strings(value)]
    return []


def collect_missing_vars(data: RawValue) -> list[str]:
    """Unset variables referenced without a fallback, in first-seen order."""
    missing: list[str] = []
    for text in _walk_strings(data):
        for match in _REFERENCE.finditer(text):
            name = match.group("name")
            if match.group("fallback") is not None or name in os.environ:
                continue
            if name not in missing:
                missing.append(name)
    return missing


def _substitute(match: re.Match[str]) -> str:
    fallback = match.group("fallback")
    if fallback is None:
        return os.environ[match.group("name")]
    return os.environ.get(match.group("name"), fallback)


def interpolate(data: RawValue) -> RawValue:
    """
    Replace every reference in string leaves; keys and non-strings are untouched.

    Run `collect_missing_vars` first: an unset variable without a fallback
    raises KeyError here.
    """
    if isinstance(data, str):
        return _REFERENCE.sub(_substitute, data)
    if isinstance(data, list):
        return [interpolate(item) for item in data]
    if isinstance(data, dict):
        return {key: interpolate(value) for key, value in data.items()}
    return data
