"""YAML config loader — parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from s_eval.config.domain.config import EngineConfig
from s_eval.config.domain.observer import ConfigObserver
from s_eval.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)
from s_eval.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns an EngineConfig from a YAML file."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path) -> EngineConfig:
        """
        Load, interpolate, validate, and return an EngineConfig from a YAML file.

        An empty file yields the default configuration.

        Raises:
            ConfigLoadError: if the file cannot be read or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigValidationError: if the schema is violated.
        """
        raw = _parse_yaml(path=path)
        _check_missing_env_vars(raw=raw)
        cfg = _build_config(resolved=interpolate(raw))
        _emit_warnings(cfg=cfg, observer=self._observer)
        self._observer.config_loaded(path=str(path), session_name=cfg.session_name)
        return cfg


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ConfigLoadError(path=path) from exc
    except OSError as exc:
        raise ConfigLoadError(path=path, reason=str(exc)) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path=path, reason=f"invalid YAML ({exc})") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            f"top level of {path} must be a mapping, got {type(raw).__name__}"
        )
    return raw


def _check_missing_env_vars(raw: Any) -> None:
    """Raise MissingEnvVarsError if any ${ENV_VAR} references in raw are unset."""
    missing = collect_missing_vars(raw)
    if missing:
        raise MissingEnvVarsError(missing)


def _build_config(resolved: Any) -> EngineConfig:
    try:
        return EngineConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _emit_warnings(cfg: EngineConfig, observer: ConfigObserver) -> None:
    if cfg.execution.concurrency > 1 and cfg.execution.timeout_seconds is None:
        observer.config_no_timeout_warning(concurrency=cfg.execution.concurrency)
