"""Run artifact files — layout, atomic writes, and reads."""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from s_eval.evaluation.domain.run import Run
from s_eval.storage.domain.naming import SESSION_NAME_PATTERN
from s_eval.storage.infrastructure.errors import StorageError

ARTIFACT_SUFFIX = ".json"
_SESSION_NAME = re.compile(SESSION_NAME_PATTERN)


def check_session_name(session_name: str) -> None:
    if not _SESSION_NAME.match(session_name):
        raise StorageError(f"invalid session name {session_name!r}")


def artifact_path(results_dir: Path, run: Run) -> Path:
    """``{results_dir}/{session_name}/{run_name}_{run_id}.json``."""
    return results_dir / run.session_name / f"{run.artifact_name}{ARTIFACT_SUFFIX}"


def split_stem(path: Path) -> tuple[str, str] | None:
    """Return (run_name, run_id) parsed from an artifact filename, or None."""
    if path.suffix != ARTIFACT_SUFFIX:
        return None
    run_name, sep, run_id = path.stem.rpartition("_")
    if not sep or not run_name or not run_id:
        return None
    return run_name, run_id


def iter_artifacts(session_dir: Path) -> list[Path]:
    """Artifacts in a session directory; temp files never match."""
    return sorted(
        p for p in session_dir.glob(f"*_*{ARTIFACT_SUFFIX}") if not p.name.startswith(".")
    )


def write_atomic(path: Path, content: str) -> None:
    """Write *content* to a temp file beside *path*, then ``os.replace`` it in.

    Readers observe either the previous file or the complete new one.

    Raises:
        StorageError: if the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
    except OSError as exc:
        raise StorageError(reason=str(exc), path=path) from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise StorageError(reason=str(exc), path=path) from exc


def _unserializable(value: Any) -> str:
    return repr(value)


def dump_run(run: Run) -> str:
    """Render *run* as artifact JSON.

    Target outputs, inputs and trace payloads may hold arbitrary objects;
    anything JSON cannot represent is stored as its ``repr``.

    Raises:
        StorageError: if the run still cannot be serialized (e.g. a circular
            reference inside an output).
    """
    try:
        data = to_jsonable_python(run, fallback=_unserializable)
        return json.dumps(data, indent=2) + "\n"
    except (ValueError, TypeError) as exc:
        raise StorageError(reason=f"cannot serialize run {run.run_id}: {exc}") from exc


def read_run(path: Path) -> Run:
    """Load a Run artifact from *path*.

    Raises:
        StorageError: if the file is missing, unreadable, or not a valid run.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(reason=str(exc), path=path) from exc
    try:
        return Run.model_validate_json(raw)
    except ValidationError as exc:
        raise StorageError(reason=f"invalid run artifact: {exc}", path=path) from exc
