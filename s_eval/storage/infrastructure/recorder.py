"""JsonRunRecorder — persists Runs as immutable, atomically written JSON artifacts."""

from pathlib import Path

from s_eval.evaluation.domain.run import Run
from s_eval.storage.domain.naming import new_run_id, slugify
from s_eval.storage.domain.observer import StorageObserver
from s_eval.storage.domain.run_ref import RunRef
from s_eval.storage.infrastructure.artifacts import (
    ARTIFACT_SUFFIX,
    artifact_path,
    check_session_name,
    dump_run,
    iter_artifacts,
    read_run,
    split_stem,
    write_atomic,
)
from s_eval.storage.infrastructure.errors import (
    AmbiguousRunError,
    RunNotFoundError,
    StorageError,
)


def ref_for(run: Run, path: Path) -> RunRef:
    return RunRef(
        session_name=run.session_name,
        run_name=run.run_name,
        run_id=run.run_id,
        path=path,
        created_at=run.created_at,
        primary_score_key=run.primary_score_key,
        total_evaluations=run.total_evaluations,
        total_passed=run.total_passed,
        total_errors=run.total_errors,
    )


class JsonRunRecorder:
    """Single writer for run artifacts under ``results_dir``.

    Every write goes through a temp file and ``os.replace`` so that readers
    never observe a partially written artifact.
    """

    def __init__(self, results_dir: Path, observer: StorageObserver) -> None:
        self._results_dir = results_dir
        self._observer = observer

    def _ids_in_session(self, session_name: str) -> set[str]:
        session_dir = self._results_dir / session_name
        if not session_dir.is_dir():
            return set()
        return {
            parsed[1]
            for path in iter_artifacts(session_dir)
            if (parsed := split_stem(path)) is not None
        }

    def record(self, run: Run) -> RunRef:
        """Persist *run* and return a reference to the new artifact.

        A run_id that already exists in the session is replaced by a fresh one.

        Raises:
            StorageError: if the destination cannot be written. The in-memory
                Run is unaffected.
        """
        check_session_name(run.session_name)
        taken = self._ids_in_session(run.session_name)
        if run.run_id in taken or "_" in run.run_id:
            run_id = new_run_id()
            while run_id in taken:
                run_id = new_run_id()
            run = run.model_copy(update={"run_id": run_id})
        if slugify(run.run_name) != run.run_name:
            run = run.model_copy(update={"run_name": slugify(run.run_name)})

        path = artifact_path(results_dir=self._results_dir, run=run)
        write_atomic(path=path, content=dump_run(run))
        self._observer.run_recorded(
            session_name=run.session_name, run_id=run.run_id, path=str(path)
        )
        return ref_for(run=run, path=path)

    def save(self, run: Run, path: Path) -> None:
        """Atomically rewrite an existing artifact (used for corrections)."""
        write_atomic(path=path, content=dump_run(run))
        self._observer.run_saved(run_id=run.run_id, path=str(path))

    def locate(self, run_id: str, session_name: str | None = None) -> Path:
        """Return the artifact path for *run_id*.

        Raises:
            RunNotFoundError: if no artifact carries the id.
            AmbiguousRunError: if the id exists in several sessions and no
                session was given.
        """
        if session_name is not None:
            session_dirs = [self._results_dir / session_name]
        elif self._results_dir.is_dir():
            session_dirs = sorted(p for p in self._results_dir.iterdir() if p.is_dir())
        else:
            session_dirs = []

        matches = [
            path
            for session_dir in session_dirs
            if session_dir.is_dir()
            for path in session_dir.glob(f"*_{run_id}{ARTIFACT_SUFFIX}")
            if (parsed := split_stem(path)) is not None and parsed[1] == run_id
        ]
        if not matches:
            raise RunNotFoundError(ref=run_id, session_name=session_name)
        sessions = sorted({p.parent.name for p in matches})
        if len(sessions) > 1:
            raise AmbiguousRunError(ref=run_id, sessions=sessions)
        return matches[0]

    def rename(
        self, run_id: str, new_name: str, session_name: str | None = None
    ) -> RunRef:
        """Change a run's name without touching its results.

        The artifact is rewritten in place, then moved to its new filename;
        both steps are atomic, so exactly one artifact exists at all times.
        """
        path = self.locate(run_id=run_id, session_name=session_name)
        run = read_run(path)
        new_run_name = slugify(new_name)
        renamed = run.model_copy(update={"run_name": new_run_name})
        new_path = artifact_path(results_dir=self._results_dir, run=renamed)

        write_atomic(path=path, content=dump_run(renamed))
        if new_path != path:
            try:
                path.replace(new_path)
            except OSError as exc:
                raise StorageError(reason=str(exc), path=new_path) from exc

        self._observer.run_renamed(
            run_id=run_id,
            old_name=run.run_name,
            new_name=new_run_name,
            path=str(new_path),
        )
        return ref_for(run=renamed, path=new_path)
