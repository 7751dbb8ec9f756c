"""SessionRegistry — enumerates and looks up stored runs grouped by session."""

from pathlib import Path

from s_eval.evaluation.domain.run import Run
from s_eval.storage.domain.observer import StorageObserver
from s_eval.storage.domain.run_ref import RunRef, Session
from s_eval.storage.infrastructure.artifacts import iter_artifacts, read_run
from s_eval.storage.infrastructure.errors import (
    AmbiguousRunError,
    RunNotFoundError,
    StorageError,
)
from s_eval.storage.infrastructure.recorder import ref_for


class SessionRegistry:
    """Read side of run storage.

    Sessions are directories under ``results_dir``; they exist once their first
    run is recorded. Stored runs load without their eval source, so results
    remain viewable even when the originating eval file is gone.
    """

    def __init__(self, results_dir: Path, observer: StorageObserver) -> None:
        self._results_dir = results_dir
        self._observer = observer

    def session_names(self) -> list[str]:
        if not self._results_dir.is_dir():
            return []
        return sorted(p.name for p in self._results_dir.iterdir() if p.is_dir())

    def list_runs(self, session_name: str) -> list[RunRef]:
        """Run references in a session, oldest first.

        Raises:
            RunNotFoundError: if the session does not exist.
        """
        session_dir = self._results_dir / session_name
        if not session_dir.is_dir():
            raise RunNotFoundError(ref=session_name)

        refs: list[RunRef] = []
        for path in iter_artifacts(session_dir):
            try:
                run = read_run(path)
            except StorageError as exc:
                self._observer.artifact_skipped(path=str(path), reason=str(exc))
                continue
            refs.append(ref_for(run=run, path=path))
        refs.sort(key=lambda r: (r.created_at, r.run_id))
        return refs

    def list_sessions(self) -> list[Session]:
        return [
            Session(name=name, runs=self.list_runs(session_name=name))
            for name in self.session_names()
        ]

    def find(self, session_name: str, ref: str) -> RunRef:
        """Find a run by id, or by name (the most recent run wins).

        Raises:
            RunNotFoundError: if nothing in the session matches.
        """
        runs = self.list_runs(session_name=session_name)
        for run in runs:
            if run.run_id == ref:
                return run
        named = [run for run in runs if run.run_name == ref]
        if named:
            return named[-1]
        raise RunNotFoundError(ref=ref, session_name=session_name)

    def resolve(self, ref: str, session_name: str | None = None) -> RunRef:
        """Resolve a path, or an id/name within one session or across all.

        Raises:
            RunNotFoundError: if nothing matches.
            AmbiguousRunError: if several sessions match and none was given.
        """
        path = Path(ref)
        if path.is_file():
            return ref_for(run=self.load(path), path=path)
        if session_name is not None:
            return self.find(session_name=session_name, ref=ref)

        matches: list[RunRef] = []
        for name in self.session_names():
            try:
                matches.append(self.find(session_name=name, ref=ref))
            except RunNotFoundError:
                continue
        if not matches:
            raise RunNotFoundError(ref=ref)
        if len(matches) > 1:
            raise AmbiguousRunError(ref=ref, sessions=[m.session_name for m in matches])
        return matches[0]

    def load(self, path: Path) -> Run:
        """Load a run directly from an artifact path."""
        return read_run(path)
