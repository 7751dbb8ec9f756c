"""End-to-end tests for the s-eval CLI commands."""

from pathlib import Path

from typer.testing import CliRunner

from s_eval.cli.main import app
from s_eval.evaluation.domain.run import Run
from s_eval.storage.infrastructure.artifacts import read_run
from s_eval.storage.infrastructure.recorder import JsonRunRecorder
from tests.storage.builders import make_entry, make_run
from tests.storage.fake_observer import FakeStorageObserver

runner = CliRunner()

_ARITHMETIC_EVALS = """\
from s_eval.definition.domain.registry import EvalRegistry

evals = EvalRegistry()


def matches(graded):
    return graded.output == graded.reference


@evals.eval(
    cases=[
        {"id": "one", "input": 1, "reference": 2},
        {"id": "two", "input": 2, "reference": 5},
    ],
    checks=[matches],
)
def double(x):
    return x * 2
"""


def _write_evals(tmp_path: Path) -> Path:
    path = tmp_path / "arithmetic.py"
    path.write_text(_ARITHMETIC_EVALS, encoding="utf-8")
    return path


def _seed(results_dir: Path, *runs: Run) -> None:
    recorder = JsonRunRecorder(results_dir=results_dir, observer=FakeStorageObserver())
    for run in runs:
        recorder.record(run=run)


def _baseline() -> Run:
    return make_run(
        results=[make_entry("add", passed=True), make_entry("sub", passed=False)],
    )


def _candidate() -> Run:
    return make_run(
        results=[make_entry("add", passed=True), make_entry("sub", passed=True)],
        run_name="candidate",
        run_id="bbbb2222",
        minutes=5,
    )


def _graded_on_quality() -> Run:
    return make_run(
        results=[make_entry("add", passed=True, value=0.9)],
        run_name="graded",
        run_id="cccc3333",
        primary_score_key="quality",
    )


class TestRunCommand:
    def test_executes_and_records_run(self, tmp_path: Path) -> None:
        evals = _write_evals(tmp_path)
        results_dir = tmp_path / "runs"

        result = runner.invoke(
            app,
            [
                "run",
                str(evals),
                "--results-dir",
                str(results_dir),
                "--session",
                "ci",
                "--run-name",
                "first",
                "--log-format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        artifacts = list((results_dir / "ci").glob("first_*.json"))
        assert len(artifacts) == 1
        stored = read_run(artifacts[0])
        assert stored.total_evaluations == 2
        assert stored.total_passed == 1
        assert [e.case_id for e in stored.results] == ["one", "two"]

    def test_no_save_writes_nothing(self, tmp_path: Path) -> None:
        evals = _write_evals(tmp_path)
        results_dir = tmp_path / "runs"

        result = runner.invoke(
            app,
            [
                "run",
                str(evals),
                "--results-dir",
                str(results_dir),
                "--no-save",
                "--log-format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        assert not results_dir.exists()

    def test_selector_matching_nothing_exits_1(self, tmp_path: Path) -> None:
        evals = _write_evals(tmp_path)

        result = runner.invoke(
            app,
            [
                "run",
                str(evals),
                "--label",
                "nonexistent",
                "--no-save",
                "--log-format",
                "json",
            ],
        )

        assert result.exit_code == 1
        assert "No tasks matched" in result.output

    def test_missing_eval_file_exits_1(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            ["run", str(tmp_path / "missing.py"), "--no-save", "--log-format", "json"],
        )

        assert result.exit_code == 1
        assert "Failed" in result.output

    def test_invalid_log_format_exits_1(self, tmp_path: Path) -> None:
        evals = _write_evals(tmp_path)

        result = runner.invoke(
            app, ["run", str(evals), "--no-save", "--log-format", "xml"]
        )

        assert result.exit_code == 1
        assert "Invalid log format" in result.output

    def test_invalid_concurrency_exits_1(self, tmp_path: Path) -> None:
        evals = _write_evals(tmp_path)

        result = runner.invoke(
            app,
            ["run", str(evals), "--no-save", "--concurrency", "0", "--log-format", "json"],
        )

        assert result.exit_code == 1
        assert "Failed to validate config" in result.output


class TestSessionsCommand:
    def test_empty_results_dir(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["sessions", "--results-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "No sessions" in result.output

    def test_lists_recorded_runs(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline(), _candidate())

        result = runner.invoke(app, ["sessions", "--results-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "nightly" in result.output
        assert "aaaa1111" in result.output
        assert "bbbb2222" in result.output


class TestShowCommand:
    def test_shows_run_by_id(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(app, ["show", "aaaa1111", "--results-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "1/2 passed" in result.output
        assert "PASS" in result.output
        assert "FAIL" in result.output

    def test_failed_filter_hides_passing_results(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(
            app, ["show", "baseline", "--failed", "--results-dir", str(tmp_path)]
        )

        assert result.exit_code == 0
        assert "FAIL" in result.output
        assert "PASS" not in result.output

    def test_malformed_score_filter_is_rejected(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(
            app,
            ["show", "aaaa1111", "--score", "quality:about:1", "--results-dir", str(tmp_path)],
        )

        assert result.exit_code != 0

    def test_status_uses_the_run_primary_key(self, tmp_path: Path) -> None:
        _seed(tmp_path, _graded_on_quality())

        result = runner.invoke(app, ["show", "cccc3333", "--results-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "0/1 passed" in result.output
        assert "FAIL" in result.output
        assert "PASS" not in result.output

    def test_unknown_run_exits_1(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(app, ["show", "nope", "--results-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "Failed" in result.output


class TestRenameCommand:
    def test_renames_artifact(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(
            app, ["rename", "aaaa1111", "golden run", "--results-dir", str(tmp_path)]
        )

        assert result.exit_code == 0
        assert "Renamed aaaa1111 to golden-run" in result.output
        assert (tmp_path / "nightly" / "golden-run_aaaa1111.json").is_file()
        assert not (tmp_path / "nightly" / "baseline_aaaa1111.json").exists()


class TestCompareCommand:
    def test_compares_two_runs(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline(), _candidate())

        result = runner.invoke(
            app,
            ["compare", "aaaa1111", "bbbb2222", "--results-dir", str(tmp_path)],
        )

        assert result.exit_code == 0
        assert "Comparison" in result.output

    def test_single_run_exits_1(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(
            app, ["compare", "aaaa1111", "--results-dir", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert "Failed to compare runs" in result.output


class TestCorrectCommand:
    def test_correction_updates_stored_totals(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(
            app,
            [
                "correct",
                "aaaa1111",
                "sub",
                "scores.pass.passed",
                "true",
                "--results-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "(2/2 passed)" in result.output
        stored = read_run(tmp_path / "nightly" / "baseline_aaaa1111.json")
        assert stored.total_passed == 2
        sub = next(e for e in stored.results if e.function == "sub")
        assert len(sub.result.correction_history) == 1

    def test_correction_recounts_on_the_run_primary_key(self, tmp_path: Path) -> None:
        _seed(tmp_path, _graded_on_quality())

        result = runner.invoke(
            app,
            [
                "correct",
                "cccc3333",
                "add",
                "scores.pass.notes",
                "checked",
                "--results-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "(0/1 passed)" in result.output
        stored = read_run(tmp_path / "nightly" / "graded_cccc3333.json")
        assert (stored.primary_score_key, stored.total_passed) == ("quality", 0)

    def test_unsupported_field_exits_1(self, tmp_path: Path) -> None:
        _seed(tmp_path, _baseline())

        result = runner.invoke(
            app,
            [
                "correct",
                "aaaa1111",
                "sub",
                "output",
                "x",
                "--results-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "Failed to apply correction" in result.output
