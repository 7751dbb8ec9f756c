"""filter_results — selects ResultEntries of a Run matching a ResultFilter."""

from collections.abc import Mapping
from typing import Any

from s_eval.evaluation.domain.result import ResultEntry
from s_eval.evaluation.domain.run import Run
from s_eval.query.domain.filters import (
    OPERATORS,
    PassedFilter,
    ResultFilter,
    ScoreFilter,
)


def _has_key(payload: Any, key: str) -> bool:
    """True when a non-empty *key* occurs anywhere in a nested mapping/list."""
    if isinstance(payload, Mapping):
        for name, value in payload.items():
            if name == key and value:
                return True
            if _has_key(value, key):
                return True
    elif isinstance(payload, list | tuple):
        return any(_has_key(item, key) for item in payload)
    return False


def _matches_search(entry: ResultEntry, needle: str) -> bool:
    result = entry.result
    haystack = [
        entry.function,
        entry.dataset,
        entry.case_id or "",
        *entry.labels,
        str(result.input),
        str(result.output),
        str(result.reference),
    ]
    needle = needle.lower()
    return any(needle in text.lower() for text in haystack)


def _matches_score(entry: ResultEntry, score_filter: ScoreFilter) -> bool:
    score = entry.result.score(score_filter.key)
    if score is None:
        return False
    return OPERATORS[score_filter.op](score.numeric, score_filter.value)


def _matches_passed(entry: ResultEntry, passed_filter: PassedFilter) -> bool:
    score = entry.result.score(passed_filter.key)
    return score is not None and score.passed is passed_filter.passed


def _flag_matches(expected: bool | None, actual: bool) -> bool:
    return expected is None or expected == actual


def matches(entry: ResultEntry, result_filter: ResultFilter) -> bool:
    f = result_filter
    result = entry.result
    if f.datasets and entry.dataset not in f.datasets:
        return False
    if entry.dataset in f.exclude_datasets:
        return False
    if f.labels and not set(f.labels) & set(entry.labels):
        return False
    if set(f.exclude_labels) & set(entry.labels):
        return False
    if f.search and not _matches_search(entry=entry, needle=f.search):
        return False

    trace = result.trace_data or {}
    if not _flag_matches(f.has_error, result.error is not None):
        return False
    if not _flag_matches(f.has_trace, bool(trace)):
        return False
    if not _flag_matches(f.has_url, _has_key(trace, "url") or _has_key(result.metadata, "url")):
        return False
    if not _flag_matches(f.has_messages, _has_key(trace, "messages")):
        return False

    if not all(_matches_score(entry, sf) for sf in f.score_filters):
        return False
    return all(_matches_passed(entry, pf) for pf in f.passed_filters)


def filter_results(run: Run, result_filter: ResultFilter) -> list[ResultEntry]:
    """Return the entries of *run* matching *result_filter*, in run order."""
    return [entry for entry in run.results if matches(entry, result_filter)]
