"""Trial reduction policies — how several trials collapse into one Result."""

from enum import StrEnum


class TrialReduction(StrEnum):
    """Boolean reduction applied across a task's trials.

    ``first`` (k=1) reports the first trial; ``pass_at_k`` passes when any
    trial passes; ``pass_all_k`` passes only when every trial passes.
    """

    FIRST = "first"
    PASS_AT_K = "pass_at_k"
    PASS_ALL_K = "pass_all_k"
