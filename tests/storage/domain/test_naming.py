"""Tests for run naming helpers."""

import random
import re

from s_eval.storage.domain.naming import generate_run_name, new_run_id, slugify


class TestRunId:
    def test_is_eight_hex_chars(self) -> None:
        assert re.fullmatch(r"[0-9a-f]{8}", new_run_id())

    def test_is_unique_across_calls(self) -> None:
        assert len({new_run_id() for _ in range(100)}) == 100


class TestGeneratedName:
    def test_is_adjective_noun(self) -> None:
        name = generate_run_name(rng=random.Random(7))

        assert re.fullmatch(r"[a-z]+-[a-z]+", name)

    def test_is_deterministic_for_seeded_rng(self) -> None:
        assert generate_run_name(random.Random(1)) == generate_run_name(random.Random(1))


class TestSlugify:
    def test_keeps_safe_characters(self) -> None:
        assert slugify("v1.2-rc") == "v1.2-rc"

    def test_replaces_unsafe_runs_with_single_dash(self) -> None:
        assert slugify("new prompt / v2") == "new-prompt-v2"

    def test_replaces_underscores(self) -> None:
        assert slugify("my_run") == "my-run"

    def test_empty_result_becomes_unnamed(self) -> None:
        assert slugify("///") == "unnamed"
