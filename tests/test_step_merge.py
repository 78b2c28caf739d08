"""Tests for step_merge.py — duplicate-free list merging."""

from interviewace.step_merge import merge_no_dup, norm_key, smart_set


class TestNormKey:

    def test_trims_and_casefolds(self):
        assert norm_key("  React ") == "react"
        assert norm_key("STRASSE") == norm_key("straße")

    def test_none_and_numbers(self):
        assert norm_key(None) == ""
        assert norm_key(42) == "42"


class TestMergeNoDup:

    def test_mixed_case_scenario(self):
        assert merge_no_dup(["React", "node.js"], ["react", "SQL", "sql"]) == ["React", "node.js", "SQL"]

    def test_existing_prefix_is_untouched(self):
        current = ["b", "A", "b "]
        merged = merge_no_dup(current, ["a", "c", "B"])
        assert merged[: len(current)] == current
        assert merged == ["b", "A", "b ", "c"]

    def test_duplicate_pair_in_incoming_lands_once(self):
        merged = merge_no_dup(["x"], ["  Go", "go  "])
        assert merged == ["x", "  Go"]

    def test_blank_entries_not_appended(self):
        assert merge_no_dup(["x"], ["", "   ", "y"]) == ["x", "y"]

    def test_none_arguments_act_as_empty(self):
        assert merge_no_dup(None, None) == []
        assert merge_no_dup(["a"], None) == ["a"]
        assert merge_no_dup(None, ["a", "A"]) == ["a"]

    def test_inputs_not_mutated(self):
        current, incoming = ["a"], ["b"]
        merge_no_dup(current, incoming)
        assert current == ["a"] and incoming == ["b"]


class TestSmartSet:

    def test_empty_current_takes_incoming_verbatim(self):
        incoming = ["React", "react", ""]
        result = smart_set([], incoming)
        assert result == incoming
        assert result is not incoming

    def test_non_empty_current_merges(self):
        assert smart_set(["SQL"], ["sql", "Python"]) == ["SQL", "Python"]

    def test_defaults(self):
        assert smart_set() == []
        assert smart_set(None, ["a"]) == ["a"]
