"""Unit tests for inklex.lexer.dispatcher — first-match ordering and includes."""
from __future__ import annotations

import pytest

from inklex.compiler import compile_grammar
from inklex.grammar.errors import GrammarCycleError
from inklex.lexer.dispatcher import ScanDispatcher, dispatch


def _labels_in_order(table: dict) -> list:
    grammar = compile_grammar(table)
    return [rule.labels for rule, _ in ScanDispatcher(grammar).iter_rules(grammar.root)]


# ---------------------------------------------------------------------------
# Ordering contract
# ---------------------------------------------------------------------------


class TestOrdering:
    def test_first_declared_rule_wins_over_longer_match(self) -> None:
        grammar = compile_grammar(
            {
                "start": [
                    {"regex": r"ab", "token": "short"},
                    {"regex": r"abc", "token": "long"},
                ]
            }
        )
        found = dispatch(grammar, grammar.root, "abc", 0)
        assert found is not None
        assert found.rule.labels == ("short",)
        assert found.end == 2

    def test_later_rule_used_when_earlier_fails(self) -> None:
        grammar = compile_grammar(
            {
                "start": [
                    {"regex": r"x", "token": "x"},
                    {"regex": r"a+", "token": "a"},
                ]
            }
        )
        found = dispatch(grammar, grammar.root, "aaa", 0)
        assert found is not None and found.rule.labels == ("a",)
        assert (found.start, found.end) == (0, 3)

    def test_include_is_expanded_in_place(self) -> None:
        order = _labels_in_order(
            {
                "start": [
                    {"regex": "1", "token": "one"},
                    {"include": "mid"},
                    {"regex": "4", "token": "four"},
                ],
                "mid": [
                    {"regex": "2", "token": "two"},
                    {"include": "deep"},
                ],
                "deep": [{"regex": "3", "token": "three"}],
            }
        )
        assert order == [("one",), ("two",), ("three",), ("four",)]

    def test_included_rule_beats_later_local_rule(self) -> None:
        grammar = compile_grammar(
            {
                "start": [{"include": "kw"}, {"regex": r"\w+", "token": "word"}],
                "kw": [{"regex": r"VAR\b", "token": "keyword"}],
            }
        )
        found = dispatch(grammar, grammar.root, "VAR x", 0)
        assert found is not None
        assert found.rule.labels == ("keyword",)
        assert found.owner == grammar.resolve("kw")

    def test_diamond_include_is_walked_once(self) -> None:
        order = _labels_in_order(
            {
                "start": [{"include": "a"}, {"include": "b"}],
                "a": [{"include": "shared"}, {"regex": "a", "token": "a"}],
                "b": [{"include": "shared"}, {"regex": "b", "token": "b"}],
                "shared": [{"regex": "s", "token": "s"}],
            }
        )
        assert order == [("s",), ("a",), ("b",)]


# ---------------------------------------------------------------------------
# Anchoring
# ---------------------------------------------------------------------------


class TestAnchoring:
    def test_match_must_start_at_offset(self) -> None:
        grammar = compile_grammar({"start": [{"regex": r"b", "token": "b"}]})
        assert dispatch(grammar, grammar.root, "ab", 0) is None
        found = dispatch(grammar, grammar.root, "ab", 1)
        assert found is not None and found.start == 1

    def test_caret_only_matches_at_line_start(self) -> None:
        grammar = compile_grammar({"start": [{"regex": r"^\s*b", "token": "b"}]})
        assert dispatch(grammar, grammar.root, " b", 0) is not None
        assert dispatch(grammar, grammar.root, "ab", 1) is None

    def test_dollar_matches_at_end_offset(self) -> None:
        grammar = compile_grammar({"start": [{"regex": r"$", "pop": True}]})
        found = dispatch(grammar, grammar.root, "abc", 3)
        assert found is not None and found.is_empty
        assert dispatch(grammar, grammar.root, "abc", 1) is None

    def test_no_rules_means_no_match(self) -> None:
        grammar = compile_grammar({"start": []})
        assert dispatch(grammar, grammar.root, "abc", 0) is None


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------


class TestCycles:
    @pytest.fixture()
    def cyclic(self):
        return compile_grammar(
            {
                "start": [{"include": "a"}],
                "a": [{"regex": r"x", "token": "x"}, {"include": "b"}],
                "b": [{"include": "a"}],
            }
        )

    def test_cycle_raises_when_reached(self, cyclic) -> None:
        with pytest.raises(GrammarCycleError) as info:
            dispatch(cyclic, cyclic.root, "y", 0)
        assert info.value.path == ("start", "a", "b", "a")
        assert info.value.offset == 0

    def test_match_before_cycle_is_returned(self, cyclic) -> None:
        found = dispatch(cyclic, cyclic.root, "x", 0)
        assert found is not None and found.rule.labels == ("x",)

    def test_dispatcher_is_reusable_after_cycle(self, cyclic) -> None:
        dispatcher = ScanDispatcher(cyclic)
        with pytest.raises(GrammarCycleError):
            dispatcher.dispatch(cyclic.root, "y", 0)
        assert dispatcher.dispatch(cyclic.root, "x", 0) is not None
