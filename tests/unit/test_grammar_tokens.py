"""Unit tests for inklex.grammar.tokens — Token, ContextId, ContextStack and results."""
from __future__ import annotations

import dataclasses

import pytest

from inklex.grammar.tokens import ContextId, ContextStack, Token, TokenizationResult

START = ContextId(0, "start")
CHOICE = ContextId(1, "choice[0]")


# ---------------------------------------------------------------------------
# Token
# ---------------------------------------------------------------------------


class TestToken:
    def test_fields(self) -> None:
        token = Token("divert.target", "sword_taken", 23, 34)
        assert token.label == "divert.target"
        assert token.text == "sword_taken"
        assert (token.start, token.end) == (23, 34)

    def test_is_frozen(self) -> None:
        token = Token("text", "a", 0, 1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            token.label = "other"  # type: ignore[misc]

    def test_scopes_split_on_dots(self) -> None:
        assert Token("flow.knot.declaration.name", "k", 0, 1).scopes == (
            "flow",
            "knot",
            "declaration",
            "name",
        )

    @pytest.mark.parametrize(
        "prefix, expected",
        [
            ("divert", True),
            ("divert.target", True),
            ("div", False),
            ("target", False),
            ("divert.target.x", False),
        ],
    )
    def test_has_scope(self, prefix: str, expected: bool) -> None:
        assert Token("divert.target", "x", 0, 1).has_scope(prefix) is expected

    def test_equality_is_by_value(self) -> None:
        assert Token("text", "a", 0, 1) == Token("text", "a", 0, 1)
        assert Token("text", "a", 0, 1) != Token("text", "a", 1, 2)

    def test_repr_shows_span(self) -> None:
        assert repr(Token("text", "ab", 0, 2)) == "Token('text', 'ab', 0:2)"


# ---------------------------------------------------------------------------
# ContextStack
# ---------------------------------------------------------------------------


class TestContextStack:
    def test_empty_stack_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            ContextStack(())

    def test_top_and_root(self) -> None:
        stack = ContextStack((START, CHOICE))
        assert stack.top == CHOICE
        assert stack.root == START
        assert stack.depth == 2
        assert len(stack) == 2

    def test_names_from_root_to_top(self) -> None:
        assert ContextStack((START, CHOICE)).names == ("start", "choice[0]")

    def test_iteration_order(self) -> None:
        assert list(ContextStack((START, CHOICE))) == [START, CHOICE]

    def test_stacks_compare_by_value(self) -> None:
        assert ContextStack((START,)) == ContextStack((START,))
        assert ContextStack((START,)) != ContextStack((START, CHOICE))

    def test_stacks_are_hashable(self) -> None:
        assert len({ContextStack((START,)), ContextStack((START,))}) == 1

    def test_repr(self) -> None:
        assert repr(ContextStack((START, CHOICE))) == "ContextStack(start > choice[0])"


class TestContextId:
    def test_ordering_follows_index(self) -> None:
        assert START < CHOICE

    def test_repr(self) -> None:
        assert repr(START) == "ContextId(0, 'start')"


# ---------------------------------------------------------------------------
# TokenizationResult
# ---------------------------------------------------------------------------


class TestTokenizationResult:
    @pytest.fixture()
    def result(self) -> TokenizationResult:
        return TokenizationResult(
            tokens=(
                Token("divert.operator", "->", 0, 2),
                Token("divert", " ", 2, 3),
                Token("divert.target", "end", 3, 6),
            ),
            state=ContextStack((START,)),
        )

    def test_text_concatenates_tokens(self, result: TokenizationResult) -> None:
        assert result.text == "-> end"

    def test_labels(self, result: TokenizationResult) -> None:
        assert result.labels() == ["divert.operator", "divert", "divert.target"]

    def test_find(self, result: TokenizationResult) -> None:
        assert [t.text for t in result.find("divert.target")] == ["end"]
        assert result.find("missing") == []

    def test_iteration_and_len(self, result: TokenizationResult) -> None:
        assert len(result) == 3
        assert [t.text for t in result] == ["->", " ", "end"]

    def test_empty_result(self) -> None:
        empty = TokenizationResult(tokens=(), state=ContextStack((START,)))
        assert empty.text == ""
        assert len(empty) == 0
