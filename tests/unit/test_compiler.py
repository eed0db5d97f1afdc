"""Unit tests for inklex.compiler — rule table validation and compilation."""
from __future__ import annotations

import logging
from typing import Any

import pytest

from inklex.compiler import GrammarCompiler, compile_grammar, find_include_cycles
from inklex.grammar.errors import GrammarError
from inklex.grammar.rules import DirectiveKind, Include, Rule


def _only_rule(table: dict[str, Any], context: str = "start") -> Rule:
    grammar = compile_grammar(table)
    rules = list(grammar.context(grammar.resolve(context)).rules())
    assert len(rules) == 1
    return rules[0]


# ---------------------------------------------------------------------------
# Successful compilation
# ---------------------------------------------------------------------------


class TestCompile:
    def test_contexts_get_sequential_ids(self) -> None:
        grammar = compile_grammar({"start": [], "other": []})
        assert [ctx.id.index for ctx in grammar.contexts] == [0, 1]
        assert grammar.root.name == "start"

    def test_custom_root(self) -> None:
        grammar = compile_grammar({"main": [], "start": []}, root="main")
        assert grammar.root.name == "main"

    def test_single_label_labels_whole_match(self) -> None:
        rule = _only_rule({"start": [{"regex": r"(a)(b)", "token": "pair"}]})
        assert rule.labels == ("pair",)

    def test_label_list_is_aligned_to_groups(self) -> None:
        rule = _only_rule({"start": [{"regex": r"(a)(b)(c)", "token": ["x", None, "z"]}]})
        assert rule.labels == (None, "x", None, "z")

    def test_single_element_list_on_groupless_pattern(self) -> None:
        rule = _only_rule({"start": [{"regex": r"ab", "token": ["whole"]}]})
        assert rule.labels == ("whole",)

    def test_empty_label_means_skip(self) -> None:
        rule = _only_rule({"start": [{"regex": r"(a)(b)", "token": ["", "b"]}]})
        assert rule.labels == (None, None, "b")

    def test_fewer_labels_than_groups_is_allowed(self) -> None:
        rule = _only_rule({"start": [{"regex": r"(a)(b)(c)", "token": ["a"]}]})
        assert rule.labels == (None, "a")

    def test_rule_without_token(self) -> None:
        assert _only_rule({"start": [{"regex": r"a"}]}).labels == ()

    def test_fill_label(self) -> None:
        rule = _only_rule({"start": [{"regex": r"a", "token": "x", "default": "fill"}]})
        assert rule.fill_label == "fill"

    def test_context_default_label(self) -> None:
        grammar = compile_grammar({"start": [{"default": "prose"}]})
        assert grammar.default_label_for(grammar.root) == "prose"

    def test_grammar_wide_default_label(self) -> None:
        grammar = compile_grammar({"start": []}, default_label="plain")
        assert grammar.default_label_for(grammar.root) == "plain"

    def test_named_directives(self) -> None:
        grammar = compile_grammar(
            {
                "start": [
                    {"regex": r"\(", "push": "paren"},
                    {"regex": r"=", "next": "value"},
                ],
                "paren": [{"regex": r"\)", "pop": True}],
                "value": [],
            }
        )
        push, nxt = grammar.context(grammar.root).rules()
        assert push.directive is not None and push.directive.kind is DirectiveKind.PUSH
        assert push.directive.target == grammar.resolve("paren")
        assert nxt.directive is not None and nxt.directive.kind is DirectiveKind.NEXT
        pop = next(grammar.context(grammar.resolve("paren")).rules())
        assert pop.directive is not None and pop.directive.kind is DirectiveKind.POP

    def test_inline_push_creates_anonymous_context(self) -> None:
        grammar = compile_grammar(
            {
                "start": [
                    {"regex": r"x"},
                    {
                        "regex": r"\[",
                        "push": [
                            {"regex": r"\]", "pop": True},
                            {"regex": r"<", "push": [{"regex": r">", "pop": True}]},
                        ],
                    },
                ]
            }
        )
        assert grammar.context_names == ["start", "start[1]", "start[1][1]"]
        rule = list(grammar.context(grammar.root).rules())[1]
        assert rule.directive is not None
        assert rule.directive.target == grammar.resolve("start[1]")

    def test_includes_are_references_not_copies(self) -> None:
        grammar = compile_grammar(
            {
                "start": [{"include": "a"}],
                "a": [{"include": "b"}, {"regex": r"a"}],
                "b": [{"include": "a"}],
            }
        )
        entries = grammar.context(grammar.root).entries
        assert entries == (Include(grammar.resolve("a")),)
        assert len(grammar) == 3

    def test_compiler_class_matches_function(self) -> None:
        table = {"start": [{"regex": r"a", "token": "a"}]}
        assert GrammarCompiler(table).compile().context_names == compile_grammar(table).context_names


# ---------------------------------------------------------------------------
# Rejected tables
# ---------------------------------------------------------------------------


class TestCompileErrors:
    @pytest.mark.parametrize(
        "table, message",
        [
            ({}, "root context"),
            ({"start": "nope"}, "list of entries"),
            ({"start": ["nope"]}, "must be a mapping"),
            ({"start": [{"include": "missing"}]}, "undefined context 'missing'"),
            ({"start": [{"include": "start", "regex": "a"}]}, "cannot carry"),
            ({"start": [{"token": "x"}]}, "must define"),
            ({"start": [{"regex": "(", "token": "x"}]}, "invalid pattern"),
            ({"start": [{"regex": 5}]}, "regex must be a string"),
            ({"start": [{"regex": "a", "colour": "red"}]}, "unknown rule key"),
            ({"start": [{"regex": "(a)", "token": ["x", "y"]}]}, "2 labels given"),
            ({"start": [{"regex": "a", "token": "bad label"}]}, "invalid label"),
            ({"start": [{"regex": "a", "token": "a..b"}]}, "invalid label"),
            ({"start": [{"regex": "a", "token": 3}]}, "token must be"),
            ({"start": [{"regex": "a", "push": "missing"}]}, "undefined context"),
            ({"start": [{"regex": "a", "push": 3}]}, "directive target"),
            ({"start": [{"regex": "a", "pop": "yes"}]}, "'pop' must be true"),
            ({"start": [{"regex": "a", "pop": True, "push": "start"}]}, "conflicting directives"),
            ({"start": [{"default": "a"}, {"default": "b"}]}, "more than one default"),
            ({"start": [{"regex": "a", "push": [{"include": "gone"}]}]}, "undefined context"),
        ],
    )
    def test_invalid_table(self, table: dict[str, Any], message: str) -> None:
        with pytest.raises(GrammarError, match=message):
            compile_grammar(table)

    def test_error_identifies_context_and_rule(self) -> None:
        with pytest.raises(GrammarError) as info:
            compile_grammar({"start": [{"regex": "a"}], "other": [{"regex": "a"}, {"regex": "["}]})
        assert info.value.context == "other"
        assert info.value.rule_index == 1
        assert "'other' rule 1" in str(info.value)

    def test_invalid_grammar_default_label(self) -> None:
        with pytest.raises(GrammarError):
            compile_grammar({"start": []}, default_label="has space")

    def test_anonymous_name_clash(self) -> None:
        with pytest.raises(GrammarError, match="more than once"):
            compile_grammar({"start": [{"regex": "a", "push": []}], "start[0]": []})

    def test_non_mapping_table(self) -> None:
        with pytest.raises(GrammarError):
            compile_grammar([("start", [])])  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Include cycles
# ---------------------------------------------------------------------------


class TestIncludeCycles:
    def test_cycle_is_reported_once(self) -> None:
        grammar = compile_grammar(
            {
                "start": [{"include": "a"}],
                "a": [{"include": "b"}],
                "b": [{"include": "a"}],
            }
        )
        assert find_include_cycles(grammar) == [("a", "b", "a")]

    def test_self_include(self) -> None:
        grammar = compile_grammar({"start": [{"include": "start"}]})
        assert find_include_cycles(grammar) == [("start", "start")]

    def test_acyclic_grammar(self, bracket_grammar) -> None:
        # group includes start, but start never includes group.
        assert find_include_cycles(bracket_grammar) == []

    def test_cycle_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="inklex.compiler.compiler"):
            compile_grammar({"start": [{"include": "start"}]})
        assert "Include cycle start -> start" in caplog.text

    def test_ink_grammar_has_no_include_cycles(self, ink_grammar) -> None:
        assert find_include_cycles(ink_grammar) == []
