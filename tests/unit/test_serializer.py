"""Unit tests for inklex.grammar.serializer — YAML and JSON grammar files."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from inklex.compiler import compile_grammar
from inklex.grammar.errors import GrammarFormatError
from inklex.grammar.serializer import GrammarSerializer
from inklex.languages import INK_RULES
from inklex.lexer import Tokenizer

TABLE = {
    "start": [
        {"regex": r"\d+", "token": "number"},
        {"regex": r"\(", "token": "paren", "push": [{"regex": r"\)", "token": "paren", "pop": True}]},
    ],
}


@pytest.fixture()
def serializer() -> GrammarSerializer:
    return GrammarSerializer()


class TestTextFormats:
    def test_json_is_valid(self, serializer: GrammarSerializer) -> None:
        assert json.loads(serializer.to_json(TABLE)) == TABLE

    def test_yaml_keeps_context_order(self, serializer: GrammarSerializer) -> None:
        text = serializer.to_yaml({"zeta": [], "start": []})
        assert text.index("zeta") < text.index("start")

    def test_yaml_is_loadable(self, serializer: GrammarSerializer) -> None:
        assert yaml.safe_load(serializer.to_yaml(TABLE)) == TABLE

    def test_tuples_are_dumped_as_lists(self, serializer: GrammarSerializer) -> None:
        text = serializer.to_yaml({"start": [{"regex": "(a)", "token": ("a",)}]})
        assert serializer.from_yaml(text)["start"][0]["token"] == ["a"]

    def test_ink_rules_survive_yaml(self, serializer: GrammarSerializer) -> None:
        table = serializer.from_yaml(serializer.to_yaml(INK_RULES))
        line = "* Pick up the sword -> sword_taken"
        original = Tokenizer(compile_grammar(INK_RULES)).tokenize_line(line)
        reloaded = Tokenizer(compile_grammar(table)).tokenize_line(line)
        assert reloaded.tokens == original.tokens


class TestParseErrors:
    @pytest.mark.parametrize(
        "text, message",
        [
            ("[1, 2]", "top level must be a mapping"),
            ('{"start": 3}', "must be a list"),
            ('{"start": [3]}', "must be a mapping"),
            ("{nope", "invalid JSON"),
        ],
    )
    def test_json_shape(self, serializer: GrammarSerializer, text: str, message: str) -> None:
        with pytest.raises(GrammarFormatError, match=message):
            serializer.from_json(text)

    def test_invalid_yaml(self, serializer: GrammarSerializer) -> None:
        with pytest.raises(GrammarFormatError, match="invalid YAML"):
            serializer.from_yaml("start: [unclosed")

    def test_non_string_context_name(self, serializer: GrammarSerializer) -> None:
        with pytest.raises(GrammarFormatError, match="not a string"):
            serializer.from_yaml("1: []")

    def test_error_names_source(self, serializer: GrammarSerializer) -> None:
        with pytest.raises(GrammarFormatError) as info:
            serializer.from_json("[]", source="lang.json")
        assert info.value.source == "lang.json"
        assert "lang.json" in str(info.value)


class TestFiles:
    @pytest.mark.parametrize("suffix", [".yaml", ".yml", ".json"])
    def test_dump_and_load(self, serializer: GrammarSerializer, tmp_path: Path, suffix: str) -> None:
        path = tmp_path / f"grammar{suffix}"
        serializer.dump(TABLE, path)
        assert serializer.load(path) == TABLE

    def test_unknown_suffix(self, serializer: GrammarSerializer, tmp_path: Path) -> None:
        with pytest.raises(GrammarFormatError, match="unsupported"):
            serializer.dump(TABLE, tmp_path / "grammar.txt")
        with pytest.raises(GrammarFormatError, match="unsupported"):
            serializer.load(tmp_path / "grammar.txt")

    def test_missing_file(self, serializer: GrammarSerializer, tmp_path: Path) -> None:
        with pytest.raises(GrammarFormatError, match="cannot read"):
            serializer.load(tmp_path / "missing.yaml")

    def test_load_grammar_helper(self, tmp_path: Path) -> None:
        import inklex

        path = tmp_path / "digits.yaml"
        path.write_text("start:\n  - regex: '\\d+'\n    token: number\n", encoding="utf-8")
        grammar = inklex.load_grammar(str(path))
        assert Tokenizer(grammar).tokenize_line("a1").labels() == ["text", "number"]
