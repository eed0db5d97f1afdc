"""Rule table serialization for grammar files.

Rule tables are plain dict/list structures, so they map directly onto
YAML and JSON.  This lets a grammar be shipped, edited and swapped as a
data file instead of Python code.

Usage
-----
::

    from inklex.grammar.serializer import GrammarSerializer
    from inklex.compiler import compile_grammar

    serializer = GrammarSerializer()
    table = serializer.load("my-language.yaml")
    grammar = compile_grammar(table)
    yaml_text = serializer.to_yaml(table)
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from inklex.compiler.compiler import RuleTable
from inklex.grammar.errors import GrammarFormatError

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})
_JSON_SUFFIXES = frozenset({".json"})


class GrammarSerializer:
    """Converts rule tables to and from YAML and JSON text."""

    # ------------------------------------------------------------------
    # Serialization (table → text)
    # ------------------------------------------------------------------

    def to_json(self, table: RuleTable, indent: int = 2) -> str:
        """Serialize a rule table to a JSON string."""
        return json.dumps(table, indent=indent, ensure_ascii=False)

    def to_yaml(self, table: RuleTable) -> str:
        """Serialize a rule table to a YAML string, preserving context order."""
        return yaml.safe_dump(
            _plain(table),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )

    def dump(self, table: RuleTable, path: str | Path) -> None:
        """Write ``table`` to ``path``; the suffix selects the format."""
        target = Path(path)
        if target.suffix in _JSON_SUFFIXES:
            text = self.to_json(table)
        elif target.suffix in _YAML_SUFFIXES:
            text = self.to_yaml(table)
        else:
            raise GrammarFormatError(
                f"unsupported grammar file suffix {target.suffix!r}", source=str(target)
            )
        target.write_text(text, encoding="utf-8")

    # ------------------------------------------------------------------
    # Deserialization (text → table)
    # ------------------------------------------------------------------

    def from_json(self, text: str, source: str = "<string>") -> dict[str, list[Any]]:
        """Parse a JSON rule table.

        Raises
        ------
        GrammarFormatError
            If the text is not JSON or does not have the table shape.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GrammarFormatError(f"invalid JSON: {exc}", source=source) from exc
        return self.check_shape(data, source)

    def from_yaml(self, text: str, source: str = "<string>") -> dict[str, list[Any]]:
        """Parse a YAML rule table.

        Raises
        ------
        GrammarFormatError
            If the text is not YAML or does not have the table shape.
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise GrammarFormatError(f"invalid YAML: {exc}", source=source) from exc
        return self.check_shape(data, source)

    def load(self, path: str | Path) -> dict[str, list[Any]]:
        """Read a rule table from a ``.yaml``, ``.yml`` or ``.json`` file.

        Raises
        ------
        GrammarFormatError
            If the file cannot be read, has an unknown suffix, or does not
            contain a rule table.
        """
        source = Path(path)
        if source.suffix not in _YAML_SUFFIXES | _JSON_SUFFIXES:
            raise GrammarFormatError(
                f"unsupported grammar file suffix {source.suffix!r}", source=str(source)
            )
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise GrammarFormatError(f"cannot read file: {exc}", source=str(source)) from exc
        if source.suffix in _JSON_SUFFIXES:
            return self.from_json(text, source=str(source))
        return self.from_yaml(text, source=str(source))

    @staticmethod
    def check_shape(data: Any, source: str = "<string>") -> dict[str, list[Any]]:
        """Check that ``data`` maps context names to lists of mappings.

        Nested entry lists (inline ``push``/``next`` contexts) are checked
        by the compiler.
        """
        if not isinstance(data, Mapping):
            raise GrammarFormatError(
                f"top level must be a mapping of context names, got {type(data).__name__}",
                source=source,
            )
        table: dict[str, list[Any]] = {}
        for name, entries in data.items():
            if not isinstance(name, str):
                raise GrammarFormatError(f"context name {name!r} is not a string", source=source)
            if not isinstance(entries, list):
                raise GrammarFormatError(
                    f"context {name!r} must be a list of entries", source=source
                )
            for index, entry in enumerate(entries):
                if not isinstance(entry, Mapping):
                    raise GrammarFormatError(
                        f"context {name!r} entry {index} must be a mapping", source=source
                    )
            table[name] = entries
        return table


def _plain(value: Any) -> Any:
    """Convert tuples and mapping subclasses so ``safe_dump`` accepts them."""
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value
