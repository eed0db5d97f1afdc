"""Language definitions: a rule table plus static editor metadata.

A ``Language`` bundles the data a host editor needs besides the
tokenizer itself: file extensions, the TextMate-style scope name,
comment delimiters for comment toggling, and the keyword list used for
completion.  None of this metadata influences tokenization.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from typing import ClassVar

from inklex.compiler.compiler import RuleTable, compile_grammar
from inklex.grammar.rules import Grammar


@dataclass(frozen=True, slots=True)
class Completion:
    """A keyword completion entry.

    Parameters
    ----------
    caption:
        Text shown in the completion popup.
    value:
        Text inserted when the entry is accepted.
    meta:
        Short description shown next to the caption.
    """

    caption: str
    value: str
    meta: str


@dataclass(frozen=True, slots=True)
class BlockComment:
    """Start and end markers of a block comment."""

    start: str
    end: str


class Language(ABC):
    """Base class for language definitions.

    Subclasses set the class attributes and implement ``rules``.
    """

    name: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    scope_name: ClassVar[str] = ""
    file_types: ClassVar[tuple[str, ...]] = ()
    line_comment: ClassVar[str | None] = None
    block_comment: ClassVar[BlockComment | None] = None
    keywords: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def rules(self) -> RuleTable:
        """Return the rule table for this language."""

    def compile(self) -> Grammar:
        """Compile ``rules()`` into a grammar.

        Raises
        ------
        GrammarError
            If the rule table is invalid.
        """
        return compile_grammar(self.rules())

    def get_completions(self, prefix: str = "") -> list[Completion]:
        """Return keyword completions starting with ``prefix``.

        The match is case-sensitive, as keywords are.  An empty prefix
        returns every keyword.
        """
        meta = f"{self.display_name or self.name} Keyword"
        return [
            Completion(caption=keyword, value=keyword, meta=meta)
            for keyword in self.keywords
            if keyword.startswith(prefix)
        ]

    def matches_path(self, filename: str) -> bool:
        """Return True if ``filename`` has one of this language's extensions."""
        suffix = PurePath(filename).suffix.lstrip(".")
        return suffix in self.file_types

    def metadata(self) -> dict[str, object]:
        """Return the static metadata as a plain dict."""
        return {
            "name": self.name,
            "scope_name": self.scope_name,
            "file_types": list(self.file_types),
            "line_comment": self.line_comment,
            "block_comment": (
                {"start": self.block_comment.start, "end": self.block_comment.end}
                if self.block_comment
                else None
            ),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
