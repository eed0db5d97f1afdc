"""Structural analysis over tokenized lines.

Uses token labels alone (no syntax tree) to find declared flow points
and divert targets, which is enough for outlines and for navigating
from a ``divert.target`` token to its declaration.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import Final

from inklex.grammar.tokens import TokenizationResult

KNOT_NAME: Final[str] = "flow.knot.declaration.name"
KNOT_FUNCTION: Final[str] = "flow.knot.declaration.function"
STITCH_NAME: Final[str] = "flow.stitch.declaration.name"
CHOICE_LABEL: Final[str] = "choice.label.name"
GATHER_LABEL: Final[str] = "gather.label.name"
DIVERT_TARGET: Final[str] = "divert.target"

_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s+")


class SymbolKind(Enum):
    """Kinds of named flow points."""

    KNOT = auto()
    FUNCTION = auto()
    STITCH = auto()
    CHOICE_LABEL = auto()
    GATHER_LABEL = auto()


@dataclass(frozen=True, slots=True)
class Symbol:
    """A declared, divertable name.

    Parameters
    ----------
    kind:
        What was declared.
    name:
        The declared name.
    line:
        0-based line index of the declaration.
    start:
        Offset of the name within its line.
    end:
        Offset one past the name.
    parent:
        Dotted path of the enclosing knot (and stitch), or ``None`` for
        top-level knots and functions.
    """

    kind: SymbolKind
    name: str
    line: int
    start: int
    end: int
    parent: str | None = None

    @property
    def path(self) -> str:
        """Fully qualified name, e.g. ``knot.stitch.label``."""
        return f"{self.parent}.{self.name}" if self.parent else self.name


@dataclass(frozen=True, slots=True)
class DivertReference:
    """A ``divert.target`` token and its location."""

    target: str
    line: int
    start: int
    end: int

    @property
    def path(self) -> str:
        """The target with any whitespace removed."""
        return _WHITESPACE.sub("", self.target)


def collect_symbols(results: Sequence[TokenizationResult]) -> list[Symbol]:
    """Return every knot, function, stitch and weave label, in source order.

    Parameters
    ----------
    results:
        Consecutive tokenized lines of one document, starting at line 0.
    """
    symbols: list[Symbol] = []
    knot: str | None = None
    stitch: str | None = None

    for line_no, result in enumerate(results):
        is_function = any(token.label == KNOT_FUNCTION for token in result)
        for token in result:
            if token.label == KNOT_NAME:
                knot, stitch = token.text, None
                kind = SymbolKind.FUNCTION if is_function else SymbolKind.KNOT
                symbols.append(Symbol(kind, token.text, line_no, token.start, token.end))
            elif token.label == STITCH_NAME:
                stitch = token.text
                symbols.append(
                    Symbol(SymbolKind.STITCH, token.text, line_no, token.start, token.end, knot)
                )
            elif token.label in (CHOICE_LABEL, GATHER_LABEL):
                kind = SymbolKind.CHOICE_LABEL if token.label == CHOICE_LABEL else SymbolKind.GATHER_LABEL
                parent = ".".join(part for part in (knot, stitch) if part) or None
                symbols.append(
                    Symbol(kind, token.text, line_no, token.start, token.end, parent)
                )
    return symbols


def collect_diverts(results: Sequence[TokenizationResult]) -> list[DivertReference]:
    """Return every divert target token, in source order."""
    return [
        DivertReference(token.text, line_no, token.start, token.end)
        for line_no, result in enumerate(results)
        for token in result
        if token.label == DIVERT_TARGET
    ]


def _scope_at(symbols: Sequence[Symbol], line: int) -> tuple[str | None, str | None]:
    knot: str | None = None
    stitch: str | None = None
    for symbol in symbols:
        if symbol.line > line:
            break
        if symbol.kind in (SymbolKind.KNOT, SymbolKind.FUNCTION):
            knot, stitch = symbol.name, None
        elif symbol.kind is SymbolKind.STITCH:
            stitch = symbol.name
    return knot, stitch


def resolve_target(target: str, symbols: Sequence[Symbol], line: int = 0) -> Symbol | None:
    """Find the declaration a divert target refers to.

    Names are looked up from the innermost scope outwards: first inside
    the stitch enclosing ``line``, then inside its knot, then globally.

    Parameters
    ----------
    target:
        Divert target text, e.g. ``sword_taken`` or ``castle.gate``.
    symbols:
        Output of ``collect_symbols`` for the same document.
    line:
        0-based line of the divert, used to find the enclosing scope.

    Returns
    -------
    Symbol | None
        The declaration, or ``None`` if the target is not declared.
    """
    path = _WHITESPACE.sub("", target)
    if not path:
        return None
    knot, stitch = _scope_at(symbols, line)
    candidates = []
    if knot and stitch:
        candidates.append(f"{knot}.{stitch}.{path}")
    if knot:
        candidates.append(f"{knot}.{path}")
    candidates.append(path)

    by_path = {}
    for symbol in symbols:
        by_path.setdefault(symbol.path, symbol)
    for candidate in candidates:
        if candidate in by_path:
            return by_path[candidate]
    return None
