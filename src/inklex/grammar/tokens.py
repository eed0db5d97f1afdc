"""Token and state definitions for the line tokenizer.

A tokenized line is represented by a ``TokenizationResult``: the ordered
``Token`` spans for the line plus the ``ContextStack`` to carry into the
next line.  Token labels are dot-segmented scope strings such as
``divert.target`` or ``flow.knot.declaration.name``; consumers match on
them verbatim.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class ContextId:
    """Identifier of a context inside one compiled grammar.

    Parameters
    ----------
    index:
        Position of the context in the grammar's context table.
    name:
        The context's name, e.g. ``start`` or ``choice[0]`` for an
        anonymous context created by an inline ``push``.
    """

    index: int
    name: str

    def __repr__(self) -> str:
        return f"ContextId({self.index}, {self.name!r})"


@dataclass(frozen=True, slots=True)
class Token:
    """A labeled span of one line.

    Parameters
    ----------
    label:
        Dot-segmented scope label.
    text:
        The exact source text covered by the token.
    start:
        0-based offset of the first character within the line.
    end:
        0-based offset one past the last character.
    """

    label: str
    text: str
    start: int
    end: int

    def __repr__(self) -> str:
        return f"Token({self.label!r}, {self.text!r}, {self.start}:{self.end})"

    @property
    def scopes(self) -> tuple[str, ...]:
        """The label split into its dot-separated segments."""
        return tuple(self.label.split("."))

    def has_scope(self, prefix: str) -> bool:
        """Return True if the label equals ``prefix`` or is nested under it.

        ``Token("divert.target", ...).has_scope("divert")`` is True, but
        ``has_scope("div")`` is not.
        """
        return self.label == prefix or self.label.startswith(prefix + ".")


@dataclass(frozen=True, slots=True)
class ContextStack:
    """Immutable, non-empty stack of active contexts.

    ``entries[0]`` is the outermost (root) context and ``entries[-1]`` is
    the active one.  Stacks are plain values: every transition returns a
    new stack, so a line's exit stack can be stored and handed back to the
    tokenizer later without copying.
    """

    entries: tuple[ContextId, ...]

    def __post_init__(self) -> None:
        if not self.entries:
            raise ValueError("ContextStack must contain at least the root context")

    @property
    def top(self) -> ContextId:
        return self.entries[-1]

    @property
    def root(self) -> ContextId:
        return self.entries[0]

    @property
    def depth(self) -> int:
        return len(self.entries)

    @property
    def names(self) -> tuple[str, ...]:
        """Context names from root to top, suitable for persisting."""
        return tuple(ctx.name for ctx in self.entries)

    def __iter__(self) -> Iterator[ContextId]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"ContextStack({' > '.join(self.names)})"


@dataclass(frozen=True, slots=True)
class TokenizationResult:
    """Output of tokenizing a single line.

    Parameters
    ----------
    tokens:
        Contiguous, non-overlapping spans covering the whole line.
    state:
        The context stack to pass in when tokenizing the next line.
    """

    tokens: tuple[Token, ...]
    state: ContextStack

    @property
    def text(self) -> str:
        """Concatenated token texts; always equal to the input line."""
        return "".join(token.text for token in self.tokens)

    def labels(self) -> list[str]:
        return [token.label for token in self.tokens]

    def find(self, label: str) -> list[Token]:
        """Return the tokens whose label is exactly ``label``."""
        return [token for token in self.tokens if token.label == label]

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)
