"""Compiled grammar data model.

A ``Grammar`` is an immutable, indexed table of ``Context`` objects.
Each context is an ordered sequence of entries, where an entry is either
a matchable ``Rule`` or an ``Include`` that splices another context's
entries in place.  Includes hold a ``ContextId`` and are dereferenced
through the grammar at dispatch time, so cyclic grammars are represented
without flattening.

Instances of these classes are produced by
``inklex.compiler.compile_grammar`` and are never mutated afterwards;
they can be shared freely between threads.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Final

from inklex.grammar.errors import GrammarError
from inklex.grammar.tokens import ContextStack, ContextId

ROOT_CONTEXT: Final[str] = "start"
DEFAULT_LABEL: Final[str] = "text"


class DirectiveKind(Enum):
    """Context-stack transition requested by a matched rule."""

    PUSH = auto()
    POP = auto()
    NEXT = auto()


@dataclass(frozen=True, slots=True)
class Directive:
    """A stack transition attached to a rule.

    Parameters
    ----------
    kind:
        Which transition to apply.
    target:
        Context entered by ``PUSH`` and ``NEXT``; ``None`` for ``POP``.
    """

    kind: DirectiveKind
    target: ContextId | None = None

    def __post_init__(self) -> None:
        if (self.kind is DirectiveKind.POP) != (self.target is None):
            raise ValueError(f"{self.kind.name} directive has invalid target {self.target!r}")

    @classmethod
    def push(cls, target: ContextId) -> Directive:
        return cls(DirectiveKind.PUSH, target)

    @classmethod
    def pop(cls) -> Directive:
        return cls(DirectiveKind.POP)

    @classmethod
    def next(cls, target: ContextId) -> Directive:
        return cls(DirectiveKind.NEXT, target)

    def __str__(self) -> str:
        if self.target is None:
            return self.kind.name.lower()
        return f"{self.kind.name.lower()} {self.target.name}"


@dataclass(frozen=True, slots=True)
class Rule:
    """A compiled pattern with its capture labels and optional directive.

    Parameters
    ----------
    pattern:
        Compiled expression, matched anchored at the cursor offset.
    labels:
        Label for each capture group, indexed by group number.  Index 0
        labels the whole match and is only used by single-label rules.
        ``None`` means the group emits no token of its own.
    directive:
        Optional stack transition applied after the match.
    fill_label:
        Label for characters inside the match span that no labeled
        capture covers.  When ``None`` the active context's default
        label is used instead.
    """

    pattern: re.Pattern[str]
    labels: tuple[str | None, ...]
    directive: Directive | None = None
    fill_label: str | None = None

    def __repr__(self) -> str:
        suffix = f", {self.directive}" if self.directive else ""
        return f"Rule({self.pattern.pattern!r}{suffix})"


@dataclass(frozen=True, slots=True)
class Include:
    """A reference to another context whose entries are matched in place."""

    target: ContextId

    def __repr__(self) -> str:
        return f"Include({self.target.name})"


Entry = Rule | Include


@dataclass(frozen=True, slots=True)
class Context:
    """A named, ordered sequence of rules and includes.

    Parameters
    ----------
    id:
        Identifier of this context within its grammar.
    entries:
        Rules and includes in declaration order.  Order is the only
        disambiguator between rules that match at the same offset.
    default_label:
        Label used by the default-token fallback while this context is
        active, or ``None`` to use the grammar-wide default.
    """

    id: ContextId
    entries: tuple[Entry, ...]
    default_label: str | None = None

    @property
    def name(self) -> str:
        return self.id.name

    def rules(self) -> Iterator[Rule]:
        """Yield the rules declared directly in this context (no includes)."""
        for entry in self.entries:
            if isinstance(entry, Rule):
                yield entry

    def includes(self) -> Iterator[ContextId]:
        """Yield the targets of the includes declared in this context."""
        for entry in self.entries:
            if isinstance(entry, Include):
                yield entry.target


@dataclass(frozen=True, slots=True)
class Grammar:
    """An immutable, resolved grammar.

    Parameters
    ----------
    contexts:
        All contexts, positioned so that ``contexts[i].id.index == i``.
    root:
        The context every fresh stack starts in (``start``).
    default_label:
        Fallback label for contexts that declare none.
    """

    contexts: tuple[Context, ...]
    root: ContextId
    default_label: str = DEFAULT_LABEL
    _by_name: Mapping[str, ContextId] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for index, ctx in enumerate(self.contexts):
            if ctx.id.index != index:
                raise GrammarError(
                    f"context is stored at position {index} but has index {ctx.id.index}",
                    context=ctx.name,
                )
        by_name = MappingProxyType({ctx.name: ctx.id for ctx in self.contexts})
        object.__setattr__(self, "_by_name", by_name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def context(self, context_id: ContextId) -> Context:
        """Dereference a context id through the indirection table."""
        try:
            ctx = self.contexts[context_id.index]
        except IndexError:
            raise GrammarError(f"unknown context id {context_id!r}") from None
        if ctx.id != context_id:
            raise GrammarError(f"context id {context_id!r} does not belong to this grammar")
        return ctx

    def resolve(self, name: str) -> ContextId:
        """Return the id of the context called ``name``.

        Raises
        ------
        GrammarError
            If no context has that name.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise GrammarError(f"unknown context {name!r}") from None

    def default_label_for(self, context_id: ContextId) -> str:
        """Return the fallback label used while ``context_id`` is active."""
        return self.context(context_id).default_label or self.default_label

    @property
    def context_names(self) -> list[str]:
        return [ctx.name for ctx in self.contexts]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self.contexts)

    # ------------------------------------------------------------------
    # Stack helpers
    # ------------------------------------------------------------------

    def initial_state(self) -> ContextStack:
        """Return the single-entry stack every document starts with."""
        return ContextStack((self.root,))

    def state_from_names(self, names: Iterable[str]) -> ContextStack:
        """Rebuild a stack from context names, e.g. after persisting it."""
        entries = tuple(self.resolve(name) for name in names)
        if not entries:
            return self.initial_state()
        return ContextStack(entries)
