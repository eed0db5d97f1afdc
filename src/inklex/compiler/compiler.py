"""RuleSet compiler: turns a rule table into an immutable ``Grammar``.

A rule table maps context names to ordered lists of entries.  Each
entry is a plain mapping in one of three forms::

    {"include": "comments"}
    {"regex": r"(->)(\\s*)(\\w+)", "token": ["divert.operator", "divert", "divert.target"],
     "push": "name" | [entries...], "next": "name" | [entries...], "pop": True,
     "default": "fill.label"}
    {"default": "choice"}

The last form declares the context's default label, used by the
default-token fallback.  Inline entry lists given to ``push`` or ``next``
become anonymous contexts named ``<parent>[<index>]``.

Includes are compiled into references (``Include``) and are never
flattened, so mutually recursive tables compile in linear time.  Any
structural problem aborts compilation with a ``GrammarError``; a partial
grammar is never returned.
"""
from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Mapping, Sequence
from typing import Any, Final

from inklex.grammar.errors import GrammarError
from inklex.grammar.rules import (
    DEFAULT_LABEL,
    ROOT_CONTEXT,
    Context,
    Directive,
    Entry,
    Grammar,
    Include,
    Rule,
)
from inklex.grammar.tokens import ContextId

logger = logging.getLogger(__name__)

RuleTable = Mapping[str, Sequence[Mapping[str, Any]]]

_RULE_KEYS: Final[frozenset[str]] = frozenset({"regex", "token", "push", "next", "pop", "default"})
_DIRECTIVE_KEYS: Final[tuple[str, ...]] = ("push", "next", "pop")
_LABEL_RE: Final[re.Pattern[str]] = re.compile(r"[^\s.]+(?:\.[^\s.]+)*")


class GrammarCompiler:
    """Compiles one rule table.

    Parameters
    ----------
    table:
        Mapping of context names to entry lists.
    root:
        Name of the context fresh stacks start in.
    default_label:
        Grammar-wide fallback label for contexts that declare none.
    """

    def __init__(
        self,
        table: RuleTable,
        *,
        root: str = ROOT_CONTEXT,
        default_label: str = DEFAULT_LABEL,
    ) -> None:
        self._table = table
        self._root = root
        self._default_label = default_label
        self._ids: dict[str, ContextId] = {}
        self._pending: deque[tuple[ContextId, Any]] = deque()
        self._compiled: dict[int, Context] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile(self) -> Grammar:
        """Compile the table.

        Returns
        -------
        Grammar
            The resolved grammar.

        Raises
        ------
        GrammarError
            On the first structural problem found.
        """
        if not isinstance(self._table, Mapping):
            raise GrammarError(
                f"rule table must be a mapping of context names, got {type(self._table).__name__}"
            )
        if self._root not in self._table:
            raise GrammarError(f"root context {self._root!r} is not defined")
        self._check_label(self._default_label, None, None)

        for name in self._table:
            if not isinstance(name, str) or not name:
                raise GrammarError(f"context names must be non-empty strings, got {name!r}")
            self._allocate(name)
        for name, entries in self._table.items():
            self._pending.append((self._ids[name], entries))

        while self._pending:
            context_id, raw_entries = self._pending.popleft()
            self._compiled[context_id.index] = self._compile_context(context_id, raw_entries)

        grammar = Grammar(
            contexts=tuple(self._compiled[index] for index in range(len(self._ids))),
            root=self._ids[self._root],
            default_label=self._default_label,
        )
        logger.debug(
            "Compiled grammar with %d context(s) (%d anonymous)",
            len(grammar),
            len(grammar) - len(self._table),
        )
        for cycle in find_include_cycles(grammar):
            logger.warning(
                "Include cycle %s; dispatch will stop at re-entry",
                " -> ".join(cycle),
            )
        return grammar

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    def _allocate(self, name: str) -> ContextId:
        if name in self._ids:
            raise GrammarError(f"context {name!r} is defined more than once")
        context_id = ContextId(len(self._ids), name)
        self._ids[name] = context_id
        return context_id

    def _compile_context(self, context_id: ContextId, raw_entries: Any) -> Context:
        name = context_id.name
        if isinstance(raw_entries, (str, bytes)) or not isinstance(raw_entries, Sequence):
            raise GrammarError("context must be a list of entries", context=name)

        entries: list[Entry] = []
        default_label: str | None = None
        for index, raw in enumerate(raw_entries):
            if not isinstance(raw, Mapping):
                raise GrammarError(
                    f"entry must be a mapping, got {type(raw).__name__}",
                    context=name,
                    rule_index=index,
                )
            if "include" in raw:
                if set(raw) != {"include"}:
                    raise GrammarError(
                        "an include entry cannot carry other keys",
                        context=name,
                        rule_index=index,
                    )
                entries.append(Include(self._reference(raw["include"], name, index)))
            elif "regex" in raw:
                entries.append(self._compile_rule(context_id, index, raw))
            elif set(raw) == {"default"}:
                if default_label is not None:
                    raise GrammarError(
                        "context declares more than one default label",
                        context=name,
                        rule_index=index,
                    )
                default_label = self._check_label(raw["default"], name, index)
            else:
                raise GrammarError(
                    "entry must define 'regex', 'include' or 'default'",
                    context=name,
                    rule_index=index,
                )
        return Context(id=context_id, entries=tuple(entries), default_label=default_label)

    def _reference(self, target: Any, context: str, index: int) -> ContextId:
        if not isinstance(target, str):
            raise GrammarError(
                f"context reference must be a name, got {target!r}",
                context=context,
                rule_index=index,
            )
        try:
            return self._ids[target]
        except KeyError:
            raise GrammarError(
                f"reference to undefined context {target!r}",
                context=context,
                rule_index=index,
            ) from None

    def _target(self, value: Any, parent: ContextId, index: int) -> ContextId:
        """Resolve a ``push``/``next`` value: a name or an inline entry list."""
        if isinstance(value, str):
            return self._reference(value, parent.name, index)
        if isinstance(value, Sequence):
            anonymous = self._allocate(f"{parent.name}[{index}]")
            self._pending.append((anonymous, value))
            return anonymous
        raise GrammarError(
            f"directive target must be a context name or an entry list, got {value!r}",
            context=parent.name,
            rule_index=index,
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _compile_rule(self, context_id: ContextId, index: int, raw: Mapping[str, Any]) -> Rule:
        name = context_id.name
        unknown = set(raw) - _RULE_KEYS
        if unknown:
            raise GrammarError(
                f"unknown rule key(s): {', '.join(sorted(unknown))}",
                context=name,
                rule_index=index,
            )

        source = raw["regex"]
        if not isinstance(source, str):
            raise GrammarError(f"regex must be a string, got {source!r}", context=name, rule_index=index)
        try:
            pattern = re.compile(source)
        except re.error as exc:
            raise GrammarError(
                f"invalid pattern {source!r}: {exc}",
                context=name,
                rule_index=index,
            ) from exc

        labels = self._compile_labels(raw.get("token"), pattern, name, index)

        present = [key for key in _DIRECTIVE_KEYS if key in raw]
        if len(present) > 1:
            raise GrammarError(
                f"rule combines conflicting directives: {', '.join(present)}",
                context=name,
                rule_index=index,
            )
        directive: Directive | None = None
        if "push" in raw:
            directive = Directive.push(self._target(raw["push"], context_id, index))
        elif "next" in raw:
            directive = Directive.next(self._target(raw["next"], context_id, index))
        elif "pop" in raw:
            if raw["pop"] is not True:
                raise GrammarError("'pop' must be true when present", context=name, rule_index=index)
            directive = Directive.pop()

        fill_label = None
        if "default" in raw:
            fill_label = self._check_label(raw["default"], name, index)

        return Rule(pattern=pattern, labels=labels, directive=directive, fill_label=fill_label)

    def _compile_labels(
        self,
        token: Any,
        pattern: re.Pattern[str],
        context: str,
        index: int,
    ) -> tuple[str | None, ...]:
        if token is None:
            return ()
        if isinstance(token, str):
            return (self._optional_label(token, context, index),)
        if not isinstance(token, Sequence):
            raise GrammarError(
                f"token must be a label or a list of labels, got {token!r}",
                context=context,
                rule_index=index,
            )
        labels = [self._optional_label(label, context, index) for label in token]
        if len(labels) == 1 and pattern.groups == 0:
            return (labels[0],)
        if len(labels) > pattern.groups:
            raise GrammarError(
                f"{len(labels)} labels given but pattern has {pattern.groups} group(s)",
                context=context,
                rule_index=index,
            )
        return (None, *labels)

    def _optional_label(self, label: Any, context: str, index: int) -> str | None:
        if label is None or label == "":
            return None
        return self._check_label(label, context, index)

    @staticmethod
    def _check_label(label: Any, context: str | None, index: int | None) -> str:
        if not isinstance(label, str) or not _LABEL_RE.fullmatch(label):
            raise GrammarError(
                f"invalid label {label!r}; expected dot-separated scope segments",
                context=context,
                rule_index=index,
            )
        return label


# ---------------------------------------------------------------------------
# Structural checks
# ---------------------------------------------------------------------------


def find_include_cycles(grammar: Grammar) -> list[tuple[str, ...]]:
    """Return include-only cycles visible in the grammar's structure.

    Each cycle is reported once, as the context names along the cycle
    with the first name repeated at the end.  Such cycles are legal; the
    dispatcher stops at same-offset re-entry with ``GrammarCycleError``.
    """
    cycles: list[tuple[str, ...]] = []
    done: set[int] = set()

    def visit(context_id: ContextId, path: list[ContextId]) -> None:
        if context_id in path:
            start = path.index(context_id)
            cycles.append(tuple(ctx.name for ctx in path[start:]) + (context_id.name,))
            return
        if context_id.index in done:
            return
        path.append(context_id)
        for target in grammar.context(context_id).includes():
            visit(target, path)
        path.pop()
        done.add(context_id.index)

    for ctx in grammar.contexts:
        visit(ctx.id, [])
    return cycles


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def compile_grammar(
    table: RuleTable,
    *,
    root: str = ROOT_CONTEXT,
    default_label: str = DEFAULT_LABEL,
) -> Grammar:
    """Compile a rule table into an immutable ``Grammar``.

    Parameters
    ----------
    table:
        Mapping of context names to entry lists.
    root:
        Name of the root context (default ``"start"``).
    default_label:
        Label for unmatched text in contexts without a declared default.

    Returns
    -------
    Grammar
        The resolved grammar.

    Raises
    ------
    GrammarError
        If a referenced context does not exist, a pattern is invalid, or
        an entry is malformed.

    Example
    -------
    ::

        from inklex.compiler import compile_grammar
        grammar = compile_grammar({"start": [{"regex": r"\\d+", "token": "number"}]})
    """
    return GrammarCompiler(table, root=root, default_label=default_label).compile()
