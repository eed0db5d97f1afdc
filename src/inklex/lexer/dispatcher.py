"""Scan dispatcher: finds the first rule matching at an exact offset.

Rules are tried in declaration order.  An ``Include`` is expanded in
place, depth-first, at the moment it is reached, so the effective rule
sequence of a context is computed lazily and never materialized.  The
first rule whose pattern matches *anchored* at the cursor wins; there is
no longest-match or priority scoring.

Re-entering a context that is still on the include path raises
``GrammarCycleError``.  A context that was already walked completely
during the same attempt is skipped: none of its rules matched at this
offset the first time, so they cannot match now.
"""
from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from inklex.grammar.errors import GrammarCycleError
from inklex.grammar.rules import Grammar, Include, Rule
from inklex.grammar.tokens import ContextId


@dataclass(frozen=True, slots=True)
class ScanMatch:
    """A successful dispatch.

    Parameters
    ----------
    rule:
        The rule that matched.
    match:
        The anchored regular-expression match.
    owner:
        The context that declares ``rule`` (differs from the active
        context when the rule was reached through an include).
    """

    rule: Rule
    match: re.Match[str]
    owner: ContextId

    @property
    def start(self) -> int:
        return self.match.start()

    @property
    def end(self) -> int:
        return self.match.end()

    @property
    def is_empty(self) -> bool:
        return self.match.end() == self.match.start()


class ScanDispatcher:
    """Dispatches scan attempts against one compiled grammar.

    The dispatcher holds no per-call state and may be shared between
    threads.

    Parameters
    ----------
    grammar:
        The compiled grammar to dispatch against.
    """

    __slots__ = ("_grammar",)

    def __init__(self, grammar: Grammar) -> None:
        self._grammar = grammar

    @property
    def grammar(self) -> Grammar:
        return self._grammar

    def iter_rules(self, context_id: ContextId, offset: int = 0) -> Iterator[tuple[Rule, ContextId]]:
        """Yield ``(rule, owner)`` pairs in effective declaration order.

        Includes are descended into in place.  ``offset`` is only used
        to annotate a ``GrammarCycleError``.

        Raises
        ------
        GrammarCycleError
            If an include re-enters a context that is still being walked.
        """
        return self._walk(context_id, [], set(), offset)

    def dispatch(self, context_id: ContextId, line: str, offset: int) -> ScanMatch | None:
        """Return the first rule matching at exactly ``offset``, or ``None``.

        Parameters
        ----------
        context_id:
            The active context.
        line:
            The full line being tokenized.
        offset:
            Cursor position; matches must start here.

        Raises
        ------
        GrammarCycleError
            If include resolution re-enters a context at this offset.
        """
        for rule, owner in self._walk(context_id, [], set(), offset):
            match = rule.pattern.match(line, offset)
            if match is not None:
                return ScanMatch(rule=rule, match=match, owner=owner)
        return None

    # ------------------------------------------------------------------
    # Internal walker
    # ------------------------------------------------------------------

    def _walk(
        self,
        context_id: ContextId,
        visiting: list[ContextId],
        walked: set[ContextId],
        offset: int,
    ) -> Iterator[tuple[Rule, ContextId]]:
        if context_id in visiting:
            path = tuple(ctx.name for ctx in visiting) + (context_id.name,)
            raise GrammarCycleError(path, offset)
        if context_id in walked:
            return
        visiting.append(context_id)
        for entry in self._grammar.context(context_id).entries:
            if isinstance(entry, Include):
                yield from self._walk(entry.target, visiting, walked, offset)
            else:
                yield entry, context_id
        visiting.pop()
        walked.add(context_id)


def dispatch(grammar: Grammar, context_id: ContextId, line: str, offset: int) -> ScanMatch | None:
    """Convenience wrapper around ``ScanDispatcher(grammar).dispatch``."""
    return ScanDispatcher(grammar).dispatch(context_id, line, offset)
