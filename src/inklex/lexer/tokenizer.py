"""Line tokenizer: drives dispatch, token mapping and the context stack.

``Tokenizer.tokenize_line`` consumes one line given the context stack the
previous line exited with, and returns the line's tokens together with
its own exit stack.  It is a pure function of ``(line, state)`` for a
fixed grammar, so lines from independent documents (or independent line
ranges) can be tokenized concurrently with one shared ``Tokenizer``.

Loop, starting at offset 0:

1. Dispatch against the active (top-of-stack) context.
2. On a match, emit the mapped tokens, apply the rule's directive and
   move past the match.  A zero-width match still applies its directive,
   then the default-token fallback consumes one character.
3. On no match, the default-token fallback consumes one character under
   the active context's default label.

Once the whole line is consumed, dispatch runs at the end offset so that
end-of-line rules (``$`` with ``pop``) fire, empty lines included.  Each
pop there is followed by another attempt in the uncovered context, so a
tag inside a choice closes both at the line break; any other directive
ends the pass.  The pass is bounded by the stack depth.

Consecutive fallback characters with the same label are coalesced into
one token unless ``coalesce_default=False`` is given.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Final

from inklex.grammar.errors import GrammarCycleError
from inklex.grammar.rules import DirectiveKind, Grammar
from inklex.grammar.tokens import ContextId, ContextStack, Token, TokenizationResult
from inklex.lexer.dispatcher import ScanDispatcher, ScanMatch
from inklex.lexer.mapper import map_captures
from inklex.lexer.stack import apply_directive

logger = logging.getLogger(__name__)

_NEWLINE: Final[re.Pattern[str]] = re.compile(r"\r\n|\r|\n")


def split_lines(source: str) -> list[str]:
    """Split source text into lines the way editors do.

    ``\\r\\n``, ``\\r`` and ``\\n`` are all line breaks.  A trailing break
    yields a final empty line, and the empty string is a single empty line.
    """
    return _NEWLINE.split(source)


class _LineBuilder:
    """Collects tokens for one line, coalescing fallback runs."""

    __slots__ = ("_line", "_coalesce", "_tokens", "_run_label", "_run_start", "_run_end")

    def __init__(self, line: str, coalesce: bool) -> None:
        self._line = line
        self._coalesce = coalesce
        self._tokens: list[Token] = []
        self._run_label: str | None = None
        self._run_start = 0
        self._run_end = 0

    def extend(self, tokens: list[Token]) -> None:
        if not tokens:
            return
        self._flush()
        self._tokens.extend(tokens)

    def add_default(self, label: str, offset: int) -> int:
        """Consume one character at ``offset``; return the new offset."""
        end = offset + 1
        if self._coalesce and self._run_label == label and self._run_end == offset:
            self._run_end = end
            return end
        self._flush()
        self._run_label = label
        self._run_start = offset
        self._run_end = end
        return end

    def finish(self) -> tuple[Token, ...]:
        self._flush()
        return tuple(self._tokens)

    def _flush(self) -> None:
        if self._run_label is None:
            return
        self._tokens.append(
            Token(
                self._run_label,
                self._line[self._run_start : self._run_end],
                self._run_start,
                self._run_end,
            )
        )
        self._run_label = None


class Tokenizer:
    """Line tokenizer bound to one compiled grammar.

    Parameters
    ----------
    grammar:
        The compiled grammar (see ``inklex.compiler.compile_grammar``).
    coalesce_default:
        Merge consecutive default-labeled characters into one token.
        When ``False`` the fallback emits one token per character.
    """

    __slots__ = ("_grammar", "_dispatcher", "_coalesce")

    def __init__(self, grammar: Grammar, *, coalesce_default: bool = True) -> None:
        self._grammar = grammar
        self._dispatcher = ScanDispatcher(grammar)
        self._coalesce = coalesce_default

    @property
    def grammar(self) -> Grammar:
        return self._grammar

    @property
    def coalesce_default(self) -> bool:
        return self._coalesce

    def initial_state(self) -> ContextStack:
        """Return the ``[start]`` stack for the first line of a document."""
        return self._grammar.initial_state()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize_line(self, line: str, state: ContextStack | None = None) -> TokenizationResult:
        """Tokenize one line.

        Parameters
        ----------
        line:
            The line text, without its line break.
        state:
            The exit stack of the previous line, or ``None`` for ``[start]``.

        Returns
        -------
        TokenizationResult
            Tokens covering ``line`` exactly, and the exit stack.

        Raises
        ------
        GrammarError
            If ``state`` contains a context that is not part of this grammar.
        """
        stack = self.initial_state() if state is None else state
        for context_id in stack:
            self._grammar.context(context_id)

        builder = _LineBuilder(line, self._coalesce)
        offset = 0
        length = len(line)
        while offset < length:
            found = self._dispatch(stack.top, line, offset)
            if found is None:
                offset = builder.add_default(self._grammar.default_label_for(stack.top), offset)
                continue
            builder.extend(
                map_captures(found.match, found.rule, self._grammar.default_label_for(stack.top))
            )
            stack = apply_directive(stack, found.rule.directive)
            if found.is_empty:
                offset = builder.add_default(self._grammar.default_label_for(stack.top), offset)
            else:
                offset = found.end

        stack = self._finish_line(stack, line)
        return TokenizationResult(tokens=builder.finish(), state=stack)

    def tokenize_lines(
        self,
        lines: Iterable[str],
        state: ContextStack | None = None,
    ) -> list[TokenizationResult]:
        """Tokenize consecutive lines, threading each exit stack into the next."""
        results: list[TokenizationResult] = []
        current = self.initial_state() if state is None else state
        for line in lines:
            result = self.tokenize_line(line, current)
            results.append(result)
            current = result.state
        return results

    def tokenize(self, source: str) -> list[TokenizationResult]:
        """Split ``source`` into lines and tokenize them from ``[start]``."""
        return self.tokenize_lines(split_lines(source))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _finish_line(self, stack: ContextStack, line: str) -> ContextStack:
        """Apply end-of-line rules at ``len(line)``.

        A matching ``pop`` rule is followed by another attempt in the
        context below it, so nested contexts that all end at the line
        break close together.  Any other directive ends the pass.
        """
        end = len(line)
        while True:
            found = self._dispatch(stack.top, line, end)
            if found is None:
                return stack
            directive = found.rule.directive
            after = apply_directive(stack, directive)
            if directive is None or directive.kind is not DirectiveKind.POP or after is stack:
                return after
            stack = after

    def _dispatch(self, context_id: ContextId, line: str, offset: int) -> ScanMatch | None:
        try:
            return self._dispatcher.dispatch(context_id, line, offset)
        except GrammarCycleError as exc:
            logger.debug("%s; falling back to the default token", exc)
            return None

    def __repr__(self) -> str:
        return (
            f"Tokenizer(contexts={len(self._grammar)}, "
            f"coalesce_default={self._coalesce})"
        )


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def tokenize_line(
    grammar: Grammar,
    line: str,
    state: ContextStack | None = None,
) -> TokenizationResult:
    """Tokenize a single line against ``grammar``.

    Example
    -------
    ::

        from inklex.compiler import compile_grammar
        from inklex.lexer import tokenize_line

        grammar = compile_grammar({"start": [{"regex": r"\\d+", "token": "number"}]})
        result = tokenize_line(grammar, "abc 42")
        [t.label for t in result.tokens]   # ['text', 'number']
    """
    return Tokenizer(grammar).tokenize_line(line, state)
