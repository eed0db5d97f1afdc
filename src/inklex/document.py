"""Document wrapper with incremental re-tokenization.

``Document`` keeps the lines of one source text together with their
tokenization results.  After an edit only the edited lines are
re-tokenized, plus the lines that follow them until an entering context
stack matches the one stored before the edit.  From that point on the
stored results are reused unchanged, because tokenizing a line is a pure
function of the line and its entering stack.

Example
-------
::

    from inklex import Document

    doc = Document("== start ==\\n* Go -> forest\\n")
    doc.diverts()[0].target        # 'forest'
    doc.edit(1, 1, ["* Stay -> hut"])
"""
from __future__ import annotations

from collections.abc import Iterable

from inklex.analysis.symbols import (
    DivertReference,
    Symbol,
    collect_diverts,
    collect_symbols,
    resolve_target,
)
from inklex.grammar.tokens import ContextStack, Token, TokenizationResult
from inklex.lexer.tokenizer import Tokenizer, split_lines


class Document:
    """A tokenized source text.

    Parameters
    ----------
    source:
        Initial text.
    language:
        Registered language name, used when ``tokenizer`` is not given.
    tokenizer:
        Explicit tokenizer, e.g. one built from a custom grammar.
    """

    def __init__(
        self,
        source: str = "",
        language: str = "ink",
        *,
        tokenizer: Tokenizer | None = None,
    ) -> None:
        if tokenizer is None:
            from inklex.languages import get_tokenizer

            tokenizer = get_tokenizer(language)
        self._tokenizer = tokenizer
        self._lines: list[str] = split_lines(source)
        self._results: list[TokenizationResult] = tokenizer.tokenize_lines(self._lines)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def results(self) -> list[TokenizationResult]:
        return list(self._results)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return f"Document(lines={len(self._lines)})"

    # ------------------------------------------------------------------
    # State and tokens
    # ------------------------------------------------------------------

    def state_before(self, line: int) -> ContextStack:
        """Return the context stack line ``line`` is tokenized with."""
        if line == 0:
            return self._tokenizer.initial_state()
        return self._results[line - 1].state

    def tokens(self, line: int) -> tuple[Token, ...]:
        return self._results[line].tokens

    def token_at(self, line: int, column: int) -> Token | None:
        """Return the token covering ``column`` on ``line``, if any."""
        for token in self._results[line].tokens:
            if token.start <= column < token.end:
                return token
        return None

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_text(self, source: str) -> None:
        """Replace the whole text and re-tokenize everything."""
        self._lines = split_lines(source)
        self._results = self._tokenizer.tokenize_lines(self._lines)

    def edit(self, first_line: int, removed: int, new_lines: Iterable[str]) -> int:
        """Replace ``removed`` lines starting at ``first_line``.

        Parameters
        ----------
        first_line:
            Index of the first replaced line.
        removed:
            Number of lines to remove (0 to insert).
        new_lines:
            Replacement lines, without line breaks.

        Returns
        -------
        int
            Number of lines that were tokenized again.

        Raises
        ------
        IndexError
            If the range falls outside the document.
        """
        if first_line < 0 or removed < 0 or first_line + removed > len(self._lines):
            raise IndexError(
                f"edit range {first_line}+{removed} is outside a document of "
                f"{len(self._lines)} line(s)"
            )
        inserted = list(new_lines)
        tail_start = first_line + removed
        tail_states = [self.state_before(index) for index in range(tail_start, len(self._lines))]
        tail_results = self._results[tail_start:]

        self._lines[first_line:tail_start] = inserted
        rebuilt = self._results[:first_line]
        state = self.state_before(first_line)
        for line in inserted:
            result = self._tokenizer.tokenize_line(line, state)
            rebuilt.append(result)
            state = result.state

        retokenized = len(inserted)
        offset = first_line + len(inserted)
        for index, old_state in enumerate(tail_states):
            if state == old_state:
                rebuilt.extend(tail_results[index:])
                break
            result = self._tokenizer.tokenize_line(self._lines[offset + index], state)
            rebuilt.append(result)
            state = result.state
            retokenized += 1

        self._results = rebuilt
        return retokenized

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def symbols(self) -> list[Symbol]:
        """Return knots, stitches and labels declared in the document."""
        return collect_symbols(self._results)

    def diverts(self) -> list[DivertReference]:
        """Return every divert target in the document."""
        return collect_diverts(self._results)

    def resolve(self, divert: DivertReference) -> Symbol | None:
        """Return the declaration ``divert`` points at, if declared."""
        return resolve_target(divert.target, self.symbols(), divert.line)

    def definition_at(self, line: int, column: int) -> Symbol | None:
        """Navigate from a ``divert.target`` token under the cursor."""
        token = self.token_at(line, column)
        if token is None or token.label != "divert.target":
            return None
        return resolve_target(token.text, self.symbols(), line)
