"""Error types for grammar compilation and dispatch.

All grammar errors identify the offending context (and rule, where one
applies) so that grammar authors can locate the problem in the rule
table without re-reading the whole file.
"""
from __future__ import annotations


class GrammarError(ValueError):
    """Raised when a rule table cannot be compiled into a grammar.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    context:
        Name of the context containing the offending entry, if known.
    rule_index:
        0-based index of the offending entry within its context, if known.
    """

    def __init__(
        self,
        message: str,
        context: str | None = None,
        rule_index: int | None = None,
    ) -> None:
        self.grammar_message = message
        self.context = context
        self.rule_index = rule_index
        super().__init__(self._format())

    def _format(self) -> str:
        if self.context is None:
            return f"GrammarError: {self.grammar_message}"
        if self.rule_index is None:
            return f"GrammarError in {self.context!r}: {self.grammar_message}"
        return (
            f"GrammarError in {self.context!r} rule {self.rule_index}: "
            f"{self.grammar_message}"
        )


class GrammarCycleError(GrammarError):
    """Raised when include resolution re-enters a context at the same offset.

    The tokenizer treats this as "no match" for the dispatch attempt and
    falls back to the default token, so it never escapes ``tokenize_line``.

    Parameters
    ----------
    path:
        Context names on the include path, ending with the re-entered one.
    offset:
        Line offset at which the dispatch attempt was made.
    """

    def __init__(self, path: tuple[str, ...], offset: int) -> None:
        self.path = path
        self.offset = offset
        super().__init__(
            f"include cycle {' -> '.join(path)} at offset {offset}",
            context=path[0] if path else None,
        )


class GrammarFormatError(GrammarError):
    """Raised when a grammar file cannot be read or has the wrong shape.

    Parameters
    ----------
    message:
        Description of the problem.
    source:
        File path or other description of where the table came from.
    """

    def __init__(self, message: str, source: str = "<string>") -> None:
        self.source = source
        super().__init__(f"{source}: {message}")
