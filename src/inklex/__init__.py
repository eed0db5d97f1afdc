"""ink-lexer: rule-driven line tokenizer for the ink narrative scripting language.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import inklex

    # Tokenize one line from the root state
    result = inklex.tokenize_line("* Pick up the sword -> sword_taken")
    [(t.label, t.text) for t in result.tokens]

    # Carry the exit state into the next line
    first = inklex.tokenize_line("{ x > 2:")
    second = inklex.tokenize_line("}", first.state)

    # Compile a custom rule table
    grammar = inklex.compile_grammar({"start": [{"regex": r"\\d+", "token": "number"}]})
    inklex.Tokenizer(grammar).tokenize_line("abc 42")

    # Whole documents, with incremental re-tokenization and navigation
    doc = inklex.Document(source)

    inklex.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__: str = "0.1.0"

from inklex.compiler.compiler import compile_grammar
from inklex.document import Document
from inklex.grammar.errors import GrammarCycleError, GrammarError, GrammarFormatError
from inklex.grammar.rules import Grammar
from inklex.grammar.tokens import ContextStack, Token, TokenizationResult
from inklex.lexer.tokenizer import Tokenizer

if TYPE_CHECKING:
    from inklex.languages.base import Language


def tokenize_line(
    line: str,
    state: ContextStack | None = None,
    *,
    language: str = "ink",
) -> TokenizationResult:
    """Tokenize one line with a registered language's grammar.

    Parameters
    ----------
    line:
        Line text without its line break.
    state:
        Exit state of the previous line; ``None`` starts at the root.
    language:
        Registered language name.

    Returns
    -------
    TokenizationResult
        The line's tokens and its exit state.
    """
    from inklex.languages import get_tokenizer

    return get_tokenizer(language).tokenize_line(line, state)


def tokenize(source: str, *, language: str = "ink") -> list[TokenizationResult]:
    """Tokenize a whole source text, one result per line."""
    from inklex.languages import get_tokenizer

    return get_tokenizer(language).tokenize(source)


def get_language(name: str = "ink") -> "Language":
    """Return the registered language definition ``name``."""
    from inklex.languages import get_language as _get_language

    return _get_language(name)


def get_grammar(name: str = "ink") -> Grammar:
    """Return the cached compiled grammar for language ``name``."""
    from inklex.languages import get_grammar as _get_grammar

    return _get_grammar(name)


def load_grammar(path: str) -> Grammar:
    """Compile a grammar from a YAML or JSON rule-table file.

    Raises
    ------
    GrammarFormatError
        If the file cannot be read or has the wrong shape.
    GrammarError
        If the rule table does not compile.
    """
    from inklex.grammar.serializer import GrammarSerializer

    table: Any = GrammarSerializer().load(path)
    return compile_grammar(table)


__all__ = [
    "__version__",
    "tokenize_line",
    "tokenize",
    "compile_grammar",
    "load_grammar",
    "get_language",
    "get_grammar",
    "Tokenizer",
    "Document",
    "Grammar",
    "Token",
    "ContextStack",
    "TokenizationResult",
    "GrammarError",
    "GrammarCycleError",
    "GrammarFormatError",
]
