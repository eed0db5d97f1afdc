"""Grammar data model.

Exports the compiled grammar types, token and state values, and the
grammar error hierarchy.
"""
from __future__ import annotations

from inklex.grammar.errors import GrammarCycleError, GrammarError, GrammarFormatError
from inklex.grammar.rules import (
    DEFAULT_LABEL,
    ROOT_CONTEXT,
    Context,
    Directive,
    DirectiveKind,
    Entry,
    Grammar,
    Include,
    Rule,
)
from inklex.grammar.tokens import ContextId, ContextStack, Token, TokenizationResult

__all__ = [
    # Compiled grammar
    "Grammar",
    "Context",
    "ContextId",
    "Rule",
    "Include",
    "Entry",
    "Directive",
    "DirectiveKind",
    "ROOT_CONTEXT",
    "DEFAULT_LABEL",
    # Tokenizer values
    "Token",
    "ContextStack",
    "TokenizationResult",
    # Errors
    "GrammarError",
    "GrammarCycleError",
    "GrammarFormatError",
]
