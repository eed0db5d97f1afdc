"""Language definitions and the process-wide language registry.

Importing this package registers the built-in ``ink`` language.  Other
languages are discovered from the "inklex.languages" entry-point group
the first time an unknown name is requested.
"""
from __future__ import annotations

from inklex.grammar.rules import Grammar
from inklex.languages.base import BlockComment, Completion, Language
from inklex.languages.ink import INK_KEYWORDS, INK_RULES, InkLanguage
from inklex.languages.registry import (
    ENTRY_POINT_GROUP,
    LanguageAlreadyRegisteredError,
    LanguageNotFoundError,
    LanguageRegistry,
    registry,
)
from inklex.lexer.tokenizer import Tokenizer


def _ensure(name: str) -> None:
    if name not in registry:
        registry.load_entrypoints(ENTRY_POINT_GROUP)


def get_language(name: str) -> Language:
    """Return the language registered under ``name``."""
    _ensure(name)
    return registry.get(name)


def get_grammar(name: str) -> Grammar:
    """Return the cached compiled grammar for ``name``."""
    _ensure(name)
    return registry.grammar(name)


def get_tokenizer(name: str) -> Tokenizer:
    """Return the shared tokenizer for ``name``."""
    _ensure(name)
    return registry.tokenizer(name)


def language_for_path(filename: str) -> Language | None:
    """Return the language claiming ``filename``'s extension, if any."""
    registry.load_entrypoints(ENTRY_POINT_GROUP)
    return registry.for_path(filename)


__all__ = [
    "Language",
    "Completion",
    "BlockComment",
    "InkLanguage",
    "INK_RULES",
    "INK_KEYWORDS",
    "LanguageRegistry",
    "LanguageNotFoundError",
    "LanguageAlreadyRegisteredError",
    "ENTRY_POINT_GROUP",
    "registry",
    "get_language",
    "get_grammar",
    "get_tokenizer",
    "language_for_path",
]
