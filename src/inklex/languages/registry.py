"""Language registry for ink-lexer.

Provides a decorator-based registration system for ``Language``
definitions and a process-wide cache of their compiled grammars.
Third-party languages register by declaring entry-points in their own
``pyproject.toml`` under the "inklex.languages" group.

Example
-------
Register a language with the decorator::

    from inklex.languages import Language, registry

    @registry.register("greeting")
    class GreetingLanguage(Language):
        name = "greeting"
        file_types = ("greet",)

        def rules(self):
            return {"start": [{"regex": r"hello|hi", "token": "keyword"}]}

Load all installed languages via entry-points::

    registry.load_entrypoints("inklex.languages")

Compile (once) and tokenize::

    tokenizer = registry.tokenizer("greeting")
    tokenizer.tokenize_line("hi there")
"""
from __future__ import annotations

import importlib.metadata
import logging
import threading
from collections.abc import Callable
from typing import Final

from inklex.grammar.rules import Grammar
from inklex.languages.base import Language
from inklex.lexer.tokenizer import Tokenizer

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP: Final[str] = "inklex.languages"


class LanguageNotFoundError(KeyError):
    """Raised when a requested language name is not in the registry."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.language_name = name
        self.available = available
        super().__init__(
            f"Language {name!r} is not registered. "
            f"Available languages: {', '.join(available) or '(none)'}. "
            "Check that the package is installed and its entry-points are declared."
        )


class LanguageAlreadyRegisteredError(ValueError):
    """Raised when attempting to register a name that already exists."""

    def __init__(self, name: str) -> None:
        self.language_name = name
        super().__init__(
            f"Language {name!r} is already registered. "
            "Use a unique name or explicitly deregister the existing entry first."
        )


class LanguageRegistry:
    """Registry of ``Language`` subclasses with cached compiled grammars.

    Grammars are compiled on first use and then shared; compiled
    grammars and tokenizers are immutable, so sharing them between
    threads is safe.
    """

    def __init__(self) -> None:
        self._languages: dict[str, type[Language]] = {}
        self._grammars: dict[str, Grammar] = {}
        self._tokenizers: dict[str, Tokenizer] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str) -> Callable[[type[Language]], type[Language]]:
        """Return a class decorator that registers the decorated language.

        Raises
        ------
        LanguageAlreadyRegisteredError
            If ``name`` is already in use.
        TypeError
            If the decorated class does not subclass ``Language``.
        """

        def decorator(cls: type[Language]) -> type[Language]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[Language]) -> None:
        """Register a class directly without using the decorator syntax.

        Raises
        ------
        LanguageAlreadyRegisteredError
            If ``name`` is already registered.
        TypeError
            If ``cls`` is not a subclass of ``Language``.
        """
        if name in self._languages:
            raise LanguageAlreadyRegisteredError(name)
        if not (isinstance(cls, type) and issubclass(cls, Language)):
            raise TypeError(
                f"Cannot register {cls!r} under {name!r}: it must be a subclass of Language."
            )
        self._languages[name] = cls
        logger.debug("Registered language %r -> %s", name, cls.__qualname__)

    def deregister(self, name: str) -> None:
        """Remove a language and drop its cached grammar.

        Raises
        ------
        LanguageNotFoundError
            If ``name`` is not currently registered.
        """
        if name not in self._languages:
            raise LanguageNotFoundError(name, self.list_languages())
        with self._lock:
            del self._languages[name]
            self._grammars.pop(name, None)
            self._tokenizers.pop(name, None)
        logger.debug("Deregistered language %r", name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> Language:
        """Return an instance of the language registered under ``name``.

        Raises
        ------
        LanguageNotFoundError
            If no language is registered under ``name``.
        """
        try:
            return self._languages[name]()
        except KeyError:
            raise LanguageNotFoundError(name, self.list_languages()) from None

    def grammar(self, name: str) -> Grammar:
        """Return the compiled grammar for ``name``, compiling it once.

        Raises
        ------
        LanguageNotFoundError
            If no language is registered under ``name``.
        GrammarError
            If the language's rule table is invalid.
        """
        with self._lock:
            cached = self._grammars.get(name)
            if cached is None:
                cached = self.get(name).compile()
                self._grammars[name] = cached
                logger.debug("Compiled grammar for language %r", name)
            return cached

    def tokenizer(self, name: str) -> Tokenizer:
        """Return a shared ``Tokenizer`` for ``name``."""
        grammar = self.grammar(name)
        with self._lock:
            cached = self._tokenizers.get(name)
            if cached is None:
                cached = Tokenizer(grammar)
                self._tokenizers[name] = cached
            return cached

    def for_path(self, filename: str) -> Language | None:
        """Return the first registered language claiming ``filename``'s extension."""
        for name in self.list_languages():
            language = self.get(name)
            if language.matches_path(filename):
                return language
        return None

    def list_languages(self) -> list[str]:
        """Return a sorted list of all registered language names."""
        return sorted(self._languages)

    def __contains__(self, name: object) -> bool:
        """Support ``"ink" in registry`` membership test."""
        return name in self._languages

    def __len__(self) -> int:
        return len(self._languages)

    def __repr__(self) -> str:
        return f"LanguageRegistry(languages={self.list_languages()})"

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str = ENTRY_POINT_GROUP) -> None:
        """Discover and register languages declared as package entry-points.

        Languages that are already registered are skipped with a
        debug-level log entry, so repeated calls are idempotent.  An
        entry-point that fails to import is logged and skipped.

        Example
        -------
        In a downstream package's ``pyproject.toml``::

            [project.entry-points."inklex.languages"]
            greeting = "my_package.languages:GreetingLanguage"
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._languages:
                logger.debug("Entry-point %r already registered; skipping.", ep.name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception(
                    "Failed to load entry-point %r from group %r; skipping.",
                    ep.name,
                    group,
                )
                continue
            try:
                self.register_class(ep.name, cls)
            except (LanguageAlreadyRegisteredError, TypeError):
                logger.warning(
                    "Entry-point %r loaded but could not be registered; skipping.",
                    ep.name,
                )


registry = LanguageRegistry()
