"""Shared test fixtures for ink-lexer.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

import pytest

from inklex.compiler import compile_grammar
from inklex.grammar.rules import Grammar
from inklex.languages import get_grammar, get_tokenizer
from inklex.lexer import Tokenizer


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "inklex"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture(scope="session")
def ink_grammar() -> Grammar:
    return get_grammar("ink")


@pytest.fixture(scope="session")
def ink() -> Tokenizer:
    """The shared tokenizer for the built-in ink language."""
    return get_tokenizer("ink")


@pytest.fixture()
def bracket_grammar() -> Grammar:
    """A small nesting grammar: words, numbers and bracketed groups."""
    return compile_grammar(
        {
            "start": [
                {"regex": r"\d+", "token": "number"},
                {"regex": r"\[", "token": "bracket.open", "push": "group"},
                {"include": "words"},
            ],
            "group": [
                {"regex": r"\]", "token": "bracket.close", "pop": True},
                {"include": "start"},
                {"default": "group.text"},
            ],
            "words": [
                {"regex": r"[A-Za-z]+", "token": "word"},
            ],
        }
    )


SAMPLE_STORY = """\
INCLUDE common.ink
VAR gold = 50

== knot_one ==
Hello there. # greeting
* Pick up the sword -> sword_taken
* (leave) Walk away -> DONE
- (regroup) You pause.
-> knot_two.stitch_a

== sword_taken ==
{ gold > 10:
  You are rich.
- else:
  You are poor.
}
-> END

== knot_two ==
= stitch_a
~ gold = gold + 1
-> regroup
"""


@pytest.fixture()
def sample_story() -> str:
    return SAMPLE_STORY
