#!/usr/bin/env python3
"""Example: Quickstart — ink-lexer

Minimal working example: tokenize ink lines, carry the context stack
from line to line, and navigate from a divert to its knot.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install ink-lexer
"""
from __future__ import annotations

import inklex

INK_SOURCE = """\
VAR gold = 50

== market ==
* Pick up the sword -> sword_taken
{ gold > 10:
  You can afford it.
}

== sword_taken ==
You are armed. # combat
-> END
"""


def main() -> None:
    print(f"ink-lexer version: {inklex.__version__}")

    # Step 1: Tokenize a single line from the root context
    result = inklex.tokenize_line("* Pick up the sword -> sword_taken")
    for token in result.tokens:
        print(f"  {token.start:>3}:{token.end:<3} {token.label:<20} {token.text!r}")

    # Step 2: Thread the exit state into the next line
    state = None
    for line in INK_SOURCE.splitlines():
        result = inklex.tokenize_line(line, state)
        state = result.state
        print(f"{' > '.join(state.names):<28} | {line}")

    # Step 3: Navigate from the divert target to its declaration
    doc = inklex.Document(INK_SOURCE)
    for divert in doc.diverts():
        symbol = doc.resolve(divert)
        where = f"line {symbol.line + 1}" if symbol else "undeclared"
        print(f"-> {divert.target}: {where}")


if __name__ == "__main__":
    main()
