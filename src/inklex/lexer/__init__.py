"""Lexer module.

Exports the line ``Tokenizer``, the ``ScanDispatcher``, the capture
mapper and the context stack transitions.
"""
from __future__ import annotations

from inklex.lexer.dispatcher import ScanDispatcher, ScanMatch, dispatch
from inklex.lexer.mapper import capture_spans, map_captures
from inklex.lexer.stack import apply_directive, pop, push, replace
from inklex.lexer.tokenizer import Tokenizer, split_lines, tokenize_line

__all__ = [
    "Tokenizer",
    "tokenize_line",
    "split_lines",
    "ScanDispatcher",
    "ScanMatch",
    "dispatch",
    "map_captures",
    "capture_spans",
    "apply_directive",
    "push",
    "pop",
    "replace",
]
