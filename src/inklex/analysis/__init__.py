"""Structural analysis of tokenized ink documents."""
from __future__ import annotations

from inklex.analysis.symbols import (
    DivertReference,
    Symbol,
    SymbolKind,
    collect_diverts,
    collect_symbols,
    resolve_target,
)

__all__ = [
    "Symbol",
    "SymbolKind",
    "DivertReference",
    "collect_symbols",
    "collect_diverts",
    "resolve_target",
]
