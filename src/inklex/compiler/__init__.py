"""RuleSet compiler module.

Exports ``compile_grammar`` and the ``GrammarCompiler`` class.
"""
from __future__ import annotations

from inklex.compiler.compiler import GrammarCompiler, RuleTable, compile_grammar, find_include_cycles

__all__ = ["compile_grammar", "GrammarCompiler", "RuleTable", "find_include_cycles"]
