"""Structural tests for the ink-lexer benchmark module."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "benchmarks"))


def test_bench_throughput_importable() -> None:
    """Verify bench_throughput module can be imported."""
    mod = importlib.import_module("bench_throughput")
    assert hasattr(mod, "bench_tokenize_throughput")
    assert hasattr(mod, "bench_incremental_edit")


def test_incremental_edit_retokenizes_one_line() -> None:
    """A single edit inside a logic block must not cascade."""
    from bench_throughput import bench_incremental_edit

    result = bench_incremental_edit()
    assert result["operation"] == "ink_incremental_edit"
    assert result["avg_lines_retokenized"] == 1.0
    assert "ops_per_second" in result
