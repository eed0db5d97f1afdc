"""Benchmark: ink tokenization throughput.

Measures how many lines per second the shared ink tokenizer handles when
tokenizing a whole story, and how much an incremental ``Document.edit``
saves compared with tokenizing the story again from scratch.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import inklex

_ITERATIONS: int = 200
_EDIT_ITERATIONS: int = 2_000

_SAMPLE_INK = """\
INCLUDE common.ink
VAR gold = 50
LIST mood = happy, (neutral), sad

== market ==
The stalls are busy today. # scene: market
* [Buy bread] -> buy(1, -> market)
* (haggle) Haggle {gold > 10: loudly|quietly} -> haggle_more
+ {~Wander|Stroll|Drift} away -> DONE
- (after) You move on.
{ gold > 20:
  The merchant smiles.
- else:
  The merchant frowns.
}
~ gold = gold - 1
-> END

=== function buy(n, -> back) ===
~ gold = gold - n
->-> back
"""


def _report(result: dict[str, object]) -> dict[str, object]:
    print(
        f"[bench_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def bench_tokenize_throughput() -> dict[str, object]:
    """Benchmark whole-story tokenization.

    Returns
    -------
    dict with keys: operation, iterations, lines, total_seconds,
    ops_per_second, lines_per_second, avg_latency_ms.
    """
    source = _SAMPLE_INK * 10
    lines = source.count("\n") + 1
    inklex.tokenize(source)

    start = time.perf_counter()
    for _ in range(_ITERATIONS):
        inklex.tokenize(source)
    total = time.perf_counter() - start

    return _report(
        {
            "operation": "ink_tokenize_throughput",
            "iterations": _ITERATIONS,
            "lines": lines,
            "total_seconds": round(total, 4),
            "ops_per_second": round(_ITERATIONS / total, 1),
            "lines_per_second": round(_ITERATIONS * lines / total, 1),
            "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        }
    )


def bench_incremental_edit() -> dict[str, object]:
    """Benchmark single-line edits on a tokenized document.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, avg_lines_retokenized.
    """
    doc = inklex.Document(_SAMPLE_INK * 10)
    line = 11
    retokenized = 0

    start = time.perf_counter()
    for index in range(_EDIT_ITERATIONS):
        retokenized += doc.edit(line, 1, [f"  The merchant smiles {index} times."])
    total = time.perf_counter() - start

    return _report(
        {
            "operation": "ink_incremental_edit",
            "iterations": _EDIT_ITERATIONS,
            "total_seconds": round(total, 4),
            "ops_per_second": round(_EDIT_ITERATIONS / total, 1),
            "avg_latency_ms": round(total / _EDIT_ITERATIONS * 1000, 4),
            "avg_lines_retokenized": round(retokenized / _EDIT_ITERATIONS, 2),
        }
    )


if __name__ == "__main__":
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)

    for bench_fn, fname in [
        (bench_tokenize_throughput, "tokenize_throughput_baseline.json"),
        (bench_incremental_edit, "incremental_edit_baseline.json"),
    ]:
        result = bench_fn()
        output_path = results_dir / fname
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2)
        print(f"Results saved to {output_path}")
