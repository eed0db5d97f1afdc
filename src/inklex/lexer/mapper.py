"""Capture-to-token mapper.

Expands a successful match into labeled tokens:

- A rule with a single whole-match label emits one token for the span.
- Otherwise each labeled capture group that participated and matched a
  non-empty string emits one token, walked in group order.  Groups that
  start inside an already emitted capture (nested groups) or that fall
  outside the match span (captures inside lookarounds) are skipped.
- Characters of the match span covered by no emitted capture are emitted
  under the rule's fill label, or the active context's default label, so
  the tokens always reproduce the matched text exactly.

Empty matches produce no tokens.
"""
from __future__ import annotations

import re

from inklex.grammar.rules import Rule
from inklex.grammar.tokens import Token


def capture_spans(match: re.Match[str], rule: Rule) -> list[tuple[int, int, str]]:
    """Return ``(start, end, label)`` for every labeled, non-empty capture."""
    labels = rule.labels
    if not labels:
        return []
    if labels[0] is not None:
        start, end = match.span()
        return [(start, end, labels[0])] if end > start else []

    spans: list[tuple[int, int, str]] = []
    for group in range(1, len(labels)):
        label = labels[group]
        if label is None:
            continue
        start, end = match.span(group)
        if start < 0 or start == end:
            continue
        spans.append((start, end, label))
    return spans


def map_captures(match: re.Match[str], rule: Rule, fallback_label: str) -> list[Token]:
    """Turn ``match`` into contiguous tokens covering exactly its span.

    Parameters
    ----------
    match:
        The anchored match produced by the scan dispatcher.
    rule:
        The rule that produced ``match``.
    fallback_label:
        The active context's default label, used for uncovered characters
        when the rule declares no fill label.

    Returns
    -------
    list[Token]
        Tokens in source order; empty for an empty match.
    """
    line = match.string
    span_start, span_end = match.span()
    fill = rule.fill_label or fallback_label
    tokens: list[Token] = []
    cursor = span_start

    for start, end, label in capture_spans(match, rule):
        if start < cursor or end > span_end:
            continue
        if start > cursor:
            tokens.append(Token(fill, line[cursor:start], cursor, start))
        tokens.append(Token(label, line[start:end], start, end))
        cursor = end

    if cursor < span_end:
        tokens.append(Token(fill, line[cursor:span_end], cursor, span_end))
    return tokens
