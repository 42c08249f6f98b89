"""Overlap resolution for candidate findings.

Greedy interval selection by weight: candidates are ranked, then accepted
one at a time unless their ``[start, end)`` span intersects a span that
was already accepted.  Rejected candidates are dropped whole; spans are
never trimmed or merged.

Ranking (deterministic):
  - Higher confidence first.
  - Tie on confidence → earlier catalogue declaration wins.
  - Tie on rule → earlier start offset wins.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping

from phiguard.phi.models import Finding


def spans_overlap(a: Finding, b: Finding) -> bool:
    return not (a.end_offset <= b.start_offset or b.end_offset <= a.start_offset)


def rank_findings(
    findings: Iterable[Finding],
    rule_order: Mapping[str, int] | None = None,
) -> list[Finding]:
    """Sort findings by confidence desc → catalogue order → start offset."""
    order = rule_order or {}
    fallback = len(order)
    return sorted(
        findings,
        key=lambda f: (-f.confidence, order.get(f.pattern_id, fallback), f.start_offset),
    )


def deduplicate_findings(
    findings: Iterable[Finding],
    rule_order: Mapping[str, int] | None = None,
) -> list[Finding]:
    """Return non-overlapping findings, highest-ranked first."""
    accepted: list[Finding] = []
    for candidate in rank_findings(findings, rule_order):
        if not any(spans_overlap(candidate, kept) for kept in accepted):
            accepted.append(candidate)
    return accepted
