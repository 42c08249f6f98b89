"""PHI scan engine: catalogue → false-positive filter → scorer → deduplicator.

``scan_for_phi`` is a pure function of (text, context, strict_mode, rules).
It holds no mutable module state, so concurrent calls need no locking;
the only shared object is the immutable rule catalogue.

Safety rule: matched text is never logged — only rule ids, confidences
and counts.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from phiguard.core.errors import InvalidScanInputError
from phiguard.phi.dedup import deduplicate_findings
from phiguard.phi.false_positives import is_false_positive
from phiguard.phi.formatter import build_explanation
from phiguard.phi.models import Finding, ScanResult
from phiguard.phi.patterns import PHI_PATTERNS, PhiPatternRule, ScanContext, find_all_matches
from phiguard.phi.scoring import score_confidence

logger = logging.getLogger(__name__)


def coerce_context(context: ScanContext | str | None) -> ScanContext:
    """Return *context* as a ScanContext; None means general."""
    if context is None:
        return ScanContext.GENERAL
    if isinstance(context, ScanContext):
        return context
    if isinstance(context, str):
        try:
            return ScanContext(context.strip().lower())
        except ValueError:
            pass
    raise InvalidScanInputError(
        f"Unknown scan context {context!r}; must be one of {[c.value for c in ScanContext]}",
        {"context": repr(context)},
    )


def _validate(text: object, strict_mode: object) -> None:
    if not isinstance(text, str):
        raise InvalidScanInputError(
            f"text must be a str, got {type(text).__name__}",
            {"argument": "text", "type": type(text).__name__},
        )
    if not isinstance(strict_mode, bool):
        raise InvalidScanInputError(
            f"strict_mode must be a bool, got {type(strict_mode).__name__}",
            {"argument": "strict_mode", "type": type(strict_mode).__name__},
        )


def scan_candidates(
    text: str,
    context: ScanContext,
    strict_mode: bool,
    rules: Sequence[PhiPatternRule] = PHI_PATTERNS,
) -> list[Finding]:
    """Return every scored, non-suppressed candidate; unsorted, may overlap."""
    candidates: list[Finding] = []
    suppressed = 0
    below_floor = 0

    for rule, matched_text, start in find_all_matches(text, rules):
        if is_false_positive(matched_text, text, start):
            suppressed += 1
            continue

        confidence = score_confidence(rule, context, strict_mode)
        if confidence is None:
            below_floor += 1
            continue

        candidates.append(Finding(
            pattern_id=rule.id,
            display_name=rule.display_name,
            category=rule.category,
            regulatory_label=rule.regulatory_label,
            matched_text=matched_text,
            confidence=confidence,
            start_offset=start,
            end_offset=start + len(matched_text),
            explanation=build_explanation(rule, confidence),
        ))

    # SAFETY: counts only, never the matched spans
    logger.debug(
        "PHI candidates: kept=%d suppressed=%d below_floor=%d context=%s strict=%s",
        len(candidates),
        suppressed,
        below_floor,
        context.value,
        strict_mode,
    )
    return candidates


def scan_for_phi(
    text: str,
    context: ScanContext | str | None = ScanContext.GENERAL,
    strict_mode: bool = False,
    rules: Sequence[PhiPatternRule] = PHI_PATTERNS,
) -> ScanResult:
    """Scan *text* for likely PHI.

    Parameters
    ----------
    text:
        Text to scan.  May be empty; must be a ``str``.
    context:
        Origin of the text (code, filename, comment, data, general).
        Accepts a ScanContext or its string value; None means general.
    strict_mode:
        Rescue borderline candidates instead of discarding them.
    rules:
        Rule catalogue to apply; defaults to the built-in PHI_PATTERNS.

    Returns
    -------
    ScanResult
        Findings sorted by confidence (highest first) with no two spans
        overlapping.

    Raises
    ------
    InvalidScanInputError
        Non-string text, non-bool strict_mode, or unknown context.
    PatternMatchError
        A rule's matcher failed; no partial result is returned.
    """
    rules = tuple(rules)
    _validate(text, strict_mode)
    scan_context = coerce_context(context)

    candidates = scan_candidates(text, scan_context, strict_mode, rules)
    rule_order = {rule.id: index for index, rule in enumerate(rules)}
    findings = deduplicate_findings(candidates, rule_order)

    logger.info(
        "PHI scan completed: findings=%d candidates=%d length=%d context=%s strict=%s",
        len(findings),
        len(candidates),
        len(text),
        scan_context.value,
        strict_mode,
    )
    return ScanResult(
        findings=tuple(findings),
        scanned_length=len(text),
        context=scan_context,
        strict_mode=strict_mode,
    )
