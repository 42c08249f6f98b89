"""Confidence scorer: base confidence, context delta, strict-mode rescue.

Order matters and is fixed:

1. start from the rule's base confidence
2. add the delta for the active context, when the rule defines one
3. strict mode adds STRICT_BOOST to anything below STRICT_BOOST_CEILING
4. outside strict mode, anything below CONFIDENCE_FLOOR is discarded
5. clamp to [0, 100]

The floor is checked on the unclamped value and never in strict mode.
"""
from __future__ import annotations

from phiguard.phi.patterns import PhiPatternRule, ScanContext

CONFIDENCE_FLOOR: int = 50
STRICT_BOOST: int = 15
STRICT_BOOST_CEILING: int = 70
_MIN_CONFIDENCE: int = 0
_MAX_CONFIDENCE: int = 100


def clamp_confidence(value: int) -> int:
    return max(_MIN_CONFIDENCE, min(_MAX_CONFIDENCE, value))


def raw_confidence(rule: PhiPatternRule, context: ScanContext, strict_mode: bool) -> int:
    """Return the pre-clamp confidence for *rule* (steps 1–3)."""
    confidence = rule.base_confidence
    delta = rule.context_deltas.get(context)
    if delta is not None:
        confidence += delta
    if strict_mode and confidence < STRICT_BOOST_CEILING:
        confidence += STRICT_BOOST
    return confidence


def score_confidence(rule: PhiPatternRule, context: ScanContext, strict_mode: bool) -> int | None:
    """Return the final confidence, or None when the candidate must be discarded."""
    confidence = raw_confidence(rule, context, strict_mode)
    if not strict_mode and confidence < CONFIDENCE_FLOOR:
        return None
    return clamp_confidence(confidence)
