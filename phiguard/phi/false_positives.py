"""False-positive filter: suppress candidates that are almost certainly synthetic.

Two independent checks, either one suppresses:

1. Canonical exclusion — the matched text itself is a well-known
   placeholder (all-zeros SSN, 555-555-5555, reserved example domains,
   loopback addresses) or contains a marker word.
2. Proximity — a marker word appears as a whole word (underscores count
   as separators) within ``CONTEXT_WINDOW_CHARS`` characters either side
   of the match.

Safety rule: matched text and window content are never logged.
"""
from __future__ import annotations

import re

CONTEXT_WINDOW_CHARS: int = 50

MARKER_WORDS: tuple[str, ...] = ("test", "example", "sample", "dummy", "mock", "fake", "placeholder")

CANONICAL_EXCLUSIONS: tuple[re.Pattern[str], ...] = (
    re.compile(r"000-00-0000"),
    re.compile(r"111-11-1111"),
    re.compile(r"555-555-5555"),
    re.compile(r"@(?:example|test)\.(?:com|org|net)\b", re.IGNORECASE),
    re.compile(r"user@domain\.com", re.IGNORECASE),
    re.compile(r"\b(?:john|jane)\.doe@", re.IGNORECASE),
    re.compile(r"\b(?:localhost|127\.0\.0\.1|0\.0\.0\.0)\b"),
    re.compile("|".join(MARKER_WORDS), re.IGNORECASE),
)

# Underscore counts as a separator so snake_case names such as test_ssn match
_MARKER_WORD_RE = re.compile(
    r"(?<![A-Za-z0-9])(?:" + "|".join(MARKER_WORDS) + r")(?![A-Za-z0-9])", re.IGNORECASE,
)


def is_canonical_value(matched_text: str) -> bool:
    """Return True if *matched_text* is a known placeholder or carries a marker word."""
    return any(pattern.search(matched_text) for pattern in CANONICAL_EXCLUSIONS)


def has_nearby_marker(source_text: str, start: int, end: int) -> bool:
    """Return True if a whole-word marker appears within the context window."""
    window_start = max(0, start - CONTEXT_WINDOW_CHARS)
    window_end = min(len(source_text), end + CONTEXT_WINDOW_CHARS)
    return _MARKER_WORD_RE.search(source_text[window_start:window_end]) is not None


def is_false_positive(matched_text: str, source_text: str, start: int) -> bool:
    """Return True when a candidate match should be dropped before scoring."""
    if is_canonical_value(matched_text):
        return True
    return has_nearby_marker(source_text, start, start + len(matched_text))
