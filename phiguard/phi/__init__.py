"""PHI detection package.

Deterministic, regex-driven detection of HIPAA Safe Harbor identifiers::

    from phiguard.phi import scan_for_phi

    result = scan_for_phi(text, context="data", strict_mode=False)

Stages: ``patterns`` (catalogue) → ``false_positives`` → ``scoring`` →
``engine`` → ``dedup``.  ``formatter`` renders results for people.
"""
from phiguard.phi.engine import scan_for_phi
from phiguard.phi.models import Finding, ScanResult
from phiguard.phi.patterns import PHI_PATTERNS, PhiCategory, PhiPatternRule, ScanContext

__all__ = [
    "PHI_PATTERNS",
    "Finding",
    "PhiCategory",
    "PhiPatternRule",
    "ScanContext",
    "ScanResult",
    "scan_for_phi",
]
