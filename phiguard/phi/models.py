"""Result types produced by the PHI scanner.

Both types are frozen: a ScanResult is built once per scan and handed to
the caller, who owns it exclusively.
"""
from __future__ import annotations

from dataclasses import dataclass

from phiguard.phi.patterns import PhiCategory, ScanContext


@dataclass(frozen=True, slots=True)
class Finding:
    """One candidate PHI instance.

    Fields
    ------
    pattern_id / display_name / category / regulatory_label:
                        Copied from the rule that fired.
    matched_text:       Exact substring of the scanned text.  Callers must
                        mask it before display or logging.
    confidence:         Final integer confidence, 0–100.
    start_offset / end_offset:
                        Half-open range ``[start, end)`` into the scanned text.
    explanation:        Confidence tier and regulatory basis in plain words.
    """
    pattern_id: str
    display_name: str
    category: PhiCategory
    regulatory_label: str
    matched_text: str
    confidence: int
    start_offset: int
    end_offset: int
    explanation: str

    def __post_init__(self) -> None:
        if not self.start_offset < self.end_offset:
            raise ValueError(
                f"Finding span for {self.pattern_id!r} is empty: "
                f"[{self.start_offset}, {self.end_offset})"
            )
        if len(self.matched_text) != self.end_offset - self.start_offset:
            raise ValueError(f"Finding span for {self.pattern_id!r} does not match its text length")
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Finding confidence out of range: {self.confidence}")


@dataclass(frozen=True, slots=True)
class ScanResult:
    findings: tuple[Finding, ...]
    scanned_length: int
    context: ScanContext
    strict_mode: bool

    @property
    def has_phi(self) -> bool:
        return bool(self.findings)
