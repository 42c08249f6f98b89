"""PHI pattern catalogue: one rule per HIPAA Safe Harbor identifier shape.

The catalogue is built once at import time and never mutated.  The scan
engine receives it by reference (``rules=PHI_PATTERNS`` by default), so a
caller may inject a different tuple of rules without touching global state.

Each rule carries a regulatory label so that every finding can be traced
back to the Safe Harbor identifier it represents.

Categories
----------
direct    — uniquely identifies an individual on its own (SSN, MRN, …)
quasi     — identifying only in combination (bare name field, service date)
indirect  — contextual or clinical signal, weakest evidence

Confidence semantics
--------------------
≥ 80  high: specific format or explicit keyword anchor
60–79 medium: plausible, context decides
< 60  low: dropped outside strict mode unless a context delta lifts it
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Protocol

from phiguard.core.errors import PatternMatchError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class PhiCategory(StrEnum):
    DIRECT = "direct"
    QUASI = "quasi"
    INDIRECT = "indirect"


class ScanContext(StrEnum):
    """Where the scanned text came from.  Changes scoring, never matching."""
    CODE = "code"
    FILENAME = "filename"
    COMMENT = "comment"
    DATA = "data"
    GENERAL = "general"


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

class Matcher(Protocol):
    """Anything that can report non-overlapping occurrences in a string.

    ``finditer`` must return a fresh iterator on every call, yielding
    ``(matched_text, start_offset)`` pairs left to right.
    """

    def finditer(self, text: str) -> Iterator[tuple[str, int]]:
        ...


class RegexMatcher:
    """Matcher backed by a compiled regular expression."""

    __slots__ = ("pattern",)

    def __init__(self, regex: str, flags: int = 0) -> None:
        self.pattern = re.compile(regex, flags)

    def finditer(self, text: str) -> Iterator[tuple[str, int]]:
        for match in self.pattern.finditer(text):
            # Empty matches cannot form a [start, end) span
            if match.end() > match.start():
                yield match.group(0), match.start()

    def __repr__(self) -> str:
        return f"RegexMatcher({self.pattern.pattern!r})"


# ---------------------------------------------------------------------------
# Rule definition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PhiPatternRule:
    """A single PHI detector.

    Attributes
    ----------
    id:                Stable identifier, unique across the catalogue.
    display_name:      Human label shown in reports.
    matcher:           Produces ``(matched_text, start_offset)`` pairs.
    category:          direct / quasi / indirect.
    regulatory_label:  Safe Harbor identifier this rule maps to.
    base_confidence:   Prior confidence 0–100 with no context.
    context_deltas:    Signed adjustment per ScanContext; read-only.
    """
    id: str
    display_name: str
    matcher: Matcher = field(compare=False)
    category: PhiCategory
    regulatory_label: str
    base_confidence: int
    context_deltas: Mapping[ScanContext, int] = field(
        default_factory=lambda: MappingProxyType({}), compare=False,
    )

    def __post_init__(self) -> None:
        if not 0 <= self.base_confidence <= 100:
            raise ValueError(
                f"base_confidence for {self.id!r} must be within 0-100, got {self.base_confidence}"
            )
        deltas = {}
        for key, delta in dict(self.context_deltas).items():
            try:
                deltas[ScanContext(key)] = int(delta)
            except ValueError:
                raise ValueError(f"Unknown context {key!r} in deltas for {self.id!r}") from None
        object.__setattr__(self, "category", PhiCategory(self.category))
        object.__setattr__(self, "context_deltas", MappingProxyType(deltas))


def _rule(
    id: str,
    display_name: str,
    regex: str,
    category: PhiCategory,
    regulatory_label: str,
    base_confidence: int,
    deltas: dict[ScanContext, int] | None = None,
    flags: int = re.IGNORECASE,
) -> PhiPatternRule:
    return PhiPatternRule(
        id=id,
        display_name=display_name,
        matcher=RegexMatcher(regex, flags),
        category=category,
        regulatory_label=regulatory_label,
        base_confidence=base_confidence,
        context_deltas=MappingProxyType(deltas or {}),
    )


# Shared fragments
_KEY_START = r"(?<![A-Za-z0-9])"          # allows snake_case prefixes such as patient_dob
_SEP = r"[:\s=#]*"
_QUOTE = r"[\"']?"
_DATE = r"(?:\d{1,2}[/-]\d{1,2}[/-]\d{2,4}|\d{4}-\d{1,2}-\d{1,2})"
_ID_VALUE = r"(?=[A-Z0-9-]*\d)"           # identifier values must carry a digit
_MBI_ALPHA = "AC-HJKMNP-RT-Y"              # CMS excludes S, L, O, I, B, Z


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

PHI_PATTERNS: tuple[PhiPatternRule, ...] = (

    # =====================================================================
    # Government and health identifiers
    # =====================================================================

    _rule(
        "ssn",
        "Social Security Number",
        r"(?<![0-9A-Za-z])(?!000|666|9\d\d)\d{3}([-. ])(?!00)\d{2}\1(?!0000)\d{4}(?![0-9A-Za-z])",
        PhiCategory.DIRECT,
        "Social Security number",
        95,
        {ScanContext.CODE: -30, ScanContext.FILENAME: +5},
        flags=0,
    ),
    _rule(
        # Bare nine-digit run; keyword-anchored rules (MRN) outrank it.
        "ssn_undelimited",
        "Social Security Number (Undelimited)",
        r"(?<![0-9A-Za-z-])(?!000|666|9\d\d)\d{3}(?!00)\d{2}(?!0000)\d{4}(?![0-9A-Za-z-])",
        PhiCategory.DIRECT,
        "Social Security number",
        70,
        {ScanContext.CODE: -30, ScanContext.DATA: +10},
        flags=0,
    ),
    _rule(
        "mrn",
        "Medical Record Number",
        _KEY_START + r"(?:MRN|Medical[_\s]?Record(?:[_\s]?(?:Number|Num|No))?)" + _SEP + r"\d{5,12}\b",
        PhiCategory.DIRECT,
        "Medical record numbers",
        90,
    ),
    _rule(
        "medicare_id",
        "Medicare Beneficiary Identifier",
        rf"\b[1-9][{_MBI_ALPHA}][{_MBI_ALPHA}0-9]\d-?[{_MBI_ALPHA}][{_MBI_ALPHA}0-9]\d-?[{_MBI_ALPHA}]{{2}}\d{{2}}\b",
        PhiCategory.DIRECT,
        "Health plan beneficiary numbers",
        92,
    ),
    _rule(
        "health_plan_id",
        "Health Plan ID",
        _KEY_START
        + r"(?:member[_\s]?id|subscriber[_\s]?id|policy[_\s]?(?:number|num|no)|group[_\s]?(?:number|num|no))"
        + _SEP + _ID_VALUE + r"[A-Z0-9]{6,20}\b",
        PhiCategory.DIRECT,
        "Health plan beneficiary numbers",
        75,
    ),

    # =====================================================================
    # Names
    # =====================================================================

    _rule(
        "patient_name_explicit",
        "Explicit Patient Name",
        _KEY_START + r"(?i:patient|resident|client)[_\s]?(?i:name)" + _SEP + _QUOTE
        + r"[A-Z][a-z]+ [A-Z][a-z]+" + _QUOTE,
        PhiCategory.DIRECT,
        "Names",
        88,
        flags=0,
    ),
    _rule(
        "person_name",
        "Person Name (Generic)",
        r"\bname[:\s=]*[\"'][A-Z][a-z]+ [A-Z][a-z]+[\"']",
        PhiCategory.QUASI,
        "Names",
        60,
        {ScanContext.DATA: +20, ScanContext.CODE: -20},
        flags=0,
    ),

    # =====================================================================
    # Contact information
    # =====================================================================

    _rule(
        "phone",
        "Phone Number",
        r"(?<!\w)(?:\+1[-.\s]?)?(?:\(\d{3}\)|\d{3})[-.\s]?\d{3}[-.\s]?\d{4}(?!\w)",
        PhiCategory.DIRECT,
        "Telephone numbers",
        65,
        {ScanContext.CODE: -30, ScanContext.DATA: +20},
        flags=0,
    ),
    _rule(
        "email",
        "Email Address",
        r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
        PhiCategory.DIRECT,
        "Email addresses",
        60,
        {ScanContext.CODE: -40, ScanContext.DATA: +25},
        flags=0,
    ),

    # =====================================================================
    # Dates
    # =====================================================================

    _rule(
        "dob_explicit",
        "Date of Birth (Explicit)",
        _KEY_START + r"(?:dob|date[_\s]?of[_\s]?birth|birth[_\s]?date|born)" + _SEP + _QUOTE + _DATE + _QUOTE,
        PhiCategory.DIRECT,
        "Dates (except year)",
        92,
    ),
    _rule(
        "date_service",
        "Date of Service",
        _KEY_START
        + r"(?:dos|date[_\s]?of[_\s]?service|service[_\s]?date|admission[_\s]?date|discharge[_\s]?date)"
        + _SEP + _QUOTE + _DATE + _QUOTE,
        PhiCategory.QUASI,
        "Dates (except year)",
        70,
    ),

    # =====================================================================
    # Geography
    # =====================================================================

    _rule(
        "street_address",
        "Street Address",
        r"\b\d{1,5}\s+(?:[A-Z][a-z]+\s+){1,3}"
        r"(?i:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Court|Ct|Way|Circle|Cir)\b",
        PhiCategory.DIRECT,
        "Geographic data",
        75,
        {ScanContext.CODE: -35},
        flags=0,
    ),
    _rule(
        "zip_code",
        "ZIP Code",
        _KEY_START + r"(?:zip|postal)[_\s]?(?:code)?" + _SEP + r"\d{5}(?:-\d{4})?\b",
        PhiCategory.DIRECT,
        "Geographic data (ZIP codes)",
        55,
        {ScanContext.DATA: +20},
    ),

    # =====================================================================
    # Accounts, devices, biometrics
    # =====================================================================

    _rule(
        "account_number",
        "Account Number",
        _KEY_START + r"(?:account|acct)[_\s]?(?:number|num|no|#)" + _SEP + _ID_VALUE + r"[A-Z0-9]{6,20}\b",
        PhiCategory.DIRECT,
        "Account numbers",
        70,
    ),
    _rule(
        "device_id",
        "Device Identifier",
        _KEY_START + r"(?:device[_\s]?(?:id|identifier|serial)|serial[_\s]?(?:number|num|no))"
        + _SEP + _ID_VALUE + r"[A-Z0-9-]{8,30}\b",
        PhiCategory.DIRECT,
        "Device identifiers and serial numbers",
        65,
    ),
    _rule(
        "fingerprint",
        "Fingerprint Data",
        _KEY_START + r"(?:fingerprint|biometric)[_\s]?(?:data|hash|id)" + _SEP + _QUOTE + r"[A-Za-z0-9+/=]{20,}",
        PhiCategory.DIRECT,
        "Biometric identifiers",
        85,
    ),

    # =====================================================================
    # Network, vehicle, photo
    # =====================================================================

    _rule(
        "ip_address",
        "IP Address",
        _KEY_START + r"(?:patient|client|user)[_\s]?ip(?:[_\s]?address)?" + _SEP + _QUOTE
        + r"(?:\d{1,3}\.){3}\d{1,3}\b",
        PhiCategory.DIRECT,
        "IP addresses",
        80,
    ),
    _rule(
        "license_plate",
        "License Plate",
        _KEY_START + r"(?:license[_\s]?plate|vehicle[_\s]?(?:plate|tag))" + _SEP + _ID_VALUE + r"[A-Z0-9]{5,8}\b",
        PhiCategory.DIRECT,
        "Vehicle identifiers",
        75,
    ),
    _rule(
        "photo_reference",
        "Photo Reference",
        _KEY_START + r"(?:patient[_\s]?photo|resident[_\s]?photo|client[_\s]?photo|face[_\s]?image)[_\s]*[:=]",
        PhiCategory.DIRECT,
        "Full-face photographs",
        82,
    ),

    # =====================================================================
    # Clinical (quasi-identifiers)
    # =====================================================================

    _rule(
        # Low prior; structured data lifts it over the floor.
        "diagnosis_code",
        "Diagnosis with Context",
        _KEY_START + r"(?i:diagnosis|dx)" + _SEP + _QUOTE + r"[A-Z]\d{2}(?:\.\d{1,4})?" + _QUOTE,
        PhiCategory.QUASI,
        "Medical information",
        40,
        {ScanContext.DATA: +30},
        flags=0,
    ),
)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def get_rule(rule_id: str, rules: Iterable[PhiPatternRule] = PHI_PATTERNS) -> PhiPatternRule:
    """Return the rule with *rule_id*; raises KeyError if absent."""
    for rule in rules:
        if rule.id == rule_id:
            return rule
    raise KeyError(rule_id)


def find_all_matches(
    text: str,
    rules: Iterable[PhiPatternRule] = PHI_PATTERNS,
) -> Iterator[tuple[PhiPatternRule, str, int]]:
    """Yield ``(rule, matched_text, start_offset)`` for every rule occurrence.

    Rules are tried in declaration order; each rule reports its own
    occurrences left to right.  Overlaps between *different* rules are
    kept — resolving them is the deduplicator's job.

    Raises
    ------
    PatternMatchError
        If a matcher raises; the original exception is chained.
    """
    for rule in rules:
        try:
            occurrences = list(rule.matcher.finditer(text))
        except Exception as exc:
            raise PatternMatchError(rule.id, str(exc)) from exc
        for matched_text, start in occurrences:
            yield rule, matched_text, start
