"""Tests for phiguard/phi/engine.py — end-to-end scans.

Covers:
  - Mixed MRN / DOB / phone note resolves to three non-overlapping findings
  - Findings are sorted, in bounds, non-overlapping, and reproducible
  - Canonical placeholders never produce a finding in any context or mode
  - Marker words near a match suppress it
  - Context changes confidence, never matching
  - Strict mode rescues borderline matches
  - Invalid input raises InvalidScanInputError; matcher failure raises
    PatternMatchError with no partial result
  - Injected rule catalogues replace the built-in one
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from phiguard.core.errors import InvalidScanInputError, PatternMatchError, PhiGuardError
from phiguard.phi.engine import coerce_context, scan_candidates, scan_for_phi
from phiguard.phi.models import ScanResult
from phiguard.phi.patterns import PhiCategory, PhiPatternRule, RegexMatcher, ScanContext


CLINICAL_NOTE = "Patient MRN: 123456789, DOB: 01/15/1985, phone: (555) 123-4567"

MIXED_TEXT = (
    "Patient MRN: 12345678 seen 03/04/2024.\n"
    'name: "John Smith", ssn = "123-45-6789", email: jsmith@clinic.org\n'
    "Lives at 742 Evergreen Terrace Dr, ZIP: 62704, phone 217-555-0142\n"
    "diagnosis: E11.9, member_id: ABC123456, client_ip: 172.16.0.1\n"
)


def _assert_well_formed(text: str, result: ScanResult) -> None:
    confidences = [f.confidence for f in result.findings]
    assert confidences == sorted(confidences, reverse=True)
    for f in result.findings:
        assert 0 <= f.start_offset < f.end_offset <= len(text)
        assert text[f.start_offset:f.end_offset] == f.matched_text
        assert 0 <= f.confidence <= 100
    spans = sorted((f.start_offset, f.end_offset) for f in result.findings)
    for (_, prev_end), (next_start, _) in zip(spans, spans[1:]):
        assert prev_end <= next_start


class _ExplodingMatcher:
    def finditer(self, text):
        raise RuntimeError("matcher blew up")
        yield  # pragma: no cover


# ---------------------------------------------------------------------------
# 1. Clinical note
# ---------------------------------------------------------------------------

def test_clinical_note_findings():
    result = scan_for_phi(CLINICAL_NOTE, ScanContext.GENERAL, False)
    assert [(f.pattern_id, f.confidence) for f in result.findings] == [
        ("dob_explicit", 92),
        ("mrn", 90),
        ("phone", 65),
    ]


def test_clinical_note_mrn_span_beats_bare_ssn():
    result = scan_for_phi(CLINICAL_NOTE)
    mrn = next(f for f in result.findings if f.pattern_id == "mrn")
    assert mrn.matched_text == "MRN: 123456789"
    assert CLINICAL_NOTE[mrn.start_offset:mrn.end_offset] == mrn.matched_text
    assert "ssn_undelimited" not in {f.pattern_id for f in result.findings}


def test_candidates_include_overlaps_before_dedup():
    candidates = scan_candidates(CLINICAL_NOTE, ScanContext.GENERAL, False)
    assert {"mrn", "ssn_undelimited"} <= {c.pattern_id for c in candidates}


def test_findings_carry_rule_metadata():
    result = scan_for_phi(CLINICAL_NOTE)
    dob = result.findings[0]
    assert dob.display_name == "Date of Birth (Explicit)"
    assert dob.category is PhiCategory.DIRECT
    assert dob.regulatory_label == "Dates (except year)"
    assert dob.explanation.startswith("High confidence match for Dates (except year).")


# ---------------------------------------------------------------------------
# 2. Result invariants
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("context", list(ScanContext))
@pytest.mark.parametrize("strict", [False, True])
def test_results_are_well_formed(context, strict):
    result = scan_for_phi(MIXED_TEXT, context, strict)
    _assert_well_formed(MIXED_TEXT, result)
    assert result.context is context
    assert result.strict_mode is strict
    assert result.scanned_length == len(MIXED_TEXT)


def test_scan_is_deterministic():
    first = scan_for_phi(MIXED_TEXT, ScanContext.DATA, True)
    second = scan_for_phi(MIXED_TEXT, ScanContext.DATA, True)
    assert first == second


def test_concurrent_scans_agree():
    expected = scan_for_phi(MIXED_TEXT, ScanContext.DATA, False)
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: scan_for_phi(MIXED_TEXT, ScanContext.DATA, False), range(8)))
    assert all(r == expected for r in results)


def test_empty_text_returns_empty_result():
    result = scan_for_phi("")
    assert result.findings == ()
    assert result.scanned_length == 0
    assert result.has_phi is False


def test_plain_prose_has_no_phi():
    result = scan_for_phi("The quick brown fox jumps over the lazy dog.")
    assert result.findings == ()


# ---------------------------------------------------------------------------
# 3. False positives
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("context", list(ScanContext))
@pytest.mark.parametrize("strict", [False, True])
def test_all_zero_ssn_never_reported(context, strict):
    result = scan_for_phi('ssn: "000-00-0000"', context, strict)
    assert result.findings == ()


@pytest.mark.parametrize("text", [
    'test_ssn = "123-45-6789"',
    'ssn = "123-45-6789"  # example value',
    "mock_patient_dob: 01/15/1985",
    'email: "someone@example.com"',
    "phone: 555-555-5555",
    "client_ip: 127.0.0.1",
    "SAMPLE_MRN: 12345678",
])
def test_synthetic_values_are_suppressed(text):
    for context in ScanContext:
        result = scan_for_phi(text, context, False)
        assert not [f for f in result.findings if f.confidence >= 70], (text, context)


# ---------------------------------------------------------------------------
# 4. Context and strict mode
# ---------------------------------------------------------------------------

def test_context_changes_confidence_not_spans():
    text = 'ssn = "123-45-6789"'
    code = scan_for_phi(text, ScanContext.CODE)
    data = scan_for_phi(text, ScanContext.DATA)
    assert [(f.pattern_id, f.confidence) for f in code.findings] == [("ssn", 65)]
    assert [(f.pattern_id, f.confidence) for f in data.findings] == [("ssn", 95)]
    assert code.findings[0].start_offset == data.findings[0].start_offset


def test_filename_context_scores_ssn_highest():
    name = "patient_john_doe_ssn_123-45-6789.json"
    result = scan_for_phi(name, ScanContext.FILENAME)
    top = result.findings[0]
    assert top.pattern_id == "ssn"
    assert top.confidence == 100
    assert top.matched_text == "123-45-6789"


def test_email_in_code_is_dropped():
    assert scan_for_phi("contact jsmith@clinic.org", ScanContext.CODE).findings == ()
    data = scan_for_phi("contact jsmith@clinic.org", ScanContext.DATA)
    assert [(f.pattern_id, f.confidence) for f in data.findings] == [("email", 85)]


def test_strict_mode_rescues_diagnosis_code():
    text = "diagnosis: E11.9"
    assert scan_for_phi(text, ScanContext.GENERAL, False).findings == ()
    strict = scan_for_phi(text, ScanContext.GENERAL, True)
    assert [(f.pattern_id, f.confidence) for f in strict.findings] == [("diagnosis_code", 55)]
    data = scan_for_phi(text, ScanContext.DATA, False)
    assert [(f.pattern_id, f.confidence) for f in data.findings] == [("diagnosis_code", 70)]


def test_strict_mode_never_removes_findings():
    relaxed = scan_for_phi(MIXED_TEXT, ScanContext.GENERAL, False)
    strict = scan_for_phi(MIXED_TEXT, ScanContext.GENERAL, True)
    strict_spans = [(f.start_offset, f.end_offset) for f in strict.findings]
    for f in relaxed.findings:
        assert any(
            not (end <= f.start_offset or f.end_offset <= start) for start, end in strict_spans
        ), f.pattern_id


# ---------------------------------------------------------------------------
# 5. Input validation and errors
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value,expected", [
    (None, ScanContext.GENERAL),
    ("data", ScanContext.DATA),
    (" Code ", ScanContext.CODE),
    (ScanContext.COMMENT, ScanContext.COMMENT),
])
def test_coerce_context(value, expected):
    assert coerce_context(value) is expected


def test_string_context_accepted_by_scan():
    result = scan_for_phi('ssn = "123-45-6789"', "data")
    assert result.context is ScanContext.DATA


def test_unknown_context_rejected():
    with pytest.raises(InvalidScanInputError, match="Unknown scan context"):
        scan_for_phi("anything", "spreadsheet")


def test_non_string_text_rejected():
    with pytest.raises(InvalidScanInputError) as excinfo:
        scan_for_phi(b"123-45-6789")  # type: ignore[arg-type]
    assert excinfo.value.details == {"argument": "text", "type": "bytes"}
    assert isinstance(excinfo.value, TypeError)
    assert isinstance(excinfo.value, PhiGuardError)


def test_non_bool_strict_mode_rejected():
    with pytest.raises(InvalidScanInputError, match="strict_mode"):
        scan_for_phi("anything", ScanContext.GENERAL, "yes")  # type: ignore[arg-type]


def test_matcher_failure_aborts_scan():
    broken = PhiPatternRule(
        id="broken", display_name="Broken", matcher=_ExplodingMatcher(),
        category=PhiCategory.DIRECT, regulatory_label="Names", base_confidence=90,
    )
    with pytest.raises(PatternMatchError) as excinfo:
        scan_for_phi("MRN: 12345678", rules=(broken,))
    assert excinfo.value.to_dict()["details"] == {"rule_id": "broken"}


# ---------------------------------------------------------------------------
# 6. Injected catalogues
# ---------------------------------------------------------------------------

def test_custom_rules_replace_builtin_catalogue():
    badge = PhiPatternRule(
        id="badge", display_name="Badge Number", matcher=RegexMatcher(r"BADGE-\d{4}"),
        category=PhiCategory.DIRECT, regulatory_label="Any other unique identifying number",
        base_confidence=85,
    )
    result = scan_for_phi("MRN: 12345678 BADGE-0042", rules=(badge,))
    assert [(f.pattern_id, f.matched_text) for f in result.findings] == [("badge", "BADGE-0042")]


def test_custom_rule_order_breaks_ties():
    first = PhiPatternRule(
        id="first", display_name="First", matcher=RegexMatcher(r"AB\d{3}"),
        category=PhiCategory.DIRECT, regulatory_label="Names", base_confidence=80,
    )
    second = PhiPatternRule(
        id="second", display_name="Second", matcher=RegexMatcher(r"\d{3}CD"),
        category=PhiCategory.DIRECT, regulatory_label="Names", base_confidence=80,
    )
    result = scan_for_phi("AB123CD", rules=(second, first))
    assert [f.pattern_id for f in result.findings] == ["second"]

    result = scan_for_phi("AB123CD", rules=iter((second, first)))
    assert [f.pattern_id for f in result.findings] == ["second"]


# ---------------------------------------------------------------------------
# 7. Logging safety
# ---------------------------------------------------------------------------

def test_scan_never_logs_matched_text(caplog):
    with caplog.at_level(logging.DEBUG, logger="phiguard"):
        result = scan_for_phi(CLINICAL_NOTE, ScanContext.DATA, True)
    assert result.findings
    assert "123456789" not in caplog.text
    assert "01/15/1985" not in caplog.text
    assert "123-4567" not in caplog.text
    assert "PHI scan completed" in caplog.text
