"""Human-facing rendering of scan results.

Nothing here feeds back into detection.  Matched text only ever leaves
this module masked.
"""
from __future__ import annotations

from phiguard.phi.models import Finding, ScanResult
from phiguard.phi.patterns import PhiPatternRule

HIGH_CONFIDENCE: int = 80
MEDIUM_CONFIDENCE: int = 60

TIER_HIGH = "High"
TIER_MEDIUM = "Medium"
TIER_LOW = "Low"

NO_PHI_MESSAGE = (
    "✅ **No PHI Detected**\n\n"
    "No potential Protected Health Information was found in the provided content."
)

SAFE_HARBOR_FOOTER = (
    "**HIPAA Safe Harbor De-identification:** The 18 identifiers that must be removed or obscured:\n"
    "Names, Geographic data, Dates, Phone numbers, Fax numbers, Email addresses, SSN, MRN, "
    "Health plan beneficiary numbers, Account numbers, Certificate/license numbers, "
    "Vehicle identifiers, Device identifiers, URLs, IP addresses, Biometric identifiers, "
    "Full-face photos, Any other unique identifying number.\n"
)


def mask_value(value: str) -> str:
    """Keep the first and last two characters around a fixed run of stars."""
    if len(value) <= 4:
        return "****"
    return f"{value[:2]}****{value[-2:]}"


def confidence_tier(confidence: int) -> str:
    if confidence >= HIGH_CONFIDENCE:
        return TIER_HIGH
    if confidence >= MEDIUM_CONFIDENCE:
        return TIER_MEDIUM
    return TIER_LOW


def build_explanation(rule: PhiPatternRule, confidence: int) -> str:
    return (
        f"{confidence_tier(confidence)} confidence match for {rule.regulatory_label}. "
        f"This is a {rule.category.value} identifier under HIPAA Safe Harbor de-identification."
    )


def summarize_findings(result: ScanResult) -> dict[str, int]:
    """Count findings per confidence tier."""
    summary = {TIER_HIGH.lower(): 0, TIER_MEDIUM.lower(): 0, TIER_LOW.lower(): 0}
    for finding in result.findings:
        summary[confidence_tier(finding.confidence).lower()] += 1
    return summary


def masked_finding(finding: Finding) -> dict[str, object]:
    """Serialisable view of *finding* with the matched text masked."""
    return {
        "pattern_id": finding.pattern_id,
        "type": finding.display_name,
        "category": finding.category.value,
        "regulatory_label": finding.regulatory_label,
        "match": mask_value(finding.matched_text),
        "confidence": finding.confidence,
        "start_offset": finding.start_offset,
        "end_offset": finding.end_offset,
        "explanation": finding.explanation,
    }


def _format_finding(finding: Finding) -> str:
    return (
        f"- **{finding.display_name}** ({finding.confidence}%)\n"
        f"  - Match: `{mask_value(finding.matched_text)}`\n"
        f"  - Category: {finding.category.value}\n"
        f"  - HIPAA: {finding.regulatory_label}\n"
        f"  - {finding.explanation}\n"
    )


def format_report(result: ScanResult) -> str:
    """Render *result* as a markdown report grouped by confidence tier."""
    if not result.has_phi:
        return NO_PHI_MESSAGE

    grouped: dict[str, list[Finding]] = {TIER_HIGH: [], TIER_MEDIUM: [], TIER_LOW: []}
    for finding in result.findings:
        grouped[confidence_tier(finding.confidence)].append(finding)

    lines = [
        "## ⚠️ PHI Detection Results\n",
        f"**Findings:** {len(result.findings)} potential PHI element(s) detected",
        f"**Context:** {result.context.value}",
        f"**Strict Mode:** {'Enabled' if result.strict_mode else 'Disabled'}\n",
        "### Summary",
        f"- 🔴 High confidence (≥{HIGH_CONFIDENCE}%): {len(grouped[TIER_HIGH])}",
        f"- 🟡 Medium confidence ({MEDIUM_CONFIDENCE}-{HIGH_CONFIDENCE - 1}%): {len(grouped[TIER_MEDIUM])}",
        f"- 🟢 Low confidence (<{MEDIUM_CONFIDENCE}%): {len(grouped[TIER_LOW])}\n",
    ]
    for tier, icon in ((TIER_HIGH, "🔴"), (TIER_MEDIUM, "🟡"), (TIER_LOW, "🟢")):
        if grouped[tier]:
            lines.append(f"### {icon} {tier} Confidence Findings\n")
            lines.extend(_format_finding(f) for f in grouped[tier])

    lines.append("---")
    lines.append(SAFE_HARBOR_FOOTER)
    return "\n".join(lines)
