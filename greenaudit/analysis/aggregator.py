"""Aggregator: roll criterion results up into the final compliance report.

Pure and deterministic: no I/O, no oracle calls. Given the same claims and
results it always produces the same category scores, overall score and tier.

Pipeline:
  1. Group results by category id
  2. Weighted mean per category (neutral 50 when total weight is 0)
  3. Sort categories by id (natural order)
  4. Unweighted mean across categories → overall score and risk tier
  5. Strengths, critical issues, legal-risk block, executive summary
"""

from __future__ import annotations

import logging
import math
import re
import time
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.defaults import (
    COMPLIANT_THRESHOLD,
    DEFAULT_CRITERION_WEIGHT,
    ISSUE_TITLE_CHARS,
    MAX_CRITICAL_ISSUES,
    MAX_HIGH_FINDINGS_PER_CRITERION,
    MAX_PRIORITY_ACTIONS,
    MAX_STRENGTHS,
    NEEDS_ATTENTION_THRESHOLD,
    NEUTRAL_SCORE,
    STRENGTH_DESCRIPTION_CHARS,
    STRENGTH_THRESHOLD,
)
from greenaudit.analysis.scoring import risk_level_for_score, round_half_up, status_for_score
from greenaudit.models.assessment import CriterionResult, Severity
from greenaudit.models.claims import Claim
from greenaudit.models.report import (
    AggregatedReport,
    CategoryScore,
    CriticalIssue,
    EnforcementRisk,
    LegalRiskAssessment,
    ReportMetadata,
    Strength,
)

logger = logging.getLogger(__name__)

PENALTY_EXPOSURE = {
    EnforcementRisk.LOW: "Low - No significant violations identified",
    EnforcementRisk.MEDIUM: (
        "Moderate - Potential for administrative penalties up to $10M for corporations"
    ),
    EnforcementRisk.HIGH: (
        "High - Potential for significant penalties under Bill C-59, including up to "
        "$10M for corporations and $750K for individuals"
    ),
}

DEFAULT_ISSUE_RECOMMENDATION = "Review and address this issue"


# ── Scoring ─────────────────────────────────────────────────────────────────────

def effective_weight(value: Any) -> float:
    """Coerce a result weight; missing, non-numeric or negative → 1.0.

    Zero is kept so that an all-zero category falls back to the neutral score.
    """
    if isinstance(value, bool) or value is None:
        return DEFAULT_CRITERION_WEIGHT
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CRITERION_WEIGHT
    if math.isnan(weight) or math.isinf(weight) or weight < 0:
        return DEFAULT_CRITERION_WEIGHT
    return weight


def weighted_category_score(results: Sequence[CriterionResult]) -> int:
    """round(Σ score·weight / Σ weight), or 50 when the total weight is 0."""
    total_weight = 0.0
    weighted_sum = 0.0
    for result in results:
        weight = effective_weight(result.weight)
        total_weight += weight
        weighted_sum += result.score * weight
    if total_weight <= 0:
        return NEUTRAL_SCORE
    return round_half_up(weighted_sum / total_weight)


def overall_score_for(category_scores: Sequence[CategoryScore]) -> int:
    """Unweighted mean of category scores; categories are peers."""
    if not category_scores:
        return NEUTRAL_SCORE
    return round_half_up(sum(c.score for c in category_scores) / len(category_scores))


def natural_sort_key(value: str) -> Tuple[Any, ...]:
    """Split digits out so "principle10" sorts after "principle9"."""
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part)
        for part in re.split(r"(\d+)", value)
        if part
    )


def group_by_category(
    results: Sequence[CriterionResult],
) -> "OrderedDict[str, List[CriterionResult]]":
    grouped: "OrderedDict[str, List[CriterionResult]]" = OrderedDict()
    for result in results:
        grouped.setdefault(result.category_id, []).append(result)
    return grouped


def _category_summary(score: int, criteria_count: int, high_count: int) -> str:
    if score >= COMPLIANT_THRESHOLD:
        return (
            f"Generally compliant with {criteria_count} subcategories assessed. "
            f"{high_count} high-severity issues identified."
        )
    if score >= NEEDS_ATTENTION_THRESHOLD:
        return (
            f"Needs attention across {criteria_count} subcategories. "
            f"{high_count} high-severity issues require immediate action."
        )
    return (
        f"High risk identified across {criteria_count} subcategories. "
        f"{high_count} critical issues require urgent remediation."
    )


def build_category_scores(results: Sequence[CriterionResult]) -> List[CategoryScore]:
    """Group, score and sort categories."""
    categories: List[CategoryScore] = []
    for category_id, members in group_by_category(results).items():
        score = weighted_category_score(members)
        high_count = sum(len(r.high_severity_findings()) for r in members)
        categories.append(
            CategoryScore(
                category_id=category_id,
                name=members[0].category_name or category_id,
                score=score,
                status=status_for_score(score),
                summary=_category_summary(score, len(members), high_count),
                criteria=list(members),
            )
        )
    categories.sort(key=lambda c: natural_sort_key(c.category_id))
    return categories


# ── Derived sections ────────────────────────────────────────────────────────────

def derive_strengths(category_scores: Sequence[CategoryScore]) -> List[Strength]:
    """Criteria scoring >= 80 that cite evidence, capped at 3, in report order."""
    strengths: List[Strength] = []
    for category in category_scores:
        for result in category.criteria:
            if result.score < STRENGTH_THRESHOLD or not result.evidence:
                continue
            first = result.evidence[0]
            strengths.append(
                Strength(
                    title=f"Strong {result.criterion_name}",
                    description=result.rationale[:STRENGTH_DESCRIPTION_CHARS],
                    evidence=first.quote,
                    location=first.location,
                )
            )
            if len(strengths) >= MAX_STRENGTHS:
                return strengths
    return strengths


def derive_critical_issues(
    category_scores: Sequence[CategoryScore], claims: Sequence[Claim]
) -> List[CriticalIssue]:
    """Up to 2 High findings per criterion, resolved to their claims, capped at 10.

    Insertion order (category, then criterion, then finding) is kept; no
    severity or score sort is applied.
    """
    claims_by_id: Dict[str, Claim] = {c.claim_id: c for c in claims}
    issues: List[CriticalIssue] = []
    for category in category_scores:
        for result in category.criteria:
            high = result.high_severity_findings()[:MAX_HIGH_FINDINGS_PER_CRITERION]
            for finding in high:
                claim: Optional[Claim] = claims_by_id.get(finding.claim_id)
                issues.append(
                    CriticalIssue(
                        title=finding.issue[:ISSUE_TITLE_CHARS],
                        description=finding.issue,
                        category=category.name,
                        criterion=result.criterion_name,
                        evidence=claim.text if claim else "",
                        location=claim.location_label if claim else "Page unknown",
                        recommendation=(
                            result.recommendations[0]
                            if result.recommendations
                            else DEFAULT_ISSUE_RECOMMENDATION
                        ),
                        severity=Severity.HIGH,
                    )
                )
                if len(issues) >= MAX_CRITICAL_ISSUES:
                    return issues
    return issues


def derive_legal_risk(overall_score: int, high_severity_count: int) -> LegalRiskAssessment:
    """Deterministic penalty-exposure tier and prioritized actions."""
    if overall_score >= COMPLIANT_THRESHOLD and high_severity_count == 0:
        tier = EnforcementRisk.LOW
    elif overall_score >= NEEDS_ATTENTION_THRESHOLD or high_severity_count <= 2:
        tier = EnforcementRisk.MEDIUM
    else:
        tier = EnforcementRisk.HIGH

    actions: List[str] = []
    if high_severity_count > 0:
        actions.append("Immediately review and revise high-risk environmental claims")
    if overall_score < COMPLIANT_THRESHOLD:
        actions.append("Conduct comprehensive review of all environmental marketing materials")
        actions.append("Ensure all claims are substantiated with adequate and proper testing")
    if overall_score < NEEDS_ATTENTION_THRESHOLD:
        actions.append("Engage legal counsel specializing in Canadian competition law")
        actions.append(
            "Consider voluntary disclosure to Competition Bureau if violations are identified"
        )
    actions.append("Implement ongoing monitoring and compliance program for environmental claims")

    return LegalRiskAssessment(
        penalty_exposure=PENALTY_EXPOSURE[tier],
        enforcement_risk=tier,
        priority_actions=actions[:MAX_PRIORITY_ACTIONS],
    )


def compose_executive_summary(
    overall_score: int,
    risk_level: str,
    category_scores: Sequence[CategoryScore],
    total_claims: int,
    critical_issue_count: int,
) -> str:
    strong = [c.name for c in category_scores if c.score >= COMPLIANT_THRESHOLD]
    weak = [c.name for c in category_scores if c.score < NEEDS_ATTENTION_THRESHOLD]

    parts = [
        f"This document was assessed against the Competition Bureau's "
        f"{len(category_scores)} Principles for environmental claims, analyzing "
        f"{total_claims} environmental claims. The overall compliance score is "
        f"{overall_score}/100, indicating {risk_level.lower()}."
    ]
    if strong:
        parts.append(f"Strong compliance was found in {', '.join(strong)}.")
    if weak:
        parts.append(f"Areas requiring immediate attention include {', '.join(weak)}.")
    if critical_issue_count > 0:
        parts.append(
            f"{critical_issue_count} critical issues were identified that may expose "
            "the organization to enforcement action under Bill C-59."
        )
    else:
        parts.append("No critical issues were identified.")
    return " ".join(parts)


# ── Entry point ─────────────────────────────────────────────────────────────────

def aggregate_results(
    claims: Sequence[Claim],
    results: Sequence[CriterionResult],
    claim_extraction_seconds: float = 0.0,
    assessment_seconds: float = 0.0,
) -> AggregatedReport:
    """Build the AggregatedReport from claims and settled criterion results.

    Args:
        claims: Claims extracted for this run (used to resolve findings).
        results: One CriterionResult per configured criterion.
        claim_extraction_seconds: Duration of the extraction phase.
        assessment_seconds: Duration of the assessment phase.

    Returns:
        The final report. Never raises for well-formed inputs.
    """
    start = time.monotonic()

    category_scores = build_category_scores(results)
    overall = overall_score_for(category_scores)
    risk_level = risk_level_for_score(overall)

    strengths = derive_strengths(category_scores)
    issues = derive_critical_issues(category_scores, claims)
    legal_risk = derive_legal_risk(
        overall, sum(1 for i in issues if i.severity == Severity.HIGH)
    )
    summary = compose_executive_summary(
        overall, risk_level, category_scores, len(claims), len(issues)
    )

    failed = sum(1 for r in results if r.is_fallback)
    aggregation_seconds = time.monotonic() - start
    metadata = ReportMetadata(
        claim_extraction_seconds=claim_extraction_seconds,
        assessment_seconds=assessment_seconds,
        aggregation_seconds=aggregation_seconds,
        total_seconds=claim_extraction_seconds + assessment_seconds + aggregation_seconds,
        criteria_succeeded=len(results) - failed,
        criteria_failed=failed,
    )

    logger.info(
        "Aggregator: overall=%d (%s) | %d categories | %d strengths | %d critical issues",
        overall,
        risk_level,
        len(category_scores),
        len(strengths),
        len(issues),
    )

    return AggregatedReport(
        overall_score=overall,
        risk_level=risk_level,
        executive_summary=summary,
        total_claims_analyzed=len(claims),
        category_scores=category_scores,
        key_strengths=strengths,
        critical_issues=issues,
        legal_risk=legal_risk,
        metadata=metadata,
    )
