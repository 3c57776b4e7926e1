"""Aggregated report data models for greenaudit.

Defines the per-category rollup, derived strengths and critical issues, the
legal-risk block, and the final AggregatedReport produced once per run.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List

from greenaudit.models.assessment import CriterionResult


class RiskLevel:
    """Overall risk tier labels."""

    LOW = "Low Risk"
    MEDIUM = "Medium Risk"
    HIGH = "High Risk"


class EnforcementRisk:
    """Enforcement exposure tiers used by the legal-risk block."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class CategoryScore:
    """Weighted rollup of all criterion results sharing a parent category."""

    category_id: str
    name: str
    score: int
    status: str
    summary: str = ""
    criteria: List[CriterionResult] = field(default_factory=list)


@dataclass
class Strength:
    """A criterion that scored well and cited supporting evidence."""

    title: str
    description: str
    evidence: str = ""
    location: str = ""


@dataclass
class CriticalIssue:
    """A high-severity finding resolved back to its source claim."""

    title: str
    description: str
    category: str
    criterion: str
    evidence: str = ""
    location: str = ""
    recommendation: str = ""
    severity: str = "High"


@dataclass
class LegalRiskAssessment:
    """Deterministic penalty-exposure tier and prioritized action list."""

    penalty_exposure: str
    enforcement_risk: str
    priority_actions: List[str] = field(default_factory=list)


@dataclass
class ReportMetadata:
    """Per-phase timing and success/failure counts."""

    claim_extraction_seconds: float = 0.0
    assessment_seconds: float = 0.0
    aggregation_seconds: float = 0.0
    total_seconds: float = 0.0
    criteria_succeeded: int = 0
    criteria_failed: int = 0


@dataclass
class AggregatedReport:
    """Final output of an assessment run."""

    overall_score: int
    risk_level: str
    executive_summary: str
    total_claims_analyzed: int
    category_scores: List[CategoryScore] = field(default_factory=list)
    key_strengths: List[Strength] = field(default_factory=list)
    critical_issues: List[CriticalIssue] = field(default_factory=list)
    legal_risk: LegalRiskAssessment = field(
        default_factory=lambda: LegalRiskAssessment(penalty_exposure="", enforcement_risk="")
    )
    metadata: ReportMetadata = field(default_factory=ReportMetadata)

    @property
    def criterion_results(self) -> List[CriterionResult]:
        """All criterion results in report order."""
        return [r for category in self.category_scores for r in category.criteria]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation for persistence collaborators."""
        return dataclasses.asdict(self)
