"""Criterion assessment data models for greenaudit.

Defines the static per-criterion configuration, the typed outcome of one
criterion assessment, and the batch envelope produced by the coordinator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class ComplianceStatus:
    """Three-tier status shared by criteria and categories."""

    COMPLIANT = "Compliant"
    NEEDS_ATTENTION = "Needs Attention"
    HIGH_RISK = "High Risk"

    ALL = (COMPLIANT, NEEDS_ATTENTION, HIGH_RISK)


class Severity:
    """Finding severity levels."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    ALL = (HIGH, MEDIUM, LOW)


@dataclass(frozen=True)
class CriterionConfig:
    """Static configuration for one evaluable question.

    Per-caller customizations (weight, prompt body) are applied with
    ``dataclasses.replace`` so a loaded configuration is never mutated.
    """

    criterion_id: str
    name: str
    category_id: str
    category_name: str
    description: str = ""
    weight: float = 1.0


@dataclass(frozen=True)
class Finding:
    """A specific issue the oracle raised against a claim."""

    claim_id: str
    issue: str
    severity: str = Severity.MEDIUM


@dataclass(frozen=True)
class Evidence:
    """A supporting quote cited by the oracle."""

    quote: str
    location: str = ""
    relevance: str = ""


@dataclass(frozen=True)
class CriterionResult:
    """Outcome of assessing one CriterionConfig against the claim set.

    When ``error`` is set the result is a synthesized neutral fallback rather
    than a real assessment.
    """

    criterion_id: str
    criterion_name: str
    category_id: str
    category_name: str
    score: int
    status: str
    rationale: str = ""
    findings: List[Finding] = field(default_factory=list)
    evidence: List[Evidence] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    weight: float = 1.0
    elapsed_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None

    def high_severity_findings(self) -> List[Finding]:
        return [f for f in self.findings if f.severity == Severity.HIGH]


@dataclass
class AssessmentBatchResult:
    """Settled outcome of assessing every configured criterion."""

    results: List[CriterionResult] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    warnings: List[str] = field(default_factory=list)
    status: str = "OK"   # "OK", "PARTIAL", "FAILED"
