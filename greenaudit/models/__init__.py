"""greenaudit data models package.

All agent input/output schemas are defined here as typed dataclasses.
Never return raw Dict from agent code; always use the typed models.
"""

from greenaudit.models.assessment import (
    AssessmentBatchResult,
    ComplianceStatus,
    CriterionConfig,
    CriterionResult,
    Evidence,
    Finding,
    Severity,
)
from greenaudit.models.claims import Claim, ClaimCategory, ClaimExtractionResult, ClaimType
from greenaudit.models.pipeline import AssessmentContext, PhaseRecord
from greenaudit.models.report import (
    AggregatedReport,
    CategoryScore,
    CriticalIssue,
    EnforcementRisk,
    LegalRiskAssessment,
    ReportMetadata,
    RiskLevel,
    Strength,
)

__all__ = [
    # claims
    "Claim",
    "ClaimCategory",
    "ClaimType",
    "ClaimExtractionResult",
    # assessment
    "ComplianceStatus",
    "Severity",
    "CriterionConfig",
    "CriterionResult",
    "Finding",
    "Evidence",
    "AssessmentBatchResult",
    # report
    "AggregatedReport",
    "CategoryScore",
    "CriticalIssue",
    "Strength",
    "LegalRiskAssessment",
    "ReportMetadata",
    "RiskLevel",
    "EnforcementRisk",
    # pipeline
    "AssessmentContext",
    "PhaseRecord",
]
