"""Score coercion and three-tier thresholding shared by assessment and aggregation."""

from __future__ import annotations

import math
from typing import Any

from config.defaults import COMPLIANT_THRESHOLD, NEEDS_ATTENTION_THRESHOLD, NEUTRAL_SCORE
from greenaudit.models.assessment import ComplianceStatus
from greenaudit.models.report import RiskLevel


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negative input.

    Python's built-in round() uses banker's rounding (round(82.5) == 82); scores
    are always non-negative, so floor(x + 0.5) gives the conventional result.
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: Any, default: int = NEUTRAL_SCORE) -> int:
    """Coerce an untrusted score into an integer in [0, 100].

    Args:
        value: Raw score (int, float, numeric string, or anything else).
        default: Score used when the value is missing or not numeric.

    Returns:
        Integer score in [0, 100].
    """
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    except OverflowError:
        # integer too large for a float
        return 100 if value > 0 else 0
    if math.isnan(number):
        return default
    if math.isinf(number):
        return 100 if number > 0 else 0
    return max(0, min(100, round_half_up(number)))


def status_for_score(score: int) -> str:
    """Map a score to Compliant / Needs Attention / High Risk."""
    if score >= COMPLIANT_THRESHOLD:
        return ComplianceStatus.COMPLIANT
    if score >= NEEDS_ATTENTION_THRESHOLD:
        return ComplianceStatus.NEEDS_ATTENTION
    return ComplianceStatus.HIGH_RISK


def risk_level_for_score(score: int) -> str:
    """Map an overall score to Low Risk / Medium Risk / High Risk."""
    if score >= COMPLIANT_THRESHOLD:
        return RiskLevel.LOW
    if score >= NEEDS_ATTENTION_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
