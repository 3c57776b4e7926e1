"""greenaudit analysis package.

Scoring, prompt construction and aggregation are pure functions over typed
models from greenaudit.models. The criterion assessor is the only module here
that talks to the oracle, and it does so through an injected LLMClient.
"""

from greenaudit.analysis.aggregator import aggregate_results
from greenaudit.analysis.criteria_catalog import (
    DEFAULT_CATEGORIES,
    default_criteria,
    get_criterion_definition,
)
from greenaudit.analysis.criterion_assessor import (
    assess_criterion,
    fallback_result,
    parse_criterion_payload,
)
from greenaudit.analysis.scoring import (
    clamp_score,
    risk_level_for_score,
    round_half_up,
    status_for_score,
)

__all__ = [
    "aggregate_results",
    "assess_criterion",
    "fallback_result",
    "parse_criterion_payload",
    "DEFAULT_CATEGORIES",
    "default_criteria",
    "get_criterion_definition",
    "clamp_score",
    "round_half_up",
    "status_for_score",
    "risk_level_for_score",
]
