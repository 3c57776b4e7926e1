"""AggregationAgent: build the final report from the settled assessment batch."""

from __future__ import annotations

import logging
from typing import Any

from greenaudit.agents.base import BaseAgent
from greenaudit.analysis.aggregator import aggregate_results
from greenaudit.models.report import AggregatedReport

logger = logging.getLogger(__name__)


class AggregationAgent(BaseAgent):
    """Wrap the pure aggregator so it runs as a pipeline phase."""

    name = "AggregationAgent"
    version = "1.0.0"

    async def run(self, context: Any) -> AggregatedReport:
        extraction = context.extraction_result
        batch = context.assessment_result
        claims = extraction.claims if extraction else []
        results = batch.results if batch else []

        if not results:
            logger.warning("AggregationAgent: no criterion results; report uses neutral scores")

        return aggregate_results(
            claims,
            results,
            claim_extraction_seconds=extraction.elapsed_seconds if extraction else 0.0,
            assessment_seconds=batch.elapsed_seconds if batch else 0.0,
        )

    def validate_output(self, result: Any) -> bool:
        return isinstance(result, AggregatedReport) and 0 <= result.overall_score <= 100
