"""AssessmentAgent: fan out one criterion assessment per configured criterion.

All criteria are scheduled at once; actual oracle concurrency is capped by the
shared ConcurrencyLimiter. Outcomes are settled individually: an exception in
one assessment becomes that criterion's fallback result and never cancels its
siblings, so N configured criteria always yield N results.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Sequence

from config.defaults import MAX_CONCURRENCY
from greenaudit.agents.base import AgentStatus, BaseAgent
from greenaudit.analysis.criterion_assessor import assess_criterion, fallback_result
from greenaudit.clients.llm_client import LLMClient
from greenaudit.models.assessment import (
    AssessmentBatchResult,
    CriterionConfig,
    CriterionResult,
)
from greenaudit.models.claims import Claim
from greenaudit.utils.concurrency import ConcurrencyLimiter

logger = logging.getLogger(__name__)

# Progress span reported while criteria settle (percent of the whole job)
_PROGRESS_START = 55
_PROGRESS_END = 90

# (completed, total)
CriterionProgressCallback = Callable[[int, int], None]


async def assess_all_criteria(
    criteria: Sequence[CriterionConfig],
    claims: List[Claim],
    document_context: str,
    llm: LLMClient,
    limiter: ConcurrencyLimiter,
    progress_callback: Optional[CriterionProgressCallback] = None,
    **assessor_kwargs: Any,
) -> AssessmentBatchResult:
    """Assess every criterion concurrently and settle all outcomes.

    Args:
        criteria: Criteria to assess.
        claims: Shared, read-only claim list.
        document_context: Bounded document excerpt passed to every assessor.
        llm: Oracle client.
        limiter: Admission gate shared by every assessor.
        progress_callback: Called with (completed, total) as each criterion settles.
        **assessor_kwargs: Forwarded to ``assess_criterion`` (timeout, max_retries, ...).

    Returns:
        AssessmentBatchResult with exactly ``len(criteria)`` results.
    """
    start = time.monotonic()
    total = len(criteria)
    if total == 0:
        logger.warning("AssessmentAgent: no criteria configured; nothing to assess")
        return AssessmentBatchResult(warnings=["No criteria configured"])

    completed = 0

    async def _assess(criterion: CriterionConfig) -> CriterionResult:
        nonlocal completed
        try:
            return await assess_criterion(
                criterion, claims, document_context, llm, limiter, **assessor_kwargs
            )
        finally:
            completed += 1
            if progress_callback is not None:
                progress_callback(completed, total)

    outcomes = await asyncio.gather(
        *(_assess(criterion) for criterion in criteria), return_exceptions=True
    )

    results: List[CriterionResult] = []
    warnings: List[str] = []
    for criterion, outcome in zip(criteria, outcomes):
        if isinstance(outcome, BaseException):
            error = str(outcome) or type(outcome).__name__
            logger.error(
                "AssessmentAgent: criterion %s raised %s: %s",
                criterion.criterion_id,
                type(outcome).__name__,
                error,
            )
            warnings.append(f"Criterion {criterion.criterion_id} failed: {error}")
            results.append(fallback_result(criterion, error))
        else:
            results.append(outcome)

    failed = sum(1 for r in results if r.is_fallback)
    succeeded = total - failed
    if failed == 0:
        status = AgentStatus.OK
    elif succeeded > 0:
        status = AgentStatus.PARTIAL
    else:
        status = AgentStatus.FAILED

    elapsed = time.monotonic() - start
    logger.info(
        "AssessmentAgent: %d criteria | %d succeeded | %d failed | %.2fs",
        total,
        succeeded,
        failed,
        elapsed,
    )
    return AssessmentBatchResult(
        results=results,
        succeeded=succeeded,
        failed=failed,
        elapsed_seconds=elapsed,
        warnings=warnings,
        status=status,
    )


class AssessmentAgent(BaseAgent):
    """Run every configured criterion against the extracted claims."""

    name = "AssessmentAgent"
    version = "1.0.0"

    def __init__(self, llm: LLMClient, limiter: Optional[ConcurrencyLimiter] = None) -> None:
        self.llm = llm
        self.limiter = limiter

    async def run(self, context: Any) -> AssessmentBatchResult:
        """Assess ``context.criteria`` against ``context.extraction_result.claims``.

        Args:
            context: AssessmentContext with config, criteria, claims and document context.

        Returns:
            AssessmentBatchResult.
        """
        cfg = context.config
        claims = context.extraction_result.claims if context.extraction_result else []
        limiter = self.limiter or ConcurrencyLimiter(cfg.max_concurrency or MAX_CONCURRENCY)

        def _on_progress(completed: int, total: int) -> None:
            percent = _PROGRESS_START + (_PROGRESS_END - _PROGRESS_START) * completed // total
            context.report_progress(percent, f"Assessed {completed}/{total} criteria")

        return await assess_all_criteria(
            context.criteria,
            claims,
            context.document_context,
            self.llm,
            limiter,
            progress_callback=_on_progress,
            timeout=cfg.assessment_timeout_seconds,
            max_retries=cfg.max_retries,
            backoff_base=cfg.backoff_base_seconds,
            max_prompt_claims=cfg.max_prompt_claims,
            max_context_chars=cfg.max_context_chars,
            max_tokens=cfg.assessment_max_tokens,
            temperature=cfg.llm_temperature,
        )
