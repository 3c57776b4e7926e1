"""Criterion assessor: score one criterion against the shared claim set.

One call per CriterionConfig. The oracle request runs inside a limiter slot
and, within that slot, through the backoff executor. Any failure that survives
the retries degrades to a neutral fallback result; it is never raised.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List

from config.defaults import (
    ASSESSMENT_MAX_TOKENS,
    ASSESSMENT_TIMEOUT_SECONDS,
    BACKOFF_BASE_SECONDS,
    LLM_TEMPERATURE,
    MAX_CONTEXT_CHARS,
    MAX_PROMPT_CLAIMS,
    MAX_RETRIES,
    NEUTRAL_SCORE,
)
from greenaudit.analysis.prompts import CRITERION_SYSTEM_PROMPT, build_criterion_prompt
from greenaudit.analysis.scoring import clamp_score, status_for_score
from greenaudit.clients.llm_client import NON_RETRYABLE_ERRORS, LLMClient
from greenaudit.models.assessment import (
    ComplianceStatus,
    CriterionConfig,
    CriterionResult,
    Evidence,
    Finding,
    Severity,
)
from greenaudit.models.claims import Claim
from greenaudit.utils.concurrency import ConcurrencyLimiter
from greenaudit.utils.retry import run_with_backoff

logger = logging.getLogger(__name__)

NO_CLAIMS_RATIONALE = (
    "No environmental claims were extracted from this document. "
    "Unable to assess compliance. Manual review recommended."
)
NO_CLAIMS_RECOMMENDATIONS = (
    "Manual review of document recommended",
    "Ensure document contains extractable text",
)
FALLBACK_RATIONALE = "Assessment failed due to technical error. Manual review recommended."
FALLBACK_RECOMMENDATION = "Manual review recommended due to assessment error"
DEFAULT_RATIONALE = "Assessment completed"


def no_claims_result(criterion: CriterionConfig) -> CriterionResult:
    """Neutral result used when there is nothing to assess."""
    return CriterionResult(
        criterion_id=criterion.criterion_id,
        criterion_name=criterion.name,
        category_id=criterion.category_id,
        category_name=criterion.category_name,
        score=NEUTRAL_SCORE,
        status=ComplianceStatus.NEEDS_ATTENTION,
        rationale=NO_CLAIMS_RATIONALE,
        recommendations=list(NO_CLAIMS_RECOMMENDATIONS),
        weight=criterion.weight,
    )


def fallback_result(
    criterion: CriterionConfig, error: str, elapsed_seconds: float = 0.0
) -> CriterionResult:
    """Neutral result synthesized when the oracle could not be reached or parsed."""
    return CriterionResult(
        criterion_id=criterion.criterion_id,
        criterion_name=criterion.name,
        category_id=criterion.category_id,
        category_name=criterion.category_name,
        score=NEUTRAL_SCORE,
        status=ComplianceStatus.NEEDS_ATTENTION,
        rationale=FALLBACK_RATIONALE,
        recommendations=[FALLBACK_RECOMMENDATION],
        weight=criterion.weight,
        elapsed_seconds=elapsed_seconds,
        error=error or "Unknown assessment error",
    )


def _normalize_severity(value: Any) -> str:
    text = str(value or "").strip().capitalize()
    return text if text in Severity.ALL else Severity.MEDIUM


def _parse_findings(raw: Any) -> List[Finding]:
    findings: List[Finding] = []
    if not isinstance(raw, list):
        return findings
    for item in raw:
        if not isinstance(item, dict):
            continue
        issue = str(item.get("issue") or "").strip()
        if not issue:
            continue
        findings.append(
            Finding(
                claim_id=str(item.get("claimId") or item.get("claim_id") or ""),
                issue=issue,
                severity=_normalize_severity(item.get("severity")),
            )
        )
    return findings


def _parse_evidence(raw: Any) -> List[Evidence]:
    evidence: List[Evidence] = []
    if not isinstance(raw, list):
        return evidence
    for item in raw:
        if isinstance(item, str):
            if item.strip():
                evidence.append(Evidence(quote=item.strip()))
            continue
        if not isinstance(item, dict):
            continue
        quote = str(item.get("quote") or "").strip()
        if not quote:
            continue
        evidence.append(
            Evidence(
                quote=quote,
                location=str(item.get("pageReference") or item.get("location") or ""),
                relevance=str(item.get("context") or item.get("relevance") or ""),
            )
        )
    return evidence


def parse_criterion_payload(
    criterion: CriterionConfig,
    payload: Dict[str, Any],
    elapsed_seconds: float = 0.0,
) -> CriterionResult:
    """Decode an untrusted oracle payload into a CriterionResult.

    Every field is defaulted here and nowhere else: score → 50, invalid status
    → derived from score, rationale → "Assessment completed", lists → empty.

    Args:
        criterion: The criterion the payload answers.
        payload: Parsed JSON object returned by the oracle.
        elapsed_seconds: Wall time spent on the assessment.

    Returns:
        A CriterionResult whose score is always an integer in [0, 100].
    """
    score = clamp_score(payload.get("score"))
    status = payload.get("status")
    if status not in ComplianceStatus.ALL:
        status = status_for_score(score)

    rationale = payload.get("rationale")
    if not isinstance(rationale, str) or not rationale.strip():
        rationale = DEFAULT_RATIONALE

    recommendations_raw = payload.get("recommendations")
    recommendations = (
        [str(r).strip() for r in recommendations_raw if r is not None and str(r).strip()]
        if isinstance(recommendations_raw, list)
        else []
    )

    return CriterionResult(
        criterion_id=criterion.criterion_id,
        criterion_name=criterion.name,
        category_id=criterion.category_id,
        category_name=criterion.category_name,
        score=score,
        status=status,
        rationale=rationale.strip(),
        findings=_parse_findings(payload.get("findings")),
        evidence=_parse_evidence(payload.get("evidenceUsed", payload.get("evidence"))),
        recommendations=recommendations,
        weight=criterion.weight,
        elapsed_seconds=elapsed_seconds,
    )


async def assess_criterion(
    criterion: CriterionConfig,
    claims: List[Claim],
    document_context: str,
    llm: LLMClient,
    limiter: ConcurrencyLimiter,
    timeout: float = ASSESSMENT_TIMEOUT_SECONDS,
    max_retries: int = MAX_RETRIES,
    backoff_base: float = BACKOFF_BASE_SECONDS,
    max_prompt_claims: int = MAX_PROMPT_CLAIMS,
    max_context_chars: int = MAX_CONTEXT_CHARS,
    max_tokens: int = ASSESSMENT_MAX_TOKENS,
    temperature: float = LLM_TEMPERATURE,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> CriterionResult:
    """Assess one criterion against the full claim list.

    Args:
        criterion: Criterion to assess.
        claims: Shared, read-only claim list.
        document_context: Bounded document excerpt for the oracle.
        llm: Oracle client.
        limiter: Shared admission gate for outstanding oracle calls.
        timeout: Per-attempt request timeout in seconds.
        max_retries: Retries after the first attempt.
        backoff_base: Backoff delay unit in seconds.
        max_prompt_claims: Claims included in the request.
        max_context_chars: Characters of document context included.
        max_tokens: Response token budget.
        temperature: Sampling temperature.
        sleep: Backoff sleep (injectable for tests).

    Returns:
        A real CriterionResult, the zero-claim neutral result, or a fallback
        result with ``error`` set.
    """
    if not claims:
        logger.info(
            "Criterion %s: no claims available; neutral score", criterion.criterion_id
        )
        return no_claims_result(criterion)

    prompt = build_criterion_prompt(
        criterion,
        claims,
        document_context,
        max_claims=max_prompt_claims,
        max_context_chars=max_context_chars,
    )

    async def _call_oracle() -> Dict[str, Any]:
        return await llm.call_json(
            CRITERION_SYSTEM_PROMPT,
            prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            timeout=timeout,
        )

    start = time.monotonic()
    try:
        payload = await limiter.acquire(
            lambda: run_with_backoff(
                _call_oracle,
                max_retries=max_retries,
                base_delay=backoff_base,
                operation_name=f"Criterion {criterion.criterion_id}",
                sleep=sleep,
                non_retryable=NON_RETRYABLE_ERRORS,
            )
        )
    except Exception as exc:
        elapsed = time.monotonic() - start
        logger.error(
            "Criterion %s: assessment failed after %d attempts: %s",
            criterion.criterion_id,
            max_retries + 1,
            exc,
        )
        return fallback_result(criterion, str(exc) or type(exc).__name__, elapsed)

    elapsed = time.monotonic() - start
    result = parse_criterion_payload(criterion, payload, elapsed)
    logger.debug(
        "Criterion %s: score=%d status=%s (%.2fs)",
        criterion.criterion_id,
        result.score,
        result.status,
        elapsed,
    )
    return result
