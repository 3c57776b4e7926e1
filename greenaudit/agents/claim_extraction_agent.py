"""ClaimExtractionAgent: turn document text into a list of atomic claims.

- One oracle request per run, JSON-object output, defensive parsing
- Transport and parse failures retried by the backoff executor
- Exhausted retries yield an empty claim set ("Extraction failed"), never an exception
- Claims from an external vision pass are merged as ``visual_claim_N``
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set

from config.defaults import (
    BACKOFF_BASE_SECONDS,
    EXTRACTION_MAX_TOKENS,
    EXTRACTION_TIMEOUT_SECONDS,
    LLM_TEMPERATURE,
    MAX_RETRIES,
)
from greenaudit.agents.base import AgentStatus, BaseAgent
from greenaudit.analysis.prompts import EXTRACTION_SYSTEM_PROMPT, build_extraction_prompt
from greenaudit.clients.llm_client import NON_RETRYABLE_ERRORS, LLMClient
from greenaudit.models.claims import Claim, ClaimCategory, ClaimExtractionResult, ClaimType
from greenaudit.utils.retry import run_with_backoff

logger = logging.getLogger(__name__)

EXTRACTION_FAILED = "Extraction failed"
UNKNOWN_COVERAGE = "Unknown"


def _parse_page(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value > 0 else None
    match = re.search(r"\d+", str(value))
    return int(match.group()) if match else None


def _unique_id(candidate: str, fallback: str, used: Set[str]) -> str:
    claim_id = candidate or fallback
    if claim_id in used:
        suffix = 2
        while f"{claim_id}_{suffix}" in used:
            suffix += 1
        claim_id = f"{claim_id}_{suffix}"
    used.add(claim_id)
    return claim_id


def parse_claims(raw_claims: Any) -> List[Claim]:
    """Convert the oracle's claim array into Claim objects.

    Entries without text are dropped. Missing ids become ``claim_N`` and
    duplicate ids get a numeric suffix, so ids are unique within the run.
    """
    if not isinstance(raw_claims, list):
        return []

    claims: List[Claim] = []
    used: Set[str] = set()
    for index, item in enumerate(raw_claims, start=1):
        if isinstance(item, str):
            item = {"text": item}
        if not isinstance(item, dict):
            continue
        text = str(item.get("text") or "").strip()
        if not text:
            continue

        raw_page = item.get("page")
        is_visual = str(raw_page).strip().lower() == "visual"
        flags = item.get("vaguenessFlags") or []
        claims.append(
            Claim(
                claim_id=_unique_id(str(item.get("id") or "").strip(), f"claim_{index}", used),
                text=text,
                page=None if is_visual else _parse_page(raw_page),
                is_visual=is_visual,
                section=str(item.get("section") or ""),
                category=ClaimCategory.normalize(item.get("category")),
                claim_type=ClaimType.normalize(item.get("claimType")),
                vagueness_flags=[str(f) for f in flags if str(f).strip()]
                if isinstance(flags, list)
                else [],
            )
        )
    return claims


def _finding_field(finding: Any, *names: str) -> Any:
    for name in names:
        if isinstance(finding, dict) and name in finding:
            return finding[name]
        if hasattr(finding, name):
            return getattr(finding, name)
    return None


def claims_from_visual_findings(findings: Sequence[Any]) -> List[Claim]:
    """Build claims from a vision pass over page images.

    Each finding carries a description, an optional page and a list of claim
    strings identified in the image; every claim string becomes one Claim.
    """
    claims: List[Claim] = []
    for finding in findings or []:
        identified = _finding_field(finding, "claimsIdentified", "claims_identified") or []
        if isinstance(identified, str):
            identified = [identified]
        description = str(_finding_field(finding, "description") or "").strip()
        page = _parse_page(_finding_field(finding, "page"))
        for text in identified:
            text = str(text).strip()
            if not text:
                continue
            claims.append(
                Claim(
                    claim_id=f"visual_claim_{len(claims) + 1}",
                    text=text,
                    page=page,
                    is_visual=True,
                    section=f"Visual: {description}" if description else "Visual content",
                    category=ClaimCategory.normalize(_finding_field(finding, "category")),
                    claim_type=ClaimType.FACTUAL,
                )
            )
    return claims


def merge_claims(primary: Sequence[Claim], extra: Sequence[Claim]) -> List[Claim]:
    """Append ``extra`` to ``primary``, dropping extra claims whose id is taken."""
    seen = {c.claim_id for c in primary}
    merged = list(primary)
    for claim in extra:
        if claim.claim_id in seen:
            logger.debug("Dropping visual claim with duplicate id %s", claim.claim_id)
            continue
        seen.add(claim.claim_id)
        merged.append(claim)
    return merged


def _total_claims_found(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        total = int(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    return total if total > 0 else fallback


def _failed_extraction(error: str, start: float) -> ClaimExtractionResult:
    return ClaimExtractionResult(
        claims=[],
        total_claims_found=0,
        document_coverage=EXTRACTION_FAILED,
        elapsed_seconds=time.monotonic() - start,
        error=error,
        warnings=[f"Claim extraction failed: {error}"],
        status=AgentStatus.PARTIAL,
    )


async def extract_claims(
    document_text: str,
    llm: LLMClient,
    timeout: float = EXTRACTION_TIMEOUT_SECONDS,
    max_retries: int = MAX_RETRIES,
    backoff_base: float = BACKOFF_BASE_SECONDS,
    max_tokens: int = EXTRACTION_MAX_TOKENS,
    temperature: float = LLM_TEMPERATURE,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ClaimExtractionResult:
    """Extract environmental claims from document text with one oracle request.

    Args:
        document_text: Full (or reconstructed) document text.
        llm: Oracle client.
        timeout: Per-attempt request timeout in seconds.
        max_retries: Retries after the first attempt.
        backoff_base: Backoff delay unit in seconds.
        max_tokens: Response token budget.
        temperature: Sampling temperature.
        sleep: Backoff sleep (injectable for tests).

    Returns:
        ClaimExtractionResult. On exhausted retries or an undecodable payload:
        no claims, coverage "Extraction failed" and ``error`` populated.
    """
    start = time.monotonic()
    prompt = build_extraction_prompt(document_text)

    async def _call_oracle() -> Dict[str, Any]:
        return await llm.call_json(
            EXTRACTION_SYSTEM_PROMPT,
            prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            timeout=timeout,
        )

    try:
        payload = await run_with_backoff(
            _call_oracle,
            max_retries=max_retries,
            base_delay=backoff_base,
            operation_name="Claim extraction",
            sleep=sleep,
            non_retryable=NON_RETRYABLE_ERRORS,
        )
    except Exception as exc:
        error = str(exc) or type(exc).__name__
        logger.error("Claim extraction failed after %d attempts: %s", max_retries + 1, error)
        return _failed_extraction(error, start)

    try:
        claims = parse_claims(payload.get("claims"))
        total = _total_claims_found(payload.get("totalClaimsFound"), len(claims))
    except (AttributeError, TypeError, ValueError, OverflowError) as exc:
        error = f"Undecodable extraction payload: {exc}"
        logger.error("Claim extraction failed: %s", error)
        return _failed_extraction(error, start)

    coverage = payload.get("documentCoverage")
    return ClaimExtractionResult(
        claims=claims,
        total_claims_found=total,
        document_coverage=str(coverage) if coverage else UNKNOWN_COVERAGE,
        elapsed_seconds=time.monotonic() - start,
    )


class ClaimExtractionAgent(BaseAgent):
    """Extract claims from the context's document text and merge visual claims."""

    name = "ClaimExtractionAgent"
    version = "1.0.0"

    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    async def run(self, context: Any) -> ClaimExtractionResult:
        """Run extraction for ``context.document_text``.

        Args:
            context: AssessmentContext with config, document text and visual findings.

        Returns:
            ClaimExtractionResult including any visual claims.
        """
        cfg = context.config
        result = await extract_claims(
            context.document_text,
            self.llm,
            timeout=cfg.extraction_timeout_seconds,
            max_retries=cfg.max_retries,
            backoff_base=cfg.backoff_base_seconds,
            max_tokens=cfg.extraction_max_tokens,
            temperature=cfg.llm_temperature,
        )

        visual = claims_from_visual_findings(context.visual_findings)
        if visual:
            result.claims = merge_claims(result.claims, visual)
            result.total_claims_found = max(result.total_claims_found, len(result.claims))
            logger.info("ClaimExtractionAgent: merged %d visual claims", len(visual))

        if not result.claims:
            result.warnings.append(
                "No environmental claims extracted; criteria will receive neutral scores"
            )
            if result.status == AgentStatus.OK:
                result.status = AgentStatus.PARTIAL

        logger.info(
            "ClaimExtractionAgent: %d claims | coverage=%s | %.2fs",
            len(result.claims),
            result.document_coverage,
            result.elapsed_seconds,
        )
        return result
