"""greenaudit pipeline orchestrator.

Runs one assessment job end to end and keeps the AssessmentContext lifecycle:

  Phase 1: document preparation (paged text assembly, vision fallback)
  Phase 2: ClaimExtractionAgent
  Phase 3: AssessmentAgent (all criteria, bounded concurrency)
  Phase 4: AggregationAgent
  Phase 5: persistence through the JobStore

Oracle failures are absorbed inside the agents as neutral data. Anything else
is unexpected: the job is marked failed and the exception propagates.

Usage:
    from config.settings import AssessmentConfig
    from greenaudit.pipeline import run_pipeline

    context = run_pipeline(AssessmentConfig(), document_text=text)
    print(context.report.overall_score)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

from config.settings import AssessmentConfig
from greenaudit.agents.aggregation_agent import AggregationAgent
from greenaudit.agents.assessment_agent import AssessmentAgent
from greenaudit.agents.base import AgentStatus, BaseAgent
from greenaudit.agents.claim_extraction_agent import ClaimExtractionAgent
from greenaudit.clients.llm_client import LLMClient
from greenaudit.io.criteria_loader import load_criteria_config
from greenaudit.io.document import build_document_text, document_context
from greenaudit.io.job_store import JobStore, JsonJobStore
from greenaudit.models.assessment import CriterionConfig
from greenaudit.models.pipeline import AssessmentContext, PhaseRecord, ProgressCallback, utcnow
from greenaudit.utils.concurrency import ConcurrencyLimiter
from greenaudit.utils.logging_utils import get_job_logger

logger = logging.getLogger(__name__)

# Receives the primary document text, returns replacement text (sync or async)
VisionFallback = Callable[[str], Any]


def make_job_id(label: str = "") -> str:
    """Generate a sortable job ID from UTC timestamp and a label slug.

    Returns:
        Job ID string in the form ``YYYYMMDD_HHMMSS_<slug>``.
    """
    timestamp = utcnow().strftime("%Y%m%d_%H%M%S")
    slug = re.sub(r"[^a-z0-9]+", "_", label.lower())[:40].strip("_") or "job"
    return f"{timestamp}_{slug}"


def _fan_out_progress(
    job_id: str,
    job_store: Optional[JobStore],
    callback: Optional[ProgressCallback],
) -> Optional[ProgressCallback]:
    if job_store is None and callback is None:
        return None

    def _report(percent: int, step: str) -> None:
        if job_store is not None:
            job_store.update_progress(job_id, percent, step)
        if callback is not None:
            callback(percent, step)

    return _report


async def _run_phase(
    context: AssessmentContext,
    phase_name: str,
    agent: BaseAgent,
    result_attr: str,
) -> Any:
    """Execute one agent phase, record its timing, and store its result.

    Exceptions are recorded on the phase log and re-raised.
    """
    record: PhaseRecord = context.log_phase_start(phase_name)
    logger.info("Pipeline: starting %s", phase_name)
    try:
        result = await agent.run_timed(context)
    except Exception:
        context.log_phase_end(record, status=AgentStatus.FAILED)
        raise

    setattr(context, result_attr, result)
    if not agent.validate_output(result):
        logger.warning("Pipeline: %s output failed validation", phase_name)
        context.add_warning(f"[{phase_name}] output failed validation")
    status = getattr(result, "status", AgentStatus.OK)
    context.log_phase_end(record, status=str(status))
    for warning in getattr(result, "warnings", []):
        context.add_warning(f"[{phase_name}] {warning}")
    logger.info(
        "Pipeline: %s complete (%.1fs, status=%s)", phase_name, record.elapsed_seconds, status
    )
    return result


async def _prepare_document(
    context: AssessmentContext,
    vision_fallback: Optional[VisionFallback],
) -> None:
    cfg = context.config
    text = context.document_text
    if len(text.strip()) < cfg.vision_fallback_min_chars and vision_fallback is not None:
        context.report_progress(15, "Running vision fallback")
        logger.info(
            "Pipeline: only %d characters of text; using vision fallback", len(text.strip())
        )
        try:
            replacement = vision_fallback(text)
            if inspect.isawaitable(replacement):
                replacement = await replacement
        except Exception as exc:
            logger.warning("Pipeline: vision fallback failed: %s", exc)
            context.add_warning(f"Vision fallback failed: {exc}")
        else:
            if replacement and str(replacement).strip():
                text = str(replacement)

    if not text.strip():
        context.add_warning("Document contains no extractable text")
    context.document_text = text
    if not context.document_context:
        context.document_context = document_context(text, cfg.document_context_chars)


async def run(
    config: AssessmentConfig,
    document_text: str = "",
    pages: Optional[Sequence[Tuple[int, str]]] = None,
    criteria: Optional[List[CriterionConfig]] = None,
    job_id: Optional[str] = None,
    job_store: Optional[JobStore] = None,
    llm: Optional[LLMClient] = None,
    limiter: Optional[ConcurrencyLimiter] = None,
    vision_fallback: Optional[VisionFallback] = None,
    visual_findings: Optional[List[Any]] = None,
    progress_callback: Optional[ProgressCallback] = None,
    context_text: str = "",
) -> AssessmentContext:
    """Execute a complete assessment job.

    Args:
        config: Runtime configuration.
        document_text: Full document text (ignored when ``pages`` is given).
        pages: (page_number, text) pairs assembled with ``build_document_text``.
        criteria: Criteria to assess; loaded from ``config.criteria_path`` when None.
        job_id: Caller-supplied job identifier; generated when None.
        job_store: Receives progress, the final report, or the failure.
        llm: Oracle client; built from ``config`` when None.
        limiter: Admission gate; a new one sized by ``config.max_concurrency`` when None.
        vision_fallback: Called with the primary text when it is near-empty.
        visual_findings: Findings from a vision pass, merged as visual claims.
        progress_callback: Receives (percent, step_label) events.
        context_text: Shared criterion context; defaults to the leading document text.

    Returns:
        AssessmentContext with extraction, assessment and report populated.

    Raises:
        Any unexpected exception, after the job has been marked failed.
    """
    job_id = job_id or make_job_id("assessment")
    job_logger = get_job_logger("pipeline", job_id)

    if pages is not None:
        document_text = build_document_text(pages, config.max_document_chunks)

    context = AssessmentContext(
        config=config,
        job_id=job_id,
        output_dir=job_store.job_dir(job_id) if isinstance(job_store, JsonJobStore) else None,
        document_text=document_text or "",
        document_context=context_text,
        visual_findings=list(visual_findings or []),
        progress_callback=_fan_out_progress(job_id, job_store, progress_callback),
    )
    context.start_time = utcnow()
    job_logger.info("Starting assessment (backend=%s)", config.llm_backend)

    try:
        context.report_progress(5, "Preparing document")
        await _prepare_document(context, vision_fallback)

        context.criteria = (
            list(criteria)
            if criteria is not None
            else load_criteria_config(config.criteria_path, user_id=config.user_id)
        )

        llm = llm or LLMClient.from_config(config)
        limiter = limiter or ConcurrencyLimiter(config.max_concurrency)

        context.report_progress(25, "Extracting environmental claims")
        extraction = await _run_phase(
            context, "ClaimExtractionAgent", ClaimExtractionAgent(llm), "extraction_result"
        )
        context.report_progress(45, f"Extracted {len(extraction.claims)} claims")

        context.report_progress(55, f"Assessing {len(context.criteria)} criteria")
        await _run_phase(
            context, "AssessmentAgent", AssessmentAgent(llm, limiter), "assessment_result"
        )

        context.report_progress(92, "Aggregating results")
        report = await _run_phase(context, "AggregationAgent", AggregationAgent(), "report")

        context.report_progress(98, "Saving report")
        if job_store is not None:
            # complete() records 100% itself
            job_store.complete(job_id, report)
        if progress_callback is not None:
            progress_callback(100, "Complete")
    except Exception as exc:
        context.add_error(f"{type(exc).__name__}: {exc}")
        job_logger.exception("Assessment failed: %s", exc)
        if job_store is not None:
            job_store.fail(job_id, str(exc) or type(exc).__name__)
        raise
    finally:
        _finalise(context)

    job_logger.info(
        "Overall score %d (%s), %d claims, %d critical issues",
        report.overall_score,
        report.risk_level,
        report.total_claims_analyzed,
        len(report.critical_issues),
    )
    return context


def run_pipeline(config: Optional[AssessmentConfig] = None, **kwargs: Any) -> AssessmentContext:
    """Synchronous entry point: run one job on a fresh event loop."""
    return asyncio.run(run(config or AssessmentConfig(), **kwargs))


def _finalise(context: AssessmentContext) -> None:
    """Record end time and emit a summary log line."""
    context.end_time = utcnow()
    elapsed = (context.end_time - context.start_time).total_seconds() if context.start_time else 0.0
    logger.info(
        "Pipeline: job %s finished in %.1fs | phases=%d | warnings=%d | errors=%d",
        context.job_id,
        elapsed,
        len(context.phase_log),
        len(context.warnings),
        len(context.errors),
    )
    for err in context.errors:
        logger.error("Pipeline error: %s", err)
