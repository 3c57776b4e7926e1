"""Pipeline orchestration data models for greenaudit.

Defines AssessmentContext (shared state object) and PhaseRecord (per-phase
timing log).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Optional

from config.settings import AssessmentConfig
from greenaudit.models.assessment import AssessmentBatchResult, CriterionConfig
from greenaudit.models.claims import ClaimExtractionResult
from greenaudit.models.report import AggregatedReport

# (percent_complete, step_label)
ProgressCallback = Callable[[int, str], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PhaseRecord:
    """Timing and status record for a single pipeline phase."""

    phase_name: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str = "OK"

    @property
    def elapsed_seconds(self) -> float:
        """Compute elapsed time in seconds."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()


@dataclass
class AssessmentContext:
    """Shared state object threaded through all assessment agents.

    Each agent reads the fields populated by earlier agents and returns its own
    result; the pipeline stores it on the context. The claim list and document
    context are treated as read-only once extraction has finished.
    """

    config: AssessmentConfig
    job_id: str
    output_dir: Optional[Path] = None

    # ── Inputs ─────────────────────────────────────────────────────────────────
    document_text: str = ""
    document_context: str = ""
    criteria: List[CriterionConfig] = field(default_factory=list)
    # Findings from an external vision pass (dicts with description/page/claimsIdentified)
    visual_findings: List[Any] = field(default_factory=list)
    progress_callback: Optional[ProgressCallback] = None

    # ── Agent results (populated progressively) ────────────────────────────────
    extraction_result: Optional[ClaimExtractionResult] = None
    assessment_result: Optional[AssessmentBatchResult] = None
    report: Optional[AggregatedReport] = None

    # ── Pipeline metadata ──────────────────────────────────────────────────────
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    phase_log: List[PhaseRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def log_phase_start(self, phase_name: str) -> PhaseRecord:
        """Record the start of a pipeline phase."""
        record = PhaseRecord(phase_name=phase_name, start_time=utcnow())
        self.phase_log.append(record)
        return record

    def log_phase_end(self, record: PhaseRecord, status: str = "OK") -> None:
        """Record the end of a pipeline phase."""
        record.end_time = utcnow()
        record.status = status

    def report_progress(self, percent: int, step: str) -> None:
        """Forward a progress event to the caller-supplied callback, if any."""
        if self.progress_callback is not None:
            self.progress_callback(percent, step)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def add_error(self, error: str) -> None:
        self.errors.append(error)
