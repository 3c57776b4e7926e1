"""Job status persistence.

JobStore is the interface the pipeline reports to; JsonJobStore keeps one
directory per job under an output root:

    <root>/<job_id>/job.json     status, progress, step label, timestamps
    <root>/<job_id>/report.json  AggregatedReport, written on completion
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from greenaudit.io.persistence import PathLike, ensure_output_dir, load_json, save_json
from greenaudit.models.pipeline import utcnow
from greenaudit.models.report import AggregatedReport

logger = logging.getLogger(__name__)


class JobStatus:
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobStore(ABC):
    """Receives progress and the final outcome of an assessment job."""

    @abstractmethod
    def update_progress(self, job_id: str, percent: int, step: str) -> None:
        """Record that ``job_id`` reached ``percent`` at ``step``."""

    @abstractmethod
    def complete(self, job_id: str, report: AggregatedReport) -> None:
        """Persist the final report and mark the job completed."""

    @abstractmethod
    def fail(self, job_id: str, error: str) -> None:
        """Mark the job failed with an error message."""


class JsonJobStore(JobStore):
    """File-backed JobStore writing atomically replaced JSON documents."""

    JOB_FILE = "job.json"
    REPORT_FILE = "report.json"

    def __init__(self, root: PathLike) -> None:
        self.root = Path(root)

    def job_dir(self, job_id: str) -> Path:
        return ensure_output_dir(self.root, job_id)

    def get(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Current job record, or None if the job is unknown."""
        return load_json(self.root / job_id / self.JOB_FILE)

    def load_report(self, job_id: str) -> Optional[Dict[str, Any]]:
        return load_json(self.root / job_id / self.REPORT_FILE)

    def _write(self, job_id: str, **fields: Any) -> Dict[str, Any]:
        record = self.get(job_id) or {
            "job_id": job_id,
            "status": JobStatus.PROCESSING,
            "progress": 0,
            "step": "",
            "created_at": utcnow().isoformat(),
        }
        record.update(fields)
        record["updated_at"] = utcnow().isoformat()
        save_json(record, self.job_dir(job_id) / self.JOB_FILE)
        return record

    def create(self, job_id: str, **metadata: Any) -> Dict[str, Any]:
        return self._write(job_id, status=JobStatus.PROCESSING, progress=0, step="Queued", **metadata)

    def update_progress(self, job_id: str, percent: int, step: str) -> None:
        percent = max(0, min(100, int(percent)))
        self._write(job_id, status=JobStatus.PROCESSING, progress=percent, step=step)
        logger.debug("Job %s: %d%% %s", job_id, percent, step)

    def complete(self, job_id: str, report: AggregatedReport) -> None:
        save_json(report.to_dict(), self.job_dir(job_id) / self.REPORT_FILE)
        self._write(
            job_id,
            status=JobStatus.COMPLETED,
            progress=100,
            step="Complete",
            overall_score=report.overall_score,
            risk_level=report.risk_level,
            error=None,
        )
        logger.info("Job %s completed (score=%d)", job_id, report.overall_score)

    def fail(self, job_id: str, error: str) -> None:
        self._write(job_id, status=JobStatus.FAILED, error=error)
        logger.error("Job %s failed: %s", job_id, error)
