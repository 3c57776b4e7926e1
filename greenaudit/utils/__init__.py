"""greenaudit utilities: concurrency gate, backoff executor, logging helpers."""

from greenaudit.utils.concurrency import ConcurrencyLimiter
from greenaudit.utils.logging_utils import configure_logging, get_job_logger, get_logger
from greenaudit.utils.retry import run_with_backoff

__all__ = [
    "ConcurrencyLimiter",
    "run_with_backoff",
    "configure_logging",
    "get_logger",
    "get_job_logger",
]
