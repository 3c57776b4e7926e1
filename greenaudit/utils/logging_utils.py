"""Logging utilities for greenaudit.

Provides YAML-based logging configuration and a job-context logger adapter.
All loggers are namespaced under 'greenaudit'.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple

import yaml


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging from the YAML configuration file.

    Falls back to basicConfig if the YAML file is not found.

    Args:
        config_path: Path to logging.yaml (defaults to config/logging.yaml).
        log_level: Override log level (e.g., "DEBUG", "INFO", "WARNING").
        log_file: Optional file path; adds a FileHandler alongside the console.
    """
    if config_path is None:
        config_path = str(Path(__file__).parent.parent.parent / "config" / "logging.yaml")

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        if log_file:
            cfg.setdefault("handlers", {})["file"] = {
                "class": "logging.FileHandler",
                "formatter": "standard",
                "filename": log_file,
                "encoding": "utf-8",
            }
            for logger_cfg in cfg.get("loggers", {}).values():
                logger_cfg.setdefault("handlers", []).append("file")

        if log_level and "loggers" in cfg:
            for logger_cfg in cfg["loggers"].values():
                logger_cfg["level"] = log_level.upper()
            if "root" in cfg:
                cfg["root"]["level"] = log_level.upper()

        logging.config.dictConfig(cfg)
    else:
        logging.basicConfig(
            level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            filename=log_file,
        )


def get_logger(name: str) -> logging.Logger:
    """Get a namespaced logger under 'greenaudit'."""
    if name.startswith("greenaudit"):
        return logging.getLogger(name)
    return logging.getLogger(f"greenaudit.{name}")


class JobContextAdapter(logging.LoggerAdapter):
    """Logger adapter that prefixes every message with the job id.

    Usage:
        logger = get_job_logger("pipeline", job_id="20260118_101500_acme")
        logger.info("Extracting claims")
        # Output: ... greenaudit.pipeline: [20260118_101500_acme] Extracting claims
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        job_id = self.extra.get("job_id", "unknown")
        return f"[{job_id}] {msg}", kwargs


def get_job_logger(name: str, job_id: str) -> JobContextAdapter:
    """Get a job-context-aware logger adapter."""
    return JobContextAdapter(get_logger(name), {"job_id": job_id})
