"""Unit tests for greenaudit.utils.logging_utils."""

from __future__ import annotations

import logging

import yaml

from greenaudit.utils.logging_utils import configure_logging, get_job_logger, get_logger


def test_get_logger_is_namespaced():
    assert get_logger("pipeline").name == "greenaudit.pipeline"
    assert get_logger("greenaudit.io").name == "greenaudit.io"


def test_job_logger_prefixes_job_id(caplog):
    job_logger = get_job_logger("pipeline", "20260118_101500_acme")
    with caplog.at_level(logging.INFO, logger="greenaudit.pipeline"):
        job_logger.info("Extracting claims")
    assert "[20260118_101500_acme] Extracting claims" in caplog.messages


def test_configure_logging_applies_level_and_file(tmp_path):
    config_path = tmp_path / "logging.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {"standard": {"format": "%(levelname)s %(message)s"}},
                "handlers": {},
                "loggers": {"greenaudit_test_cfg": {"level": "INFO", "propagate": True}},
            }
        ),
        encoding="utf-8",
    )
    log_file = tmp_path / "run.log"

    configure_logging(str(config_path), log_level="debug", log_file=str(log_file))
    configured = logging.getLogger("greenaudit_test_cfg")
    configured.debug("written to file")
    for handler in configured.handlers:
        handler.flush()

    assert configured.level == logging.DEBUG
    assert "written to file" in log_file.read_text(encoding="utf-8")
    for handler in list(configured.handlers):
        handler.close()
        configured.removeHandler(handler)
