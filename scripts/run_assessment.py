#!/usr/bin/env python3
"""greenaudit CLI: assess a document's environmental claims.

Usage:
    python scripts/run_assessment.py --input report.txt
    python scripts/run_assessment.py --input report.txt --llm-backend anthropic
    python scripts/run_assessment.py --input report.txt --criteria overrides.yaml --user-id u42

The input is plain text. Form-feed characters (as written by ``pdftotext``)
are treated as page breaks so findings can cite page numbers.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import (  # noqa: E402
    ANTHROPIC_MODEL,
    DEFAULT_LOG_LEVEL,
    MAX_CONCURRENCY,
    MAX_RETRIES,
    OLLAMA_HOST,
    OLLAMA_MODEL,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    OUTPUT_ROOT,
)
from config.settings import AssessmentConfig  # noqa: E402
from greenaudit.clients.llm_client import SUPPORTED_BACKENDS  # noqa: E402


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for a single assessment job."""
    parser = argparse.ArgumentParser(
        prog="run_assessment",
        description="greenaudit: multi-prompt greenwashing compliance assessment",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Input ───────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--input", type=str, required=True, help="Path to the document text file"
    )
    parser.add_argument(
        "--job-id", type=str, default=None, help="Job identifier (generated when omitted)"
    )
    parser.add_argument(
        "--visual-findings",
        type=str,
        default=None,
        help="JSON file of findings from a vision pass (description, page, claimsIdentified)",
    )

    # ── Criteria ────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--criteria",
        type=str,
        default=None,
        help="JSON/YAML file of per-criterion prompt and weight overrides",
    )
    parser.add_argument(
        "--user-id", type=str, default=None, help="Apply this user's criteria overrides"
    )

    # ── LLM backend ─────────────────────────────────────────────────────────────
    parser.add_argument(
        "--llm-backend",
        type=str,
        default=None,
        choices=list(SUPPORTED_BACKENDS),
        help="LLM backend (defaults to LLM_BACKEND from the environment)",
    )
    parser.add_argument("--anthropic-model", type=str, default=ANTHROPIC_MODEL)
    parser.add_argument("--ollama-model", type=str, default=OLLAMA_MODEL)
    parser.add_argument("--ollama-host", type=str, default=OLLAMA_HOST)
    parser.add_argument("--openai-model", type=str, default=OPENAI_MODEL)
    parser.add_argument("--openai-base-url", type=str, default=OPENAI_BASE_URL)

    # ── Concurrency and retry ───────────────────────────────────────────────────
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=MAX_CONCURRENCY,
        help="Maximum simultaneous oracle calls",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=MAX_RETRIES,
        help="Retries after the first attempt for each oracle call",
    )

    # ── Output and logging ──────────────────────────────────────────────────────
    parser.add_argument(
        "--output-root",
        type=str,
        default=OUTPUT_ROOT,
        help="Root directory for job.json and report.json",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity level",
    )
    parser.add_argument(
        "--log-file", type=str, default=None, help="Also write logs to this file"
    )

    return parser


def args_to_config(args: argparse.Namespace) -> AssessmentConfig:
    """Convert parsed CLI arguments to an AssessmentConfig."""
    config = AssessmentConfig(
        anthropic_model=args.anthropic_model,
        ollama_model=args.ollama_model,
        ollama_host=args.ollama_host,
        openai_model=args.openai_model,
        openai_base_url=args.openai_base_url,
        max_concurrency=args.max_concurrency,
        max_retries=args.max_retries,
        criteria_path=args.criteria,
        user_id=args.user_id,
        output_root=args.output_root,
        log_level=args.log_level,
    )
    if args.llm_backend:
        config.llm_backend = args.llm_backend
    return config


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint: parse arguments, build config, run one job."""
    args = build_arg_parser().parse_args(argv)

    from greenaudit.io.document import split_pages
    from greenaudit.io.job_store import JsonJobStore
    from greenaudit.io.persistence import load_structured
    from greenaudit.pipeline import make_job_id, run_pipeline
    from greenaudit.utils.logging_utils import configure_logging

    configure_logging(log_level=args.log_level, log_file=args.log_file)
    logger = logging.getLogger("greenaudit.cli")

    input_path = Path(args.input)
    if not input_path.is_file():
        logger.error("Input file not found: %s", input_path)
        sys.exit(2)

    config = args_to_config(args)
    pages = split_pages(input_path.read_text(encoding="utf-8", errors="replace"))

    visual_findings = []
    if args.visual_findings:
        loaded = load_structured(args.visual_findings)
        if isinstance(loaded, list):
            visual_findings = loaded
        else:
            logger.warning("Ignoring visual findings file %s: expected a JSON array",
                           args.visual_findings)

    job_id = args.job_id or make_job_id(input_path.stem)
    store = JsonJobStore(config.output_root)
    logger.info("greenaudit starting: job %s | backend=%s | %d pages",
                job_id, config.llm_backend, len(pages))

    try:
        context = run_pipeline(
            config,
            pages=pages,
            job_id=job_id,
            job_store=store,
            visual_findings=visual_findings,
        )
    except KeyboardInterrupt:
        logger.info("Assessment interrupted by user")
        sys.exit(130)
    except Exception as exc:
        logger.exception("Assessment failed with unhandled exception: %s", exc)
        sys.exit(1)

    report = context.report
    logger.info(
        "Assessment complete. Score %d/100 (%s). Report: %s",
        report.overall_score,
        report.risk_level,
        store.job_dir(job_id) / JsonJobStore.REPORT_FILE,
    )


if __name__ == "__main__":
    main()
