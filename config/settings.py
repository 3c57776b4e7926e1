"""greenaudit: AssessmentConfig and environment-based configuration loading.

All runtime configuration flows through AssessmentConfig. No module-level globals,
no hard-coded values. API keys come exclusively from environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from config.defaults import (
    ANTHROPIC_MODEL,
    ASSESSMENT_MAX_TOKENS,
    ASSESSMENT_TIMEOUT_SECONDS,
    BACKOFF_BASE_SECONDS,
    DEFAULT_LOG_LEVEL,
    DOCUMENT_CONTEXT_CHARS,
    EXTRACTION_MAX_TOKENS,
    EXTRACTION_TIMEOUT_SECONDS,
    LLM_BACKEND,
    LLM_MIN_MAX_TOKENS,
    LLM_TEMPERATURE,
    MAX_CONCURRENCY,
    MAX_CONTEXT_CHARS,
    MAX_DOCUMENT_CHUNKS,
    MAX_PROMPT_CLAIMS,
    MAX_RETRIES,
    OLLAMA_API_KEY,
    OLLAMA_HOST,
    OLLAMA_MODEL,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    OUTPUT_ROOT,
    VISION_FALLBACK_MIN_CHARS,
)

# Load .env file if present; silently skip if missing
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class AssessmentConfig:
    """Single configuration object threaded through all assessment agents.

    All tuneable budgets, API keys, model names, and file paths live here.
    Never use module-level globals or hard-coded values in agent code.
    """

    # ── LLM backend ───────────────────────────────────────────────────────────
    llm_backend: str = field(default_factory=lambda: os.getenv("LLM_BACKEND", LLM_BACKEND))
    anthropic_model: str = field(
        default_factory=lambda: os.getenv("ANTHROPIC_MODEL", ANTHROPIC_MODEL)
    )
    ollama_model: str = field(default_factory=lambda: os.getenv("OLLAMA_MODEL", OLLAMA_MODEL))
    ollama_host: str = field(default_factory=lambda: os.getenv("OLLAMA_HOST", OLLAMA_HOST))
    ollama_api_key: str = field(
        default_factory=lambda: os.getenv("OLLAMA_API_KEY", OLLAMA_API_KEY)
    )
    openai_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", OPENAI_MODEL))
    openai_base_url: str = field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL", OPENAI_BASE_URL)
    )
    llm_temperature: float = LLM_TEMPERATURE
    llm_min_max_tokens: int = LLM_MIN_MAX_TOKENS

    # ── API credentials (from environment only) ────────────────────────────────
    anthropic_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY")
    )
    openai_api_key: Optional[str] = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))

    # ── Concurrency and retry ──────────────────────────────────────────────────
    max_concurrency: int = MAX_CONCURRENCY
    max_retries: int = MAX_RETRIES
    backoff_base_seconds: float = BACKOFF_BASE_SECONDS

    # ── Claim extraction ───────────────────────────────────────────────────────
    extraction_timeout_seconds: float = EXTRACTION_TIMEOUT_SECONDS
    extraction_max_tokens: int = EXTRACTION_MAX_TOKENS

    # ── Criterion assessment ───────────────────────────────────────────────────
    assessment_timeout_seconds: float = ASSESSMENT_TIMEOUT_SECONDS
    assessment_max_tokens: int = ASSESSMENT_MAX_TOKENS
    max_prompt_claims: int = MAX_PROMPT_CLAIMS
    max_context_chars: int = MAX_CONTEXT_CHARS

    # ── Document input ─────────────────────────────────────────────────────────
    document_context_chars: int = DOCUMENT_CONTEXT_CHARS
    max_document_chunks: int = MAX_DOCUMENT_CHUNKS
    vision_fallback_min_chars: int = VISION_FALLBACK_MIN_CHARS

    # ── Criteria ───────────────────────────────────────────────────────────────
    # Optional JSON/YAML file of per-criterion prompt and weight overrides
    criteria_path: Optional[str] = field(default_factory=lambda: os.getenv("CRITERIA_PATH"))
    user_id: Optional[str] = None

    # ── Output and logging ─────────────────────────────────────────────────────
    output_root: str = field(default_factory=lambda: os.getenv("OUTPUT_ROOT", OUTPUT_ROOT))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))

    def __post_init__(self) -> None:
        self.llm_backend = self.llm_backend.lower()
        if self.max_concurrency < 1:
            logger.warning(
                "max_concurrency=%d is invalid; using 1", self.max_concurrency
            )
            self.max_concurrency = 1
        if self.max_retries < 0:
            logger.warning("max_retries=%d is invalid; using 0", self.max_retries)
            self.max_retries = 0
