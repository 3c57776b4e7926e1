"""greenaudit configuration package."""

from config.defaults import (
    ANTHROPIC_MODEL,
    COMPLIANT_THRESHOLD,
    LLM_BACKEND,
    MAX_CONCURRENCY,
    MAX_CRITICAL_ISSUES,
    MAX_RETRIES,
    NEEDS_ATTENTION_THRESHOLD,
    NEUTRAL_SCORE,
    OLLAMA_MODEL,
    OPENAI_MODEL,
)
from config.settings import AssessmentConfig

__all__ = [
    "AssessmentConfig",
    "COMPLIANT_THRESHOLD",
    "NEEDS_ATTENTION_THRESHOLD",
    "NEUTRAL_SCORE",
    "MAX_CONCURRENCY",
    "MAX_RETRIES",
    "MAX_CRITICAL_ISSUES",
    "LLM_BACKEND",
    "ANTHROPIC_MODEL",
    "OLLAMA_MODEL",
    "OPENAI_MODEL",
]
