"""greenaudit oracle clients."""

from greenaudit.clients.llm_client import (
    LLMClient,
    LLMEmptyResponseError,
    LLMError,
    LLMParseError,
)

__all__ = [
    "LLMClient",
    "LLMError",
    "LLMEmptyResponseError",
    "LLMParseError",
]
