"""Multi-backend async LLM client for greenaudit.

Provides a backend-agnostic ``call()`` / ``call_json()`` interface that
dispatches to the Anthropic API, Ollama, or any OpenAI-compatible chat
completions endpoint depending on AssessmentConfig.llm_backend.

All agent code must go through LLMClient; never import anthropic or ollama directly.

Design rules:
- Always request JSON-only output; apply defensive parsing (strip fences, find boundaries).
- A call makes exactly one attempt and raises on failure; retry policy belongs
  to the backoff executor wrapped around the call.
- Every call carries a request timeout.
- min_max_tokens: always set max_tokens >= 256 for structured extraction calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Optional

import httpx

from config.defaults import LLM_MIN_MAX_TOKENS

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("anthropic", "ollama", "openai")


class LLMError(Exception):
    """Base class for oracle failures that are safe to retry."""


class LLMEmptyResponseError(LLMError):
    """The backend returned no text."""


class LLMParseError(LLMError):
    """The backend returned text that is not the expected JSON shape."""


class LLMConfigurationError(ValueError):
    """The client is misconfigured (missing key, package or backend). Never retried."""


# Failures that another attempt cannot fix
NON_RETRYABLE_ERRORS = (LLMConfigurationError, ImportError)


def _safe_parse_llm_json(text: str, expect: str = "object") -> Optional[Any]:
    """Defensively parse LLM JSON output.

    Strips markdown code fences, then searches for the outermost JSON object
    or array boundaries and parses only that portion. The expected container
    type is tried first so that an object holding an array is not mistaken
    for the inner array.

    Args:
        text: Raw LLM output string.
        expect: "object" or "array"; which boundary pair to try first.

    Returns:
        Parsed Python object (dict or list), or None on failure.
    """
    if not text:
        return None

    # Strip markdown code fences
    text = re.sub(r"```(?:json)?\s*", "", text).strip().rstrip("`").strip()

    boundaries = [("{", "}"), ("[", "]")]
    if expect == "array":
        boundaries.reverse()

    for start_char, end_char in boundaries:
        s = text.find(start_char)
        e = text.rfind(end_char)
        if s != -1 and e > s:
            try:
                return json.loads(text[s : e + 1])
            except json.JSONDecodeError:
                pass

    return None


class LLMClient:
    """Backend-agnostic async LLM client.

    Args:
        backend: LLM backend name ("anthropic", "ollama", or "openai").
        anthropic_model: Anthropic model ID.
        ollama_model: Ollama model name.
        ollama_host: Ollama server URL.
        ollama_api_key: Ollama Cloud API key for Bearer token auth. Leave
            empty for local Ollama instances that do not require authentication.
        anthropic_api_key: Anthropic API key (from environment).
        openai_model: Model name for the OpenAI-compatible backend.
        openai_base_url: Base URL of the OpenAI-compatible API.
        openai_api_key: API key for the OpenAI-compatible backend.
        min_max_tokens: Floor applied to every max_tokens request.
    """

    def __init__(
        self,
        backend: str = "ollama",
        anthropic_model: str = "claude-sonnet-4-6",
        ollama_model: str = "gemma3:27b",
        ollama_host: str = "http://localhost:11434",
        ollama_api_key: str = "",
        anthropic_api_key: Optional[str] = None,
        openai_model: str = "gpt-4.1-mini",
        openai_base_url: str = "https://api.openai.com/v1",
        openai_api_key: Optional[str] = None,
        min_max_tokens: int = LLM_MIN_MAX_TOKENS,
    ) -> None:
        self.backend = backend.lower()
        if self.backend not in SUPPORTED_BACKENDS:
            raise LLMConfigurationError(
                f"Unknown LLM backend: {backend}. Available: {', '.join(SUPPORTED_BACKENDS)}"
            )
        self.anthropic_model = anthropic_model
        self.ollama_model = ollama_model
        self.ollama_host = ollama_host
        self.ollama_api_key = ollama_api_key
        self.anthropic_api_key = anthropic_api_key
        self.openai_model = openai_model
        self.openai_base_url = openai_base_url.rstrip("/")
        self.openai_api_key = openai_api_key
        self.min_max_tokens = min_max_tokens
        self._anthropic_client: Optional[Any] = None
        self._ollama_client: Optional[Any] = None

    @classmethod
    def from_config(cls, config: Any) -> "LLMClient":
        """Build a client from an AssessmentConfig."""
        return cls(
            backend=config.llm_backend,
            anthropic_model=config.anthropic_model,
            ollama_model=config.ollama_model,
            ollama_host=config.ollama_host,
            ollama_api_key=config.ollama_api_key,
            anthropic_api_key=config.anthropic_api_key,
            openai_model=config.openai_model,
            openai_base_url=config.openai_base_url,
            openai_api_key=config.openai_api_key,
            min_max_tokens=config.llm_min_max_tokens,
        )

    @property
    def model_name(self) -> str:
        return {
            "anthropic": self.anthropic_model,
            "ollama": self.ollama_model,
            "openai": self.openai_model,
        }[self.backend]

    def _get_anthropic_client(self) -> Any:
        """Lazily initialize and return the async Anthropic client."""
        if self._anthropic_client is None:
            try:
                import anthropic  # type: ignore[import]

                self._anthropic_client = anthropic.AsyncAnthropic(
                    api_key=self.anthropic_api_key
                )
            except ImportError:
                raise ImportError(
                    "anthropic package is required for the Anthropic backend. "
                    "Install with: pip install anthropic"
                )
        return self._anthropic_client

    def _get_ollama_client(self) -> Any:
        """Lazily initialize and return the async Ollama client.

        When ollama_api_key is set, passes an Authorization: Bearer header
        for Ollama Cloud authentication.
        """
        if self._ollama_client is None:
            try:
                import ollama  # type: ignore[import]

                kwargs: dict = {"host": self.ollama_host}
                if self.ollama_api_key:
                    kwargs["headers"] = {"Authorization": f"Bearer {self.ollama_api_key}"}
                self._ollama_client = ollama.AsyncClient(**kwargs)
            except ImportError:
                raise ImportError(
                    "ollama package is required for the Ollama backend. "
                    "Install with: pip install ollama"
                )
        return self._ollama_client

    async def _call_anthropic(
        self, system: str, prompt: str, max_tokens: int, temperature: float
    ) -> str:
        """Execute a call against the Anthropic API."""
        client = self._get_anthropic_client()
        response = await client.messages.create(
            model=self.anthropic_model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        if response.content and len(response.content) > 0:
            return response.content[0].text or ""
        return ""

    async def _call_ollama(
        self, system: str, prompt: str, max_tokens: int, temperature: float
    ) -> str:
        """Execute a call against the Ollama API in JSON mode."""
        client = self._get_ollama_client()
        response = await client.chat(
            model=self.ollama_model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            format="json",
            options={
                "num_predict": max_tokens,
                "temperature": temperature,
            },
        )
        if response and hasattr(response, "message") and response.message:
            return response.message.content or ""
        return ""

    async def _call_openai(
        self,
        system: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
        timeout: Optional[float],
    ) -> str:
        """Execute a call against an OpenAI-compatible chat completions endpoint."""
        if not self.openai_api_key:
            raise LLMConfigurationError("OPENAI_API_KEY is required for the openai backend.")

        payload = {
            "model": self.openai_model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Authorization": f"Bearer {self.openai_api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(
                f"{self.openai_base_url}/chat/completions",
                json=payload,
                headers=headers,
            )
            response.raise_for_status()
            data = response.json()

        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""

    async def call(
        self,
        system: str,
        prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.1,
        timeout: Optional[float] = None,
    ) -> str:
        """Execute a single LLM call.

        Args:
            system: System prompt string.
            prompt: User message/prompt string.
            max_tokens: Maximum tokens to generate (minimum: min_max_tokens).
            temperature: Sampling temperature.
            timeout: Request timeout in seconds; None waits indefinitely.

        Returns:
            Non-empty response text.

        Raises:
            LLMEmptyResponseError: If the backend returned no text.
            asyncio.TimeoutError: If the request exceeded ``timeout``.
        """
        max_tokens = max(max_tokens, self.min_max_tokens)

        if self.backend == "anthropic":
            coro = self._call_anthropic(system, prompt, max_tokens, temperature)
        elif self.backend == "openai":
            coro = self._call_openai(system, prompt, max_tokens, temperature, timeout)
        else:
            coro = self._call_ollama(system, prompt, max_tokens, temperature)

        result = await asyncio.wait_for(coro, timeout=timeout)
        if not result or not result.strip():
            raise LLMEmptyResponseError(f"{self.backend} returned an empty response")
        return result

    async def call_json(
        self,
        system: str,
        prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.1,
        timeout: Optional[float] = None,
        expect: str = "object",
    ) -> Any:
        """Execute an LLM call and defensively parse the JSON response.

        Automatically appends a JSON-only instruction to the system prompt.

        Args:
            system: System prompt string.
            prompt: User message/prompt string.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            timeout: Request timeout in seconds.
            expect: "object" or "array"; the required top-level JSON type.

        Returns:
            Parsed dict (expect="object") or list (expect="array").

        Raises:
            LLMParseError: If no JSON of the expected type could be recovered.
        """
        json_system = (
            system.rstrip()
            + "\n\nReturn only valid JSON. Do not include any explanation or markdown fences."
        )
        raw = await self.call(json_system, prompt, max_tokens, temperature, timeout)
        parsed = _safe_parse_llm_json(raw, expect=expect)
        expected_type = list if expect == "array" else dict
        if not isinstance(parsed, expected_type):
            logger.warning(
                "LLM JSON parse failed. Raw response (first 200 chars): %.200s", raw
            )
            raise LLMParseError(f"Expected a JSON {expect} from {self.backend}")
        return parsed
