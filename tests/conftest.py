"""Shared pytest fixtures for greenaudit tests.

- Fixture data lives in tests/fixtures/ as static JSON files
- mock_llm_client answers oracle calls from that data without real API calls
- Backoff sleeps are recorded instead of slept
- No real external HTTP calls are made in any test
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

_FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ── Raw fixture data loaders ─────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def extraction_payload() -> Dict[str, Any]:
    """Oracle claim-extraction response (4 claims) loaded from fixture JSON."""
    with open(_FIXTURES_DIR / "sample_extraction_response.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def criterion_payload() -> Dict[str, Any]:
    """Oracle criterion-assessment response (score 62, one High finding)."""
    with open(_FIXTURES_DIR / "sample_criterion_response.json", encoding="utf-8") as f:
        return json.load(f)


# ── Model object fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def sample_claims():
    """Four claims covering factual, commitment, vague and comparison claims."""
    from greenaudit.models.claims import Claim

    return [
        Claim(
            claim_id="claim_1",
            text="We reduced Scope 1 and 2 emissions by 42% against our 2019 baseline.",
            page=4,
            section="Climate Performance",
            category="carbon_emissions",
        ),
        Claim(
            claim_id="claim_2",
            text="We will be net-zero across our operations by 2040.",
            page=5,
            category="net_zero",
            claim_type="commitment",
        ),
        Claim(
            claim_id="claim_3",
            text="Our packaging is eco-friendly and sustainable.",
            page=7,
            vagueness_flags=["eco-friendly", "sustainable"],
        ),
        Claim(
            claim_id="claim_4",
            text="Our new plant uses 30% less water than the industry average.",
            page=9,
            category="water_conservation",
            claim_type="comparison",
        ),
    ]


@pytest.fixture
def default_criteria_list():
    """The built-in 6 × 3 criteria catalog."""
    from greenaudit.analysis.criteria_catalog import default_criteria

    return default_criteria()


@pytest.fixture
def make_criterion():
    """Factory for a single CriterionConfig."""
    from greenaudit.models.assessment import CriterionConfig

    def _make(
        criterion_id: str = "literal_accuracy",
        category_id: str = "principle1_truthful",
        weight: float = 1.0,
        name: str = "",
        category_name: str = "",
    ) -> CriterionConfig:
        return CriterionConfig(
            criterion_id=criterion_id,
            name=name or criterion_id.replace("_", " ").title(),
            category_id=category_id,
            category_name=category_name or category_id,
            description=f"Assess {criterion_id}.",
            weight=weight,
        )

    return _make


@pytest.fixture
def make_result():
    """Factory for a CriterionResult with sensible defaults."""
    from greenaudit.analysis.scoring import status_for_score
    from greenaudit.models.assessment import CriterionResult

    def _make(
        score: int,
        criterion_id: str = "c1",
        category_id: str = "p1",
        weight: Any = 1.0,
        findings: Any = None,
        evidence: Any = None,
        recommendations: Any = None,
        error: Any = None,
        rationale: str = "Rationale.",
        category_name: str = "",
    ) -> CriterionResult:
        return CriterionResult(
            criterion_id=criterion_id,
            criterion_name=criterion_id.replace("_", " ").title(),
            category_id=category_id,
            category_name=category_name or f"Category {category_id}",
            score=score,
            status=status_for_score(score),
            rationale=rationale,
            findings=list(findings or []),
            evidence=list(evidence or []),
            recommendations=list(recommendations or []),
            weight=weight,
            error=error,
        )

    return _make


# ── Mock LLM client ──────────────────────────────────────────────────────────────

@pytest.fixture
def mock_llm_client(extraction_payload, criterion_payload):
    """Mock LLMClient whose call_json answers from fixture data.

    Extraction requests get the extraction fixture; every criterion request
    gets a copy of the criterion fixture.
    """
    from greenaudit.analysis.prompts import EXTRACTION_SYSTEM_PROMPT
    from greenaudit.clients.llm_client import LLMClient

    client = MagicMock(spec=LLMClient)
    client.backend = "mock"

    async def _call_json(system: str, prompt: str, **kwargs: Any) -> Dict[str, Any]:
        if system == EXTRACTION_SYSTEM_PROMPT:
            return json.loads(json.dumps(extraction_payload))
        return json.loads(json.dumps(criterion_payload))

    client.call_json = AsyncMock(side_effect=_call_json)
    client.call = AsyncMock(return_value='{"status": "ok"}')
    return client


@pytest.fixture
def recorded_sleep():
    """Awaitable sleep replacement that records requested delays.

    Returns:
        (sleep_fn, delays): pass sleep_fn as ``sleep=``; inspect delays.
    """
    delays: List[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    return _sleep, delays


# ── Config / context fixtures ────────────────────────────────────────────────────

@pytest.fixture
def test_config(tmp_path):
    """AssessmentConfig with zero backoff and a temp output root."""
    from config.settings import AssessmentConfig

    return AssessmentConfig(
        llm_backend="ollama",
        backoff_base_seconds=0.0,
        criteria_path=None,
        output_root=str(tmp_path / "jobs"),
        log_level="WARNING",
    )


@pytest.fixture
def test_context(test_config, tmp_path):
    """AssessmentContext wired to a temp output directory for isolation."""
    from greenaudit.models.pipeline import AssessmentContext

    return AssessmentContext(
        config=test_config,
        job_id="20260118_120000_test",
        output_dir=tmp_path / "outputs",
    )
