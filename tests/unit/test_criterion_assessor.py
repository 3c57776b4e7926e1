"""Unit tests for greenaudit.analysis.criterion_assessor and prompt bounds."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from greenaudit.analysis.criterion_assessor import (
    FALLBACK_RECOMMENDATION,
    assess_criterion,
    parse_criterion_payload,
)
from greenaudit.clients.llm_client import (
    LLMConfigurationError,
    LLMEmptyResponseError,
    LLMParseError,
)
from greenaudit.models.assessment import ComplianceStatus, Severity
from greenaudit.models.claims import Claim
from greenaudit.utils.concurrency import ConcurrencyLimiter


def _assess(criterion, claims, llm, **kwargs):
    return asyncio.run(
        assess_criterion(criterion, claims, "Document context", llm, ConcurrencyLimiter(10), **kwargs)
    )


# ── Zero-claim branch ────────────────────────────────────────────────────────────

class TestZeroClaims:
    def test_every_default_criterion_is_neutral(self, default_criteria_list, mock_llm_client):
        for criterion in default_criteria_list:
            result = _assess(criterion, [], mock_llm_client)
            assert result.score == 50
            assert result.status == ComplianceStatus.NEEDS_ATTENTION
            assert result.error is None
            assert "No environmental claims" in result.rationale
            assert "Manual review of document recommended" in result.recommendations
        mock_llm_client.call_json.assert_not_called()


# ── Successful assessment ────────────────────────────────────────────────────────

class TestAssessCriterion:
    def test_parses_oracle_payload(self, make_criterion, sample_claims, mock_llm_client):
        criterion = make_criterion("avoid_vague_terms", "principle5_clear", weight=2.0)
        result = _assess(criterion, sample_claims, mock_llm_client)
        assert result.score == 62
        assert result.status == ComplianceStatus.NEEDS_ATTENTION
        assert result.weight == 2.0
        assert result.category_id == "principle5_clear"
        assert len(result.findings) == 2
        assert result.findings[0].severity == Severity.HIGH
        assert result.findings[1].severity == Severity.MEDIUM
        assert result.evidence[0].location == "Page 7"
        assert result.evidence[0].relevance == "Vague product claim"
        assert result.error is None

    def test_request_carries_assessment_budget(self, make_criterion, sample_claims, mock_llm_client):
        _assess(make_criterion(), sample_claims, mock_llm_client, timeout=30.0, max_tokens=2000)
        kwargs = mock_llm_client.call_json.await_args.kwargs
        assert kwargs["timeout"] == 30.0
        assert kwargs["max_tokens"] == 2000

    def test_prompt_caps_claims_and_context(self, make_criterion, mock_llm_client):
        claims = [Claim(claim_id=f"claim_{i}", text=f"Claim number {i}") for i in range(1, 51)]
        long_context = "x" * 10000
        asyncio.run(
            assess_criterion(
                make_criterion(),
                claims,
                long_context,
                mock_llm_client,
                ConcurrencyLimiter(1),
                max_prompt_claims=40,
                max_context_chars=2500,
            )
        )
        prompt = mock_llm_client.call_json.await_args.args[1]
        assert "CLAIMS (40 of 50)" in prompt
        assert '"claim_40"' in prompt
        assert '"claim_41"' not in prompt
        assert "x" * 2500 in prompt
        assert "x" * 2501 not in prompt

    def test_prompt_includes_rubric_and_catalog_guidance(
        self, default_criteria_list, sample_claims, mock_llm_client
    ):
        criterion = next(c for c in default_criteria_list if c.criterion_id == "interim_targets")
        _assess(criterion, sample_claims, mock_llm_client)
        prompt = mock_llm_client.call_json.await_args.args[1]
        assert "90-100" in prompt and "0-24" in prompt
        assert "EVALUATION STEPS" in prompt
        assert "RED FLAGS" in prompt
        assert "Principle 6: Substantiate Future Claims" in prompt


# ── Retry exhaustion ─────────────────────────────────────────────────────────────

class TestFallback:
    def test_exhausted_retries_give_neutral_fallback(
        self, make_criterion, sample_claims, mock_llm_client, recorded_sleep
    ):
        sleep, delays = recorded_sleep
        mock_llm_client.call_json = AsyncMock(side_effect=LLMEmptyResponseError("empty"))
        result = _assess(make_criterion(), sample_claims, mock_llm_client, sleep=sleep)
        assert result.score == 50
        assert result.status == ComplianceStatus.NEEDS_ATTENTION
        assert result.error == "empty"
        assert result.is_fallback
        assert result.recommendations == [FALLBACK_RECOMMENDATION]
        assert mock_llm_client.call_json.await_count == 3
        assert delays == [1.0, 2.0]

    def test_exception_without_message_still_sets_error(
        self, make_criterion, sample_claims, mock_llm_client, recorded_sleep
    ):
        sleep, _ = recorded_sleep
        mock_llm_client.call_json = AsyncMock(side_effect=asyncio.TimeoutError())
        result = _assess(make_criterion(), sample_claims, mock_llm_client, sleep=sleep)
        assert result.error
        assert result.score == 50

    def test_infinite_score_is_clamped_not_a_fallback(
        self, make_criterion, sample_claims, mock_llm_client
    ):
        mock_llm_client.call_json = AsyncMock(return_value={"score": float("inf")})
        result = _assess(make_criterion(), sample_claims, mock_llm_client)
        assert result.score == 100
        assert result.status == ComplianceStatus.COMPLIANT
        assert result.error is None

    def test_configuration_error_falls_back_without_retry(
        self, make_criterion, sample_claims, mock_llm_client, recorded_sleep
    ):
        sleep, delays = recorded_sleep
        mock_llm_client.call_json = AsyncMock(
            side_effect=LLMConfigurationError("OPENAI_API_KEY is required")
        )
        result = _assess(make_criterion(), sample_claims, mock_llm_client, sleep=sleep)
        assert result.is_fallback
        assert mock_llm_client.call_json.await_count == 1
        assert delays == []

    def test_recovers_within_retry_budget(
        self, make_criterion, sample_claims, mock_llm_client, criterion_payload, recorded_sleep
    ):
        sleep, delays = recorded_sleep
        mock_llm_client.call_json = AsyncMock(
            side_effect=[LLMParseError("bad"), LLMParseError("bad"), criterion_payload]
        )
        result = _assess(make_criterion(), sample_claims, mock_llm_client, sleep=sleep)
        assert result.score == 62
        assert result.error is None
        assert delays == [1.0, 2.0]


# ── parse_criterion_payload ──────────────────────────────────────────────────────

class TestParseCriterionPayload:
    def test_empty_payload_is_fully_defaulted(self, make_criterion):
        result = parse_criterion_payload(make_criterion(), {})
        assert result.score == 50
        assert result.status == ComplianceStatus.NEEDS_ATTENTION
        assert result.rationale == "Assessment completed"
        assert result.findings == []
        assert result.evidence == []
        assert result.recommendations == []
        assert result.error is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (150, 100),
            (-5, 0),
            ("82.5", 83),
            (74.4, 74),
            ("n/a", 50),
            (None, 50),
            (True, 50),
            (float("inf"), 100),
            ("-inf", 0),
            (10 ** 400, 100),
        ],
    )
    def test_score_coerced_into_range(self, make_criterion, raw, expected):
        assert parse_criterion_payload(make_criterion(), {"score": raw}).score == expected

    def test_invalid_status_derived_from_score(self, make_criterion):
        result = parse_criterion_payload(make_criterion(), {"score": 80, "status": "Great"})
        assert result.status == ComplianceStatus.COMPLIANT

    def test_valid_oracle_status_kept(self, make_criterion):
        result = parse_criterion_payload(make_criterion(), {"score": 80, "status": "High Risk"})
        assert result.status == ComplianceStatus.HIGH_RISK
        assert result.score == 80

    def test_unknown_severity_becomes_medium(self, make_criterion):
        payload = {"findings": [{"claimId": "c", "issue": "x", "severity": "catastrophic"}]}
        result = parse_criterion_payload(make_criterion(), payload)
        assert result.findings[0].severity == Severity.MEDIUM

    def test_malformed_lists_ignored(self, make_criterion):
        payload = {
            "findings": "none",
            "evidenceUsed": [{"quote": ""}, "Plain quote", 7],
            "recommendations": ["Fix it", "", None],
        }
        result = parse_criterion_payload(make_criterion(), payload)
        assert result.findings == []
        assert [e.quote for e in result.evidence] == ["Plain quote"]
        assert result.recommendations == ["Fix it"]
