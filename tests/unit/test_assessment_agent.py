"""Unit tests for greenaudit.agents.assessment_agent (parallel coordinator)."""

from __future__ import annotations

import asyncio
from typing import Any, Dict
from unittest.mock import AsyncMock, patch

from greenaudit.agents.assessment_agent import AssessmentAgent, assess_all_criteria
from greenaudit.analysis.criterion_assessor import assess_criterion as real_assess_criterion
from greenaudit.clients.llm_client import LLMParseError
from greenaudit.models.claims import ClaimExtractionResult
from greenaudit.utils.concurrency import ConcurrencyLimiter


def _run(criteria, claims, llm, limiter=None, **kwargs):
    return asyncio.run(
        assess_all_criteria(
            criteria,
            claims,
            "Document context",
            llm,
            limiter or ConcurrencyLimiter(10),
            **kwargs,
        )
    )


class TestAssessAllCriteria:
    def test_returns_one_result_per_criterion(
        self, default_criteria_list, sample_claims, mock_llm_client
    ):
        batch = _run(default_criteria_list, sample_claims, mock_llm_client, backoff_base=0.0)
        assert len(batch.results) == 18
        assert batch.succeeded + batch.failed == 18
        assert batch.failed == 0
        assert batch.status == "OK"
        assert {r.criterion_id for r in batch.results} == {
            c.criterion_id for c in default_criteria_list
        }

    def test_partial_failures_are_counted_not_dropped(
        self, default_criteria_list, sample_claims, mock_llm_client, criterion_payload
    ):
        failing = {"Literal Accuracy", "Concrete Plan", "Materiality of Claims"}

        async def _call_json(system: str, prompt: str, **kwargs: Any) -> Dict[str, Any]:
            if any(f"CRITERION: {name}" in prompt for name in failing):
                raise LLMParseError("malformed")
            return dict(criterion_payload)

        mock_llm_client.call_json = AsyncMock(side_effect=_call_json)
        batch = _run(default_criteria_list, sample_claims, mock_llm_client, backoff_base=0.0)

        assert len(batch.results) == 18
        assert batch.failed == 3
        assert batch.succeeded == 15
        assert batch.status == "PARTIAL"
        failed = [r for r in batch.results if r.is_fallback]
        assert {r.criterion_name for r in failed} == failing
        assert all(r.score == 50 for r in failed)

    def test_unexpected_exception_converted_to_fallback(
        self, make_criterion, sample_claims, mock_llm_client
    ):
        criteria = [make_criterion("ok_one"), make_criterion("broken"), make_criterion("ok_two")]

        async def _maybe_explode(criterion, *args, **kwargs):
            if criterion.criterion_id == "broken":
                raise KeyError("programming error")
            return await real_assess_criterion(criterion, *args, **kwargs)

        with patch(
            "greenaudit.agents.assessment_agent.assess_criterion", side_effect=_maybe_explode
        ):
            batch = _run(criteria, sample_claims, mock_llm_client)

        assert len(batch.results) == 3
        broken = next(r for r in batch.results if r.criterion_id == "broken")
        assert broken.is_fallback
        assert broken.score == 50
        assert batch.failed == 1
        assert batch.warnings

    def test_all_failed_status(self, make_criterion, sample_claims, mock_llm_client):
        mock_llm_client.call_json = AsyncMock(side_effect=LLMParseError("bad"))
        batch = _run(
            [make_criterion("a"), make_criterion("b")],
            sample_claims,
            mock_llm_client,
            max_retries=0,
        )
        assert batch.failed == 2
        assert batch.status == "FAILED"

    def test_zero_criteria(self, sample_claims, mock_llm_client):
        batch = _run([], sample_claims, mock_llm_client)
        assert batch.results == []
        assert batch.succeeded == 0 and batch.failed == 0
        mock_llm_client.call_json.assert_not_called()

    def test_zero_claims_gives_neutral_scores(self, default_criteria_list, mock_llm_client):
        batch = _run(default_criteria_list, [], mock_llm_client)
        assert len(batch.results) == 18
        assert all(r.score == 50 and r.status == "Needs Attention" for r in batch.results)
        mock_llm_client.call_json.assert_not_called()

    def test_progress_callback_per_settled_criterion(
        self, default_criteria_list, sample_claims, mock_llm_client
    ):
        events = []
        _run(
            default_criteria_list,
            sample_claims,
            mock_llm_client,
            progress_callback=lambda done, total: events.append((done, total)),
        )
        assert len(events) == 18
        assert events[-1] == (18, 18)
        assert [done for done, _ in events] == list(range(1, 19))

    def test_limiter_caps_in_flight_oracle_calls(
        self, default_criteria_list, sample_claims, mock_llm_client, criterion_payload
    ):
        state = {"in_flight": 0, "peak": 0}

        async def _slow_call(system: str, prompt: str, **kwargs: Any) -> Dict[str, Any]:
            state["in_flight"] += 1
            state["peak"] = max(state["peak"], state["in_flight"])
            await asyncio.sleep(0.005)
            state["in_flight"] -= 1
            return dict(criterion_payload)

        mock_llm_client.call_json = AsyncMock(side_effect=_slow_call)
        batch = _run(
            default_criteria_list, sample_claims, mock_llm_client, limiter=ConcurrencyLimiter(3)
        )
        assert len(batch.results) == 18
        assert state["peak"] <= 3
        assert state["peak"] > 1


class TestAssessmentAgent:
    def test_run_reports_progress_between_55_and_90(
        self, test_context, default_criteria_list, sample_claims, mock_llm_client
    ):
        events = []
        test_context.criteria = default_criteria_list
        test_context.extraction_result = ClaimExtractionResult(claims=sample_claims)
        test_context.progress_callback = lambda percent, step: events.append((percent, step))

        batch = asyncio.run(AssessmentAgent(mock_llm_client).run(test_context))

        assert len(batch.results) == 18
        percents = [p for p, _ in events]
        assert percents == sorted(percents)
        assert min(percents) >= 55
        assert percents[-1] == 90
        assert events[-1][1] == "Assessed 18/18 criteria"

    def test_run_without_extraction_result_uses_no_claims(
        self, test_context, default_criteria_list, mock_llm_client
    ):
        test_context.criteria = default_criteria_list[:3]
        batch = asyncio.run(AssessmentAgent(mock_llm_client).run(test_context))
        assert [r.score for r in batch.results] == [50, 50, 50]
