"""Unit tests for greenaudit.io: persistence, job store and document assembly."""

from __future__ import annotations

from greenaudit.io.document import build_document_text, document_context, split_pages
from greenaudit.io.job_store import JobStatus, JsonJobStore
from greenaudit.io.persistence import ensure_output_dir, load_json, load_structured, save_json


# ── JSON / YAML persistence ──────────────────────────────────────────────────────

class TestSaveLoadJson:
    def test_round_trip_dict(self, tmp_path):
        path = tmp_path / "nested" / "data.json"
        save_json({"score": 80, "risk": "Low Risk"}, path)
        assert load_json(path) == {"score": 80, "risk": "Low Risk"}

    def test_serializes_dataclasses(self, tmp_path, sample_claims):
        path = tmp_path / "claims.json"
        save_json(sample_claims, path)
        data = load_json(path)
        assert data[0]["claim_id"] == "claim_1"
        assert data[2]["vagueness_flags"] == ["eco-friendly", "sustainable"]

    def test_no_temp_files_left(self, tmp_path):
        save_json({"a": 1}, tmp_path / "out.json")
        assert [p.name for p in tmp_path.iterdir()] == ["out.json"]

    def test_missing_file_returns_none(self, tmp_path):
        assert load_json(tmp_path / "missing.json") is None

    def test_corrupt_file_returns_none(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_json(path) is None

    def test_load_structured_yaml(self, tmp_path):
        path = tmp_path / "c.yml"
        path.write_text("- criterion_id: materiality\n  weight: 2\n", encoding="utf-8")
        assert load_structured(path) == [{"criterion_id": "materiality", "weight": 2}]

    def test_ensure_output_dir(self, tmp_path):
        job_dir = ensure_output_dir(tmp_path, "job_1")
        assert job_dir.is_dir()
        assert job_dir.name == "job_1"


# ── JsonJobStore ─────────────────────────────────────────────────────────────────

class TestJsonJobStore:
    def test_progress_updates_record(self, tmp_path):
        store = JsonJobStore(tmp_path)
        store.create("job_1", filename="report.pdf")
        store.update_progress("job_1", 45, "Extracted 4 claims")
        record = store.get("job_1")
        assert record["status"] == JobStatus.PROCESSING
        assert record["progress"] == 45
        assert record["step"] == "Extracted 4 claims"
        assert record["filename"] == "report.pdf"

    def test_progress_clamped(self, tmp_path):
        store = JsonJobStore(tmp_path)
        store.update_progress("job_1", 140, "Overflow")
        assert store.get("job_1")["progress"] == 100

    def test_complete_writes_report(self, tmp_path, make_result):
        from greenaudit.analysis.aggregator import aggregate_results

        store = JsonJobStore(tmp_path)
        report = aggregate_results([], [make_result(82, "a")])
        store.complete("job_1", report)

        record = store.get("job_1")
        assert record["status"] == JobStatus.COMPLETED
        assert record["progress"] == 100
        assert record["overall_score"] == 82
        assert store.load_report("job_1")["overall_score"] == 82

    def test_fail_records_error(self, tmp_path):
        store = JsonJobStore(tmp_path)
        store.update_progress("job_1", 25, "Extracting")
        store.fail("job_1", "boom")
        record = store.get("job_1")
        assert record["status"] == JobStatus.FAILED
        assert record["error"] == "boom"
        assert record["progress"] == 25

    def test_unknown_job(self, tmp_path):
        assert JsonJobStore(tmp_path).get("nope") is None


# ── Document assembly ────────────────────────────────────────────────────────────

class TestDocumentText:
    def test_page_blocks(self):
        text = build_document_text([(1, "Intro"), (2, "   "), (3, "Targets")])
        assert text == "[Page 1]\nIntro\n\n---\n\n[Page 3]\nTargets"

    def test_chunk_cap(self):
        pages = [(i, f"page {i}") for i in range(1, 151)]
        text = build_document_text(pages, max_chunks=100)
        assert text.count("[Page ") == 100
        assert "[Page 100]" in text
        assert "[Page 101]" not in text

    def test_empty_pages(self):
        assert build_document_text([]) == ""

    def test_split_pages_on_form_feed(self):
        assert split_pages("one\ftwo\fthree") == [(1, "one"), (2, "two"), (3, "three")]

    def test_document_context_truncates(self):
        assert document_context("abcdef", max_chars=4) == "abcd"
