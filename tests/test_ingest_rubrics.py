from ingest.ingest_rubrics import extract_weight, group_rows_by_section, is_header_row, soft_chunk
from infra.rag.qdrant_client import DOC_TYPE_CV_RUBRIC, DOC_TYPE_PROJECT_RUBRIC


def test_rows_are_split_into_cv_and_project_sections():
    rows = [
        ["CV Match Evaluation", "", ""],
        ["Technical Skills Match (Weight: 40%)", "Alignment with job requirements", "1 = Irrelevant"],
        ["Project Deliverable Evaluation", "", ""],
        ["Correctness (Weight: 30%)", "Prompt design", "5 = Fully correct"],
    ]
    sections = group_rows_by_section(rows)
    assert "### Technical Skills Match (Weight: 40%)" in sections[DOC_TYPE_CV_RUBRIC]
    assert "Correctness" not in sections[DOC_TYPE_CV_RUBRIC]
    assert "**Guide:** 5 = Fully correct" in sections[DOC_TYPE_PROJECT_RUBRIC]


def test_helpers():
    assert extract_weight("Resilience (Weight: 20%)") == 20
    assert extract_weight("Resilience") is None
    assert is_header_row(["Parameter", "Description", "Scoring Guide"])
    chunks = soft_chunk("a" * 4000, max_chars=1800, overlap=200)
    assert len(chunks) == 3
    assert all(len(c) <= 1800 for c in chunks)


def test_ingest_refuses_without_api_key(monkeypatch):
    import asyncio

    import ingest.ingest_rubrics as ingest_rubrics

    def fail(*args, **kwargs):
        raise AssertionError("must not touch Qdrant without embeddings")

    monkeypatch.setattr(ingest_rubrics.settings, "GEMINI_API_KEY", None)
    monkeypatch.setattr(ingest_rubrics, "ensure_collection", fail)
    monkeypatch.setattr(ingest_rubrics, "upsert_texts_with_ids", fail)
    assert asyncio.run(ingest_rubrics.main("does-not-exist.pdf")) is False
