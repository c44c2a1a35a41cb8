import logging
from typing import List, Dict

from domain.errors import RubricLookupError
from domain.schemas import RubricContext
from infra.rag.embeddings import embed_texts_gemini
from infra.rag.qdrant_client import (
    COLLECTION_RUBRICS,
    DOC_TYPE_CV_RUBRIC,
    DOC_TYPE_PROJECT_RUBRIC,
    search_top_k_filtered,
    fetch_neighbors_by_index,
)

logger = logging.getLogger("evaluation_pipeline")

# only the head of each document is embedded as the query
QUERY_CHARS = 2000


def _stitch(hits: List[Dict], collection: str, radius: int = 1) -> List[str]:
    # For each hit, pull neighbor chunks and merge.
    stitched = []
    seen_keys = set()
    for h in hits:
        p = h["payload"]
        key = (p.get("source"), p.get("doc_type"), p.get("chunk_index"))
        if key in seen_keys:
            continue
        seen_keys.add(key)

        neighbors = fetch_neighbors_by_index(
            collection=collection,
            doc_type=p.get("doc_type"),
            source=p.get("source"),
            center_index=p.get("chunk_index", 0),
            radius=radius
        )
        text_block = "\n".join(n.get("text", "")
                               for n in neighbors if n.get("text"))
        if text_block and text_block not in stitched:
            stitched.append(text_block)
    return stitched


def _query_text(label: str, text: str) -> str:
    body = (text or "").strip()[:QUERY_CHARS]
    return f"{label} scoring rubric\n{body}" if body else f"{label} scoring rubric"


async def find_rubrics_for_cv_and_project(
    cv_text: str,
    report_text: str,
    k: int = 3,
    radius: int = 1,
) -> RubricContext:
    """Look up rubric passages relevant to the CV and to the project report."""
    try:
        cv_vec, project_vec = await embed_texts_gemini([
            _query_text("CV match evaluation", cv_text),
            _query_text("project deliverable evaluation", report_text),
        ])
        cv_hits = search_top_k_filtered(
            COLLECTION_RUBRICS, cv_vec, k=k, doc_types=[DOC_TYPE_CV_RUBRIC]
        )
        project_hits = search_top_k_filtered(
            COLLECTION_RUBRICS, project_vec, k=k, doc_types=[DOC_TYPE_PROJECT_RUBRIC]
        )
        cv_blocks = _stitch(cv_hits, COLLECTION_RUBRICS, radius=radius)
        project_blocks = _stitch(project_hits, COLLECTION_RUBRICS, radius=radius)
    except Exception as exc:
        raise RubricLookupError(f"Rubric lookup failed: {exc!r}") from exc

    return RubricContext(
        cv_rubrics_text="\n---\n".join(cv_blocks),
        project_rubrics_text="\n---\n".join(project_blocks),
    )
