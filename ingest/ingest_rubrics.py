import argparse
import asyncio
import os
import re
import pdfplumber
from infra.rag.qdrant_client import (
    COLLECTION_RUBRICS,
    DOC_TYPE_CV_RUBRIC,
    DOC_TYPE_PROJECT_RUBRIC,
    ensure_collection,
    upsert_texts_with_ids,
)
from infra.rag.embeddings import EMBEDDING_DIM, embed_texts_gemini
from app.settings import settings

PDF_PATH = "data/scoring_rubric.pdf"

HEADER_CELLS = {"parameter", "description", "scoring guide"}

# section label prefix -> doc_type of the rows that follow it
SECTION_DOC_TYPES = {
    "cv match evaluation": DOC_TYPE_CV_RUBRIC,
    "project deliverable evaluation": DOC_TYPE_PROJECT_RUBRIC,
}
SECTION_LABELS = ("scoring rubric", "overall candidate evaluation") + tuple(SECTION_DOC_TYPES)


def is_header_row(row):
    cells = [(c or "").strip().lower() for c in row]
    return set(cells) >= HEADER_CELLS


def normalize_row(row):
    r = [(c or "").strip() for c in row] + ["", "", ""]
    return r[:3]  # Parameter, Description, Guide


def extract_weight(text: str):
    m = re.search(r"(\d+)\s*%", text or "")
    return int(m.group(1)) if m else None


def soft_chunk(text: str, max_chars=1800, overlap=200):
    out, i = [], 0
    while i < len(text):
        piece = text[i:i+max_chars].strip()
        if piece:
            out.append(piece)
        i += max(1, max_chars - overlap)
    return out


def group_rows_by_section(rows):
    """Split table rows into markdown blocks keyed by rubric doc_type."""
    sections = {DOC_TYPE_CV_RUBRIC: [], DOC_TYPE_PROJECT_RUBRIC: []}
    current = DOC_TYPE_CV_RUBRIC
    for r in rows:
        param_raw, desc, guide = r
        if not param_raw:
            continue
        weight = extract_weight(param_raw)
        param = re.sub(r"\(.*?weight.*?\)", "", param_raw, flags=re.I).strip()

        label = param.lower()
        if label.startswith(SECTION_LABELS):
            for prefix, doc_type in SECTION_DOC_TYPES.items():
                if label.startswith(prefix):
                    current = doc_type
            continue

        sections[current] += [
            f"### {param}" +
            (f" (Weight: {weight}%)" if weight is not None else ""),
            (f"**Description:** {desc}" if desc else ""),
            (f"**Guide:** {guide}" if guide else ""),
            ""
        ]
    return {doc_type: "\n".join(lines).strip() for doc_type, lines in sections.items() if lines}


async def main(pdf_path: str = PDF_PATH):
    if not settings.GEMINI_API_KEY:
        # without a key the embedder returns zero vectors, useless for cosine search
        print("GEMINI_API_KEY is not set; refusing to ingest rubrics")
        return False

    ensure_collection(COLLECTION_RUBRICS, vector_size=EMBEDDING_DIM)

    rows = []
    with pdfplumber.open(pdf_path) as pdf:
        for page in pdf.pages:
            for tbl in (page.extract_tables() or []):
                for r in tbl:
                    if not r:
                        continue
                    rows.append(normalize_row(r))

    clean_rows = [r for r in rows if any(r) and not is_header_row(r)]

    payloads = []
    for doc_type, markdown in group_rows_by_section(clean_rows).items():
        for i, blk in enumerate(soft_chunk(markdown)):
            payloads.append({
                "text": blk,
                "doc_type": doc_type,
                "source": os.path.basename(pdf_path),
                "chunk_index": i,
                "format": "markdown",
            })

    if not payloads:
        print(f"No rubric rows found in {pdf_path}")
        return False

    vecs = await embed_texts_gemini([p["text"] for p in payloads])
    upsert_texts_with_ids(COLLECTION_RUBRICS, vecs, payloads)
    print(f"Ingested {len(payloads)} rubric block(s) from {pdf_path}")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load a scoring rubric PDF into Qdrant")
    parser.add_argument("pdf", nargs="?", default=PDF_PATH)
    args = parser.parse_args()
    if not asyncio.run(main(args.pdf)):
        raise SystemExit(1)
