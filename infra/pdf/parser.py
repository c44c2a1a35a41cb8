from pathlib import Path

import pdfplumber


def parse_pdf_text(path: str) -> str:
    text_parts = []
    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            t = page.extract_text() or ""
            text_parts.append(t)
    return "\n".join(text_parts)


def parse_document_text(path: str) -> str:
    """PDFs go through pdfplumber; anything else is read as UTF-8 text."""
    if Path(path).suffix.lower() == ".pdf":
        return parse_pdf_text(path)
    return Path(path).read_text(encoding="utf-8", errors="replace")
