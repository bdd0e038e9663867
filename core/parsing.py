# core/parsing.py
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from docx import Document
from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"

# ============================================================
# FILE → TEXT
# ============================================================


def looks_like_pdf(b: bytes) -> bool:
    return b[:1024].lstrip().startswith(PDF_MAGIC)


def extract_text_from_pdf_bytes(b: bytes) -> str:
    try:
        reader = PdfReader(BytesIO(b))
        return "\n".join((p.extract_text() or "") for p in reader.pages)
    except Exception as e:
        logger.warning("PDF text extraction failed: %s", e)
        return ""


def extract_text_from_docx_bytes(b: bytes) -> str:
    try:
        doc = Document(BytesIO(b))
        return "\n".join(p.text for p in doc.paragraphs)
    except Exception as e:
        logger.warning("DOCX text extraction failed: %s", e)
        return ""


def extract_text_from_bytes(filename: str, b: bytes) -> str:
    suffix = Path(filename or "").suffix.lower()
    if suffix == ".pdf":
        return extract_text_from_pdf_bytes(b)
    if suffix == ".docx":
        return extract_text_from_docx_bytes(b)
    return b.decode("utf-8", errors="ignore")
