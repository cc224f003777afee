#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document Loader - text extraction from uploaded bytes and chapter files.

Supports PDF (PyPDF2), plain text and markdown. Anything that yields fewer
than ``MIN_EXTRACTED_CHARS`` characters is an ``IngestionError``.
"""

import io
import logging
import os
from pathlib import Path
from typing import Optional, Union

from PyPDF2 import PdfReader

from ...domain.knowledge.catalog import CatalogChapter
from ...domain.knowledge.errors import IngestionError

logger = logging.getLogger(__name__)

MIN_EXTRACTED_CHARS = 50
SEARCH_SUFFIXES = (".txt", ".md", ".pdf")
_FALLBACK_ENCODINGS = ("cp1252", "latin-1")


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        for encoding in _FALLBACK_ENCODINGS:
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
    raise IngestionError("Unable to decode text document")


def _read_pdf(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        logger.error(f"Failed to read PDF: {e}")
        raise IngestionError(f"Unreadable PDF document: {e}", e)
    return "\n".join(pages)


def extract_text(data: bytes, filename: str = "") -> str:
    """
    Extract text from document bytes; the filename suffix picks the reader.

    Raises:
        IngestionError: unreadable document or not enough text
    """
    is_pdf = filename.lower().endswith(".pdf") or data[:5] == b"%PDF-"
    text = _read_pdf(data) if is_pdf else _decode_text(data)
    text = text.strip()
    if len(text) < MIN_EXTRACTED_CHARS:
        raise IngestionError(
            f"Document {filename or '<bytes>'} has insufficient content ({len(text)} chars)"
        )
    return text


def read_document(path: Union[str, Path]) -> str:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise IngestionError(f"Cannot read {path}: {e}", e)
    return extract_text(data, path.name)


def find_chapter_file(texts_dir: Optional[str], chapter: CatalogChapter) -> Optional[Path]:
    """Locate ``<stem>.txt``/``.md``/``.pdf`` for a catalog chapter."""
    if not texts_dir or not os.path.isdir(texts_dir):
        return None
    for suffix in SEARCH_SUFFIXES:
        candidate = Path(texts_dir) / f"{chapter.stem}{suffix}"
        if candidate.is_file():
            return candidate
    return None
