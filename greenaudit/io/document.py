"""Document text assembly for the extraction phase.

Page text comes from an external extractor (pdftotext, OCR, ...). This module
only formats it: ``[Page N]`` headed blocks separated by ``---``.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from config.defaults import DOCUMENT_CONTEXT_CHARS, MAX_DOCUMENT_CHUNKS

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n---\n\n"

# (page_number, text)
PagedText = Iterable[Tuple[int, str]]


def build_document_text(pages: PagedText, max_chunks: int = MAX_DOCUMENT_CHUNKS) -> str:
    """Join page text into one extraction input.

    Blank pages are skipped. At most ``max_chunks`` non-blank pages are kept.

    Args:
        pages: (page_number, text) pairs in reading order.
        max_chunks: Maximum number of page blocks.

    Returns:
        Combined text, or "" when no page has content.
    """
    blocks: List[str] = []
    skipped = 0
    for page_number, text in pages:
        text = (text or "").strip()
        if not text:
            continue
        if len(blocks) >= max_chunks:
            skipped += 1
            continue
        blocks.append(f"[Page {page_number}]\n{text}")

    if skipped:
        logger.warning(
            "Document text capped at %d pages; %d further pages ignored", max_chunks, skipped
        )
    return PAGE_SEPARATOR.join(blocks)


def split_pages(raw_text: str) -> List[Tuple[int, str]]:
    """Split form-feed separated text (pdftotext output) into numbered pages."""
    return [(index, page) for index, page in enumerate(raw_text.split("\f"), start=1)]


def document_context(document_text: str, max_chars: int = DOCUMENT_CONTEXT_CHARS) -> str:
    """Leading excerpt shared with every criterion assessor."""
    return document_text[:max_chars]
