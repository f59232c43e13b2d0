from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .chunking import build_chunks
from .config import ReaderSettings, clamp_settings
from .models import Chunk, Paragraph
from .paragraphs import group_paragraphs

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ProcessedDocument:
    """Everything derived from one (text, settings) pair."""

    chunks: Tuple[Chunk, ...]
    readable_chunks: Tuple[Chunk, ...]
    paragraphs: Tuple[Paragraph, ...]

    @property
    def word_count(self) -> int:
        return sum(chunk.word_count for chunk in self.readable_chunks)

    @property
    def is_empty(self) -> bool:
        return not self.readable_chunks


EMPTY_DOCUMENT = ProcessedDocument(chunks=(), readable_chunks=(), paragraphs=())


def process_text(text: str | None, settings: ReaderSettings) -> ProcessedDocument:
    """Run tokenization, chunking and paragraph grouping for a document."""
    if not text or not text.strip():
        return EMPTY_DOCUMENT
    settings = clamp_settings(settings)
    chunks = tuple(build_chunks(text, settings))
    readable = tuple(chunk for chunk in chunks if not chunk.is_paragraph_break)
    paragraphs = tuple(group_paragraphs(chunks))
    logger.info(
        "Processed document: %d readable chunks across %d paragraphs",
        len(readable),
        len(paragraphs),
    )
    return ProcessedDocument(
        chunks=chunks, readable_chunks=readable, paragraphs=paragraphs
    )


def document_summary(document: ProcessedDocument) -> Dict[str, Any]:
    """Return JSON-serializable counts describing a processed document."""
    longest = max((chunk.word_count for chunk in document.readable_chunks), default=0)
    return {
        "chunk_count": len(document.readable_chunks),
        "paragraph_count": len(document.paragraphs),
        "word_count": document.word_count,
        "longest_chunk_words": longest,
    }
