from __future__ import annotations

from typing import List, Sequence

from .models import Chunk, Paragraph


def group_paragraphs(chunks: Sequence[Chunk]) -> List[Paragraph]:
    """Group readable chunks into paragraphs using the break markers."""
    paragraphs: List[Paragraph] = []
    current: List[Chunk] = []
    for chunk in chunks:
        if chunk.is_paragraph_break:
            if current:
                paragraphs.append(Paragraph(chunks=tuple(current)))
            current = []
        else:
            current.append(chunk)
    if current:
        paragraphs.append(Paragraph(chunks=tuple(current)))
    return paragraphs
