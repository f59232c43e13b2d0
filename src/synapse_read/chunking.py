"""
Two-stage chunk construction.

Stage 1 folds each paragraph's tokens into natural chunks that end on
sentence or clause punctuation. Stage 2 re-splits any natural chunk holding
more words than allowed, preferring whitespace boundaries.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import List, Sequence, Tuple, cast

from .config import ReaderSettings
from .fixation import split_word
from .models import (
    PUNCTUATION,
    SPACE,
    WORD,
    Chunk,
    PunctuationToken,
    RawToken,
    SpaceToken,
    Token,
    WordToken,
    count_words,
)
from .tokenization import split_paragraphs, tokenize_paragraph

logger = logging.getLogger(__name__)

HARD_BREAK_RE = re.compile(r"[.!?]$")
SOFT_BREAK_RE = re.compile(r"[,;—]$")


@dataclass(slots=True)
class _ChunkAccumulator:
    tokens: List[Token] = field(default_factory=list)
    source_ends: List[int] = field(default_factory=list)
    original: str = ""

    def to_chunk(self) -> Chunk:
        return Chunk(
            tokens=tuple(self.tokens),
            original_content=self.original,
            source_ends=tuple(self.source_ends),
        )


def paragraph_break() -> Chunk:
    """Sentinel placed between the chunks of two paragraphs."""
    return Chunk(tokens=(), original_content="", is_paragraph_break=True)


def make_word_token(text: str, fixation_level: float, opacity: float) -> WordToken:
    """Build a word token, keeping abbreviation periods out of the fixation math."""
    stem = text.rstrip(".") or text
    bold, normal = split_word(stem, fixation_level)
    return WordToken(
        content=text, bold=bold, normal=normal + text[len(stem) :], opacity=opacity
    )


def find_attachment_index(tokens: Sequence[Token]) -> int | None:
    """Index of the word trailing punctuation should join, skipping whitespace."""
    for index in range(len(tokens) - 1, -1, -1):
        kind = tokens[index].kind
        if kind == WORD:
            return index
        if kind != SPACE:
            return None
    return None


def attach_punctuation(
    tokens: Sequence[Token], text: str, opacity: float
) -> Tuple[Token, ...]:
    """Return a new token sequence with ``text`` merged onto the preceding word.

    When no word precedes the punctuation (ignoring whitespace) it is appended
    as a standalone punctuation token.
    """
    index = find_attachment_index(tokens)
    if index is None:
        return tuple(tokens) + (PunctuationToken(content=text, opacity=opacity),)
    word = cast(WordToken, tokens[index])
    merged = replace(word, content=word.content + text, normal=word.normal + text)
    return tuple(tokens[:index]) + (merged,) + tuple(tokens[index + 1 :])


def ends_natural_chunk(text: str) -> bool:
    """True when punctuation ends a sentence (. ! ?) or a clause (, ; —)."""
    return bool(HARD_BREAK_RE.search(text) or SOFT_BREAK_RE.search(text))


def chunk_paragraph(
    raw_tokens: Sequence[RawToken], fixation_level: float, opacity: float
) -> List[Chunk]:
    """Stage 1: fold a paragraph's tokens into naturally bounded chunks."""
    chunks: List[Chunk] = []
    acc = _ChunkAccumulator()

    for raw in raw_tokens:
        acc.original += raw.text
        end = len(acc.original)
        if raw.kind == WORD:
            acc.tokens.append(make_word_token(raw.text, fixation_level, opacity))
            acc.source_ends.append(end)
        elif raw.kind == SPACE:
            acc.tokens.append(SpaceToken(content=raw.text))
            acc.source_ends.append(end)
        elif raw.kind == PUNCTUATION:
            index = find_attachment_index(acc.tokens)
            acc.tokens = list(attach_punctuation(acc.tokens, raw.text, opacity))
            if index is None:
                acc.source_ends.append(end)
            else:
                acc.source_ends[index] = end
            if ends_natural_chunk(raw.text) and acc.tokens:
                chunks.append(acc.to_chunk())
                acc = _ChunkAccumulator()

    if acc.tokens:
        chunks.append(acc.to_chunk())
    return chunks


def build_natural_chunks(
    paragraphs: Sequence[str], settings: ReaderSettings
) -> List[Chunk]:
    """Stage 1 over a whole document, with markers between paragraphs."""
    chunks: List[Chunk] = []
    last = len(paragraphs) - 1
    for position, paragraph in enumerate(paragraphs):
        raw_tokens = tokenize_paragraph(paragraph)
        chunks.extend(chunk_paragraph(raw_tokens, settings.fixation, settings.opacity))
        if position < last:
            chunks.append(paragraph_break())
    return chunks


def split_oversized_chunk(chunk: Chunk, max_words: int) -> List[Chunk]:
    """Stage 2: split ``chunk`` so no piece exceeds ``max_words`` words.

    When a word would push the running count past the limit, the pending
    tokens are cut after the nearest whitespace token. Without any
    whitespace to fall back on, the cut lands right before that word.
    """
    if chunk.is_paragraph_break or chunk.word_count <= max_words:
        return [chunk]

    tokens = chunk.tokens
    ends = _source_ends(chunk)
    pieces: List[Chunk] = []
    pending: List[int] = []
    consumed = 0
    words = 0

    for index, token in enumerate(tokens):
        if token.kind == WORD:
            while pending and words >= max_words:
                cut = _cut_position(tokens, pending)
                head, pending = pending[:cut], pending[cut:]
                piece, stop = _slice_chunk(chunk, head, ends, consumed)
                # Whitespace-only pieces are dropped; their text rolls forward.
                if piece.original_content.strip():
                    pieces.append(piece)
                    consumed = stop
                words = count_words([tokens[i] for i in pending])
            words += 1
        pending.append(index)

    if pending:
        piece, consumed = _slice_chunk(chunk, pending, ends, consumed)
        pieces.append(piece)

    leftover = chunk.original_content[consumed:]
    if pieces and leftover and len(chunk.source_ends) == len(tokens):
        tail = pieces[-1]
        pieces[-1] = replace(tail, original_content=tail.original_content + leftover)
    return pieces


def apply_size_limit(chunks: Sequence[Chunk], max_words: int) -> List[Chunk]:
    """Run stage 2 over every chunk; markers pass through unchanged."""
    limited: List[Chunk] = []
    for chunk in chunks:
        limited.extend(split_oversized_chunk(chunk, max_words))
    return limited


def assign_indices(chunks: Sequence[Chunk]) -> List[Chunk]:
    """Number chunks by position, markers included, starting at zero."""
    return [replace(chunk, chunk_index=index) for index, chunk in enumerate(chunks)]


def build_chunks(text: str, settings: ReaderSettings) -> List[Chunk]:
    """Convert raw text into the finalized, indexed chunk sequence."""
    paragraphs = split_paragraphs(text)
    if not paragraphs:
        return []
    natural = build_natural_chunks(paragraphs, settings)
    finalized = assign_indices(apply_size_limit(natural, settings.max_words_per_chunk))
    logger.debug(
        "Built %d chunks (%d natural) from %d paragraphs",
        len(finalized),
        len(natural),
        len(paragraphs),
    )
    return finalized


def _source_ends(chunk: Chunk) -> Tuple[int, ...]:
    if len(chunk.source_ends) == len(chunk.tokens):
        return chunk.source_ends
    # Chunks built by hand carry no offsets; fall back to token contents.
    ends: List[int] = []
    total = 0
    for token in chunk.tokens:
        total += len(token.content)
        ends.append(total)
    return tuple(ends)


def _slice_chunk(
    chunk: Chunk, indices: Sequence[int], ends: Tuple[int, ...], consumed: int
) -> Tuple[Chunk, int]:
    """Build a sub-chunk and return it with the new source offset."""
    stop = max((ends[i] for i in indices), default=consumed)
    stop = max(stop, consumed)
    original = chunk.original_content[consumed:stop]
    if len(chunk.source_ends) != len(chunk.tokens):
        original = "".join(chunk.tokens[i].content for i in indices)
    piece = Chunk(
        tokens=tuple(chunk.tokens[i] for i in indices),
        original_content=original,
        source_ends=tuple(max(ends[i] - consumed, 0) for i in indices),
    )
    return piece, stop


def _cut_position(tokens: Sequence[Token], pending: Sequence[int]) -> int:
    for offset in range(len(pending) - 1, -1, -1):
        if tokens[pending[offset]].kind == SPACE:
            return offset + 1
    return len(pending)
