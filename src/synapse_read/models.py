from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Tuple, Union

from .config import PARAGRAPH_MODE
from .progress import calculate_comprehension_score

WORD = "word"
SPACE = "space"
PUNCTUATION = "punctuation"

TokenKind = Literal["word", "space", "punctuation"]


@dataclass(slots=True, frozen=True)
class RawToken:
    """A tokenizer match before any fixation or merging is applied."""

    kind: TokenKind
    text: str


@dataclass(slots=True, frozen=True)
class WordToken:
    """A word split into its emphasized prefix and plain suffix."""

    content: str
    bold: str
    normal: str
    opacity: float
    kind: TokenKind = WORD


@dataclass(slots=True, frozen=True)
class SpaceToken:
    """Whitespace kept verbatim so chunks reconstruct their source exactly."""

    content: str
    kind: TokenKind = SPACE


@dataclass(slots=True, frozen=True)
class PunctuationToken:
    """Punctuation that could not be attached to a preceding word."""

    content: str
    opacity: float
    kind: TokenKind = PUNCTUATION


Token = Union[WordToken, SpaceToken, PunctuationToken]


@dataclass(slots=True, frozen=True)
class Chunk:
    """A unit of text shown at once, or a paragraph-break marker."""

    tokens: Tuple[Token, ...]
    original_content: str
    chunk_index: int = -1
    is_paragraph_break: bool = False
    # Offset into original_content where each token's source text ends.
    source_ends: Tuple[int, ...] = field(default=(), repr=False, compare=False)

    @property
    def word_count(self) -> int:
        return count_words(self.tokens)

    @property
    def text(self) -> str:
        """Rendered text, including punctuation attached to words."""
        return "".join(token.content for token in self.tokens)


@dataclass(slots=True, frozen=True)
class Paragraph:
    """Readable chunks located between two paragraph-break markers."""

    chunks: Tuple[Chunk, ...]

    @property
    def tokens(self) -> Tuple[Token, ...]:
        return tuple(token for chunk in self.chunks for token in chunk.tokens)

    @property
    def word_count(self) -> int:
        return sum(chunk.word_count for chunk in self.chunks)

    @property
    def text(self) -> str:
        return "".join(chunk.text for chunk in self.chunks)


@dataclass(slots=True, frozen=True)
class ReadingStats:
    """Statistics accumulated while a document is being read."""

    words_read: int = 0
    wpm: int = 0
    time_elapsed: float = 0.0
    pause_count: int = 0
    backtrack_count: int = 0

    @property
    def comprehension_score(self) -> int:
        return calculate_comprehension_score(self.pause_count, self.backtrack_count)


@dataclass(slots=True, frozen=True)
class PlaybackState:
    """Cursor and timing state owned by the playback controller."""

    mode: str
    is_playing: bool = False
    chunk_cursor: int = 0
    paragraph_cursor: int = 0
    start_time: float | None = None

    @property
    def cursor(self) -> int:
        return self.paragraph_cursor if self.mode == PARAGRAPH_MODE else self.chunk_cursor


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    """Snapshot emitted to listeners after every accepted advance."""

    words_read: int
    wpm: int
    progress_percent: float


def count_words(tokens: Tuple[Token, ...] | list[Token]) -> int:
    """Count word-type tokens in a token sequence."""
    return sum(1 for token in tokens if token.kind == WORD)
