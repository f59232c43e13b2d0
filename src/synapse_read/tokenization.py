from __future__ import annotations

import re
from typing import List

from .models import PUNCTUATION, SPACE, WORD, RawToken

PARAGRAPH_SPLIT_RE = re.compile(r"(?:\r?\n){2,}")

# Titles whose trailing period belongs to the word rather than ending a sentence.
ABBREVIATIONS = (
    "dr",
    "mr",
    "mrs",
    "ms",
    "mx",
    "prof",
    "sr",
    "jr",
    "st",
    "mt",
    "vs",
    "fig",
    "vol",
    "approx",
    "dept",
    "gen",
    "gov",
    "lt",
    "col",
    "capt",
    "sgt",
    "rev",
    "hon",
)

_ABBREVIATION = r"\b(?i:{})\.".format("|".join(ABBREVIATIONS))
_DECIMAL = r"\d+(?:[.,]\d+)+"
_INITIALISM = r"\b(?:\w\.){2,}"
_WORD = r"\w+(?:['’]\w+)?"

TOKEN_PATTERN = re.compile(
    rf"(?P<{WORD}>{_ABBREVIATION}|{_DECIMAL}|{_INITIALISM}|{_WORD})"
    rf"|(?P<{PUNCTUATION}>[.,!?;:—-]+)"
    rf"|(?P<{SPACE}>\s+)",
    re.UNICODE,
)


def split_paragraphs(text: str) -> List[str]:
    """Split a document on blank lines, dropping paragraphs that are only whitespace."""
    if not text:
        return []
    return [part for part in PARAGRAPH_SPLIT_RE.split(text) if part.strip()]


def tokenize_paragraph(paragraph: str) -> List[RawToken]:
    """Tokenize one paragraph into word, punctuation and whitespace tokens.

    Characters matching none of the three categories are dropped.
    """
    tokens: List[RawToken] = []
    for match in TOKEN_PATTERN.finditer(paragraph):
        kind = match.lastgroup
        if kind is None:  # pragma: no cover - every alternative is named
            continue
        tokens.append(RawToken(kind=kind, text=match.group()))  # type: ignore[arg-type]
    return tokens
