"""
Fixation point heuristics.

The fixation point is the index where emphasis ends inside a word. Rules are
applied in order and may only move the point earlier, except the long-word
bump which nudges it one character later.
"""

from __future__ import annotations

import math
from typing import Tuple

PREFIXES: Tuple[str, ...] = (
    "un",
    "re",
    "pre",
    "dis",
    "in",
    "im",
    "ir",
    "il",
    "anti",
    "auto",
    "bio",
    "co",
    "de",
    "ex",
    "fore",
    "inter",
    "micro",
    "mid",
    "mono",
    "non",
    "over",
    "post",
    "pro",
    "sub",
    "super",
    "trans",
    "tri",
    "under",
)

SUFFIXES: Tuple[str, ...] = (
    "ing",
    "ed",
    "ly",
    "tion",
    "sion",
    "able",
    "ible",
    "al",
    "ent",
    "ence",
    "ive",
    "ize",
    "ise",
    "ment",
    "ness",
    "ous",
    "ful",
    "less",
)

SHORT_WORD_LENGTH = 3
LONG_WORD_LENGTH = 8


def calculate_fixation(word: str, fixation_level: float = 0.5) -> int:
    """Return the index splitting ``word`` into emphasized and plain parts."""
    length = len(word)
    if length <= 1:
        return length

    lower = word.lower()
    point = math.ceil(length * fixation_level)

    # First matching prefix wins, even when it does not move the point.
    for prefix in PREFIXES:
        if lower.startswith(prefix) and length > len(prefix):
            point = min(point, len(prefix))
            break

    for suffix in SUFFIXES:
        if lower.endswith(suffix) and length > len(suffix):
            point = min(point, length - len(suffix))
            break

    if length <= SHORT_WORD_LENGTH:
        point = 1
    elif length > LONG_WORD_LENGTH:
        point = min(point + 1, length - 1)

    return max(1, min(point, length - 1))


def split_word(word: str, fixation_level: float = 0.5) -> Tuple[str, str]:
    """Split ``word`` into its ``(bold, normal)`` parts."""
    point = calculate_fixation(word, fixation_level)
    return word[:point], word[point:]
