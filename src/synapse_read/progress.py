from __future__ import annotations

import math

PAUSE_PENALTY = 2
BACKTRACK_PENALTY = 5


def calculate_wpm(words_read: int, elapsed_seconds: float) -> int:
    """Return words per minute, or 0 when no time has elapsed."""
    if elapsed_seconds <= 0:
        return 0
    # Round half up so 0.5 always moves to the next whole word.
    return int(math.floor(words_read / elapsed_seconds * 60 + 0.5))


def calculate_comprehension_score(pause_count: int, backtrack_count: int) -> int:
    """Heuristic 0-100 score penalising pauses and backtracks."""
    score = 100 - PAUSE_PENALTY * pause_count - BACKTRACK_PENALTY * backtrack_count
    return max(0, score)


def progress_percent(position: int, total: int) -> float:
    """Percentage of ``total`` covered by ``position``; 0 for empty documents."""
    if total <= 0:
        return 0.0
    return 100.0 * position / total
