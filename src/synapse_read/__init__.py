"""
synapse_read package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .chunking import attach_punctuation, build_chunks
from .config import (
    ReaderSettings,
    apply_preset,
    clamp_settings,
    config_from_dict,
    config_from_yaml,
    load_config,
    update_settings,
)
from .fixation import calculate_fixation, split_word
from .paragraphs import group_paragraphs
from .pipeline import ProcessedDocument, process_text
from .playback import PlaybackController
from .progress import calculate_comprehension_score, calculate_wpm
from .scheduling import Scheduler, ThreadingScheduler

__all__ = [
    "ReaderSettings",
    "apply_preset",
    "clamp_settings",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "update_settings",
    "calculate_fixation",
    "split_word",
    "attach_punctuation",
    "build_chunks",
    "group_paragraphs",
    "ProcessedDocument",
    "process_text",
    "PlaybackController",
    "Scheduler",
    "ThreadingScheduler",
    "calculate_wpm",
    "calculate_comprehension_score",
]

__version__ = "0.1.0"
