"""
Timer-driven playback over a processed document.

The controller owns the cursor, timer handle and reading statistics. Callers
observe progress through immutable snapshots and ProgressEvent callbacks.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, List, Mapping

from .config import (
    CHUNK_MODE,
    PARAGRAPH_MODE,
    ReaderSettings,
    clamp_settings,
    update_settings,
)
from .models import Chunk, Paragraph, PlaybackState, ProgressEvent, ReadingStats
from .pipeline import ProcessedDocument, process_text
from .progress import calculate_wpm, progress_percent
from .scheduling import Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

ProgressListener = Callable[[ProgressEvent], None]


class PlaybackController:
    """State machine pacing a reader through chunks or paragraphs."""

    def __init__(
        self,
        text: str = "",
        settings: ReaderSettings | None = None,
        *,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_progress: ProgressListener | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._stopped = threading.Condition(self._lock)
        self._scheduler = scheduler or ThreadingScheduler()
        self._clock = clock
        self._listeners: List[ProgressListener] = []
        if on_progress is not None:
            self._listeners.append(on_progress)
        self._timer: Any = None
        self._generation = 0
        self._text = ""
        self._settings = ReaderSettings()
        self._document = process_text("", self._settings)
        self._words_before: List[int] = [0]
        self._state = PlaybackState(mode=CHUNK_MODE)
        self._stats = ReadingStats()
        self.load(text, settings or ReaderSettings())

    # -- read-only views -------------------------------------------------

    @property
    def settings(self) -> ReaderSettings:
        with self._lock:
            return self._settings

    @property
    def document(self) -> ProcessedDocument:
        with self._lock:
            return self._document

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return self._state

    @property
    def stats(self) -> ReadingStats:
        with self._lock:
            return self._stats

    @property
    def progress_percent(self) -> float:
        with self._lock:
            if self._state.mode == PARAGRAPH_MODE:
                return progress_percent(
                    self._state.paragraph_cursor, len(self._document.paragraphs)
                )
            return progress_percent(
                self._state.chunk_cursor, len(self._document.readable_chunks)
            )

    def current_content(self) -> Chunk | Paragraph | None:
        """The chunk or paragraph under the cursor, depending on the mode."""
        with self._lock:
            if self._state.mode == PARAGRAPH_MODE:
                items: Any = self._document.paragraphs
                cursor = self._state.paragraph_cursor
            else:
                items = self._document.readable_chunks
                cursor = self._state.chunk_cursor
            if 0 <= cursor < len(items):
                return items[cursor]
            return None

    def add_listener(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    # -- transitions -----------------------------------------------------

    def load(self, text: str | None, settings: ReaderSettings) -> None:
        """Rebuild all derived data for new text or settings and return to idle."""
        with self._lock:
            self._cancel_timer()
            self._text = text or ""
            self._settings = clamp_settings(settings)
            self._document = process_text(self._text, self._settings)
            self._words_before = [0]
            for chunk in self._document.readable_chunks:
                self._words_before.append(self._words_before[-1] + chunk.word_count)
            self._state = PlaybackState(mode=self._settings.reading_mode)
            self._stats = ReadingStats()
            self._stopped.notify_all()
        logger.debug(
            "Loaded %d chunks in %s mode",
            len(self._document.readable_chunks),
            self._settings.reading_mode,
        )

    def update_settings(self, changes: Mapping[str, Any]) -> ReaderSettings:
        """Validate ``changes`` against the current settings and reload."""
        new_settings = update_settings(self._settings, changes)
        self.load(self._text, new_settings)
        return new_settings

    def play(self) -> bool:
        """Start automatic advancing. Only chunk mode can play."""
        with self._lock:
            if (
                self._state.mode != CHUNK_MODE
                or self._state.is_playing
                or self._document.is_empty
            ):
                return False
            start_time = self._state.start_time
            if start_time is None:
                start_time = self._clock()
            self._generation += 1
            generation = self._generation
            self._timer = self._scheduler.schedule(
                lambda: self._tick(generation), self._settings.speed
            )
            self._state = replace(self._state, is_playing=True, start_time=start_time)
            logger.debug("Playback started at chunk %d", self._state.chunk_cursor)
            return True

    def pause(self) -> bool:
        with self._lock:
            if not self._state.is_playing:
                return False
            self._cancel_timer()
            self._state = replace(self._state, is_playing=False)
            self._stats = replace(self._stats, pause_count=self._stats.pause_count + 1)
            logger.debug("Playback paused at chunk %d", self._state.chunk_cursor)
            return True

    def toggle(self) -> bool:
        """Play when stopped, pause when playing. Returns the new playing flag."""
        with self._lock:
            if self._state.is_playing:
                self.pause()
            else:
                self.play()
            return self._state.is_playing

    def reset(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._state = PlaybackState(mode=self._settings.reading_mode)
            self._stats = ReadingStats()
        logger.debug("Playback reset")

    def next_paragraph(self) -> bool:
        """Move forward one paragraph, counting the words just read."""
        with self._lock:
            if self._state.mode != PARAGRAPH_MODE:
                return False
            cursor = self._state.paragraph_cursor
            paragraphs = self._document.paragraphs
            if cursor >= len(paragraphs) - 1:
                return False
            words_read = self._stats.words_read + paragraphs[cursor].word_count
            self._state = replace(self._state, paragraph_cursor=cursor + 1)
            self._stats = replace(self._stats, words_read=words_read)
            event = self._paragraph_event()
        self._emit(event)
        return True

    def previous_paragraph(self) -> bool:
        with self._lock:
            if self._state.mode != PARAGRAPH_MODE:
                return False
            cursor = self._state.paragraph_cursor
            if cursor <= 0:
                return False
            self._state = replace(self._state, paragraph_cursor=cursor - 1)
            self._stats = replace(
                self._stats, backtrack_count=self._stats.backtrack_count + 1
            )
            event = self._paragraph_event()
        self._emit(event)
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until playback stops. Returns False if ``timeout`` expired first."""
        with self._stopped:
            return self._stopped.wait_for(
                lambda: not self._state.is_playing, timeout=timeout
            )

    def close(self) -> None:
        """Cancel any live timer without touching the statistics."""
        with self._lock:
            self._cancel_timer()
            self._state = replace(self._state, is_playing=False)

    # -- internals -------------------------------------------------------

    def _tick(self, generation: int) -> None:
        with self._lock:
            # Ticks from a timer that has since been cancelled are ignored.
            if generation != self._generation or not self._state.is_playing:
                return
            total = len(self._document.readable_chunks)
            new_cursor = self._state.chunk_cursor + 1
            if new_cursor >= total:
                self._cancel_timer()
                self._state = replace(
                    self._state, is_playing=False, chunk_cursor=max(total - 1, 0)
                )
                logger.debug("Reached end of document after %d chunks", total)
                return
            words_read = self._words_before[new_cursor]
            start_time = self._state.start_time
            elapsed = self._clock() - start_time if start_time is not None else 0.0
            wpm = calculate_wpm(words_read, elapsed)
            self._state = replace(self._state, chunk_cursor=new_cursor)
            self._stats = replace(
                self._stats, words_read=words_read, wpm=wpm, time_elapsed=elapsed
            )
            event = ProgressEvent(
                words_read=words_read,
                wpm=wpm,
                progress_percent=progress_percent(new_cursor, total),
            )
        try:
            self._emit(event)
        except Exception:
            with self._lock:
                # A failing listener ends playback the same way the last chunk does.
                if generation == self._generation:
                    self._cancel_timer()
                    self._state = replace(self._state, is_playing=False)
            raise

    def _paragraph_event(self) -> ProgressEvent:
        return ProgressEvent(
            words_read=self._stats.words_read,
            wpm=self._stats.wpm,
            progress_percent=progress_percent(
                self._state.paragraph_cursor, len(self._document.paragraphs)
            ),
        )

    def _cancel_timer(self) -> None:
        # Bumping the generation invalidates ticks already in flight.
        self._generation += 1
        if self._timer is not None:
            self._scheduler.cancel(self._timer)
            self._timer = None
        self._stopped.notify_all()

    def _emit(self, event: ProgressEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
