from typing import Any, Callable, List

import pytest

from synapse_read.config import ReaderSettings
from synapse_read.models import ProgressEvent
from synapse_read.playback import PlaybackController
from tests.utils import FakeClock, ManualScheduler

SENTENCES = "One two three. Four five. Six seven eight. Nine ten."
PARAGRAPHS = "Alpha one.\n\nBeta two three.\n\nGamma.\n\nDelta four five six."


def _controller(text: str, settings: ReaderSettings, events: List[ProgressEvent]):
    scheduler = ManualScheduler()
    clock = FakeClock()
    controller = PlaybackController(
        text, settings, scheduler=scheduler, clock=clock, on_progress=events.append
    )
    return controller, scheduler, clock


def test_chunk_playback_tracks_words_and_wpm():
    events: List[ProgressEvent] = []
    controller, scheduler, clock = _controller(
        SENTENCES, ReaderSettings(speed=1.0), events
    )

    assert controller.play()
    assert scheduler.intervals == [1.0]
    scheduler.tick(3, clock)

    assert controller.state.chunk_cursor == 3
    assert controller.stats.words_read == 8
    assert controller.stats.wpm == 160
    assert [event.wpm for event in events] == [180, 150, 160]

    assert controller.pause()
    assert controller.stats.pause_count == 1
    assert controller.state.chunk_cursor == 3
    assert not controller.state.is_playing
    assert scheduler.active == 0
    assert not controller.pause()


def test_playback_stops_at_end_of_document():
    events: List[ProgressEvent] = []
    controller, scheduler, clock = _controller(
        SENTENCES, ReaderSettings(speed=1.0), events
    )

    controller.play()
    scheduler.tick(5, clock)

    assert not controller.state.is_playing
    assert controller.state.chunk_cursor == 3
    assert scheduler.active == 0
    assert len(events) == 3
    assert events[-1].progress_percent == 75.0
    assert controller.stats.pause_count == 0
    assert controller.wait(timeout=0)


def test_resume_keeps_original_start_time():
    events: List[ProgressEvent] = []
    controller, scheduler, clock = _controller(
        SENTENCES, ReaderSettings(speed=1.0), events
    )

    controller.play()
    start = controller.state.start_time
    scheduler.tick(1, clock)
    controller.pause()
    clock.advance(10)
    controller.play()

    assert controller.state.start_time == start
    assert controller.state.chunk_cursor == 1
    scheduler.tick(1, clock)
    assert controller.stats.time_elapsed == 12.0


def test_reload_while_playing_cancels_timer_and_ignores_stale_ticks():
    events: List[ProgressEvent] = []
    controller, scheduler, _ = _controller(SENTENCES, ReaderSettings(), events)

    controller.play()
    (stale_tick,) = scheduler.timers.values()
    controller.load("Brand new text. With two chunks.", ReaderSettings())

    assert scheduler.active == 0
    assert not controller.state.is_playing
    stale_tick()
    assert controller.state.chunk_cursor == 0
    assert events == []
    assert len(controller.document.readable_chunks) == 2


def test_update_settings_rebuilds_and_keeps_previous_on_bad_input():
    events: List[ProgressEvent] = []
    controller, scheduler, _ = _controller(SENTENCES, ReaderSettings(), events)
    controller.play()

    settings = controller.update_settings({"speed": "fast", "maxWordsPerChunk": 3})

    assert settings.speed == 2.5
    assert settings.max_words_per_chunk == 3
    assert scheduler.active == 0
    assert controller.state.chunk_cursor == 0
    assert controller.stats.words_read == 0


def test_play_is_a_no_op_in_paragraph_mode_or_without_text():
    events: List[ProgressEvent] = []
    controller, scheduler, _ = _controller(
        PARAGRAPHS, ReaderSettings(reading_mode="paragraph"), events
    )
    assert not controller.play()
    assert scheduler.intervals == []

    empty, empty_scheduler, _ = _controller("   ", ReaderSettings(), events)
    assert not empty.play()
    assert not empty.toggle()
    assert empty_scheduler.intervals == []
    assert empty.current_content() is None
    assert empty.progress_percent == 0.0


def test_toggle_and_reset():
    events: List[ProgressEvent] = []
    controller, scheduler, clock = _controller(
        SENTENCES, ReaderSettings(speed=1.0), events
    )

    assert controller.toggle()
    scheduler.tick(2, clock)
    assert not controller.toggle()
    assert controller.stats.pause_count == 1

    controller.reset()
    assert controller.state.chunk_cursor == 0
    assert controller.state.start_time is None
    assert controller.stats.words_read == 0
    assert controller.stats.pause_count == 0
    assert controller.current_content() is controller.document.readable_chunks[0]


def test_paragraph_navigation_counts_words_and_backtracks():
    events: List[ProgressEvent] = []
    controller, _, _ = _controller(
        PARAGRAPHS, ReaderSettings(reading_mode="paragraph"), events
    )

    moves = [controller.next_paragraph() for _ in range(5)]

    assert moves == [True, True, True, False, False]
    assert controller.state.paragraph_cursor == 3
    assert controller.stats.words_read == 6
    assert controller.progress_percent == 75.0
    assert [event.words_read for event in events] == [2, 5, 6]

    assert controller.previous_paragraph()
    assert controller.state.paragraph_cursor == 2
    assert controller.stats.backtrack_count == 1
    assert controller.stats.comprehension_score == 95
    assert controller.current_content().text == "Gamma."


def test_paragraph_navigation_ignored_in_chunk_mode():
    events: List[ProgressEvent] = []
    controller, _, _ = _controller(PARAGRAPHS, ReaderSettings(), events)
    assert not controller.next_paragraph()
    assert not controller.previous_paragraph()
    assert controller.state.paragraph_cursor == 0
    assert events == []


class RefusingScheduler(ManualScheduler):
    def schedule(self, callback: Callable[[], None], interval_seconds: float) -> Any:
        raise RuntimeError("no timers available")


def test_directly_built_settings_are_clamped_before_use():
    events: List[ProgressEvent] = []
    controller, scheduler, _ = _controller(
        SENTENCES,
        ReaderSettings(speed=0, fixation=2.0, max_words_per_chunk=0),
        events,
    )

    assert controller.settings.speed == 0.5
    assert controller.settings.fixation == 0.8
    assert controller.settings.max_words_per_chunk == 3
    assert controller.play()
    assert scheduler.intervals == [0.5]


def test_failed_schedule_leaves_controller_idle():
    controller = PlaybackController(SENTENCES, scheduler=RefusingScheduler())

    with pytest.raises(RuntimeError):
        controller.play()

    assert not controller.state.is_playing
    assert controller.state.start_time is None
    assert controller.wait(timeout=0)


def test_listener_error_on_tick_stops_playback():
    events: List[ProgressEvent] = []
    controller, scheduler, clock = _controller(
        SENTENCES, ReaderSettings(speed=1.0), events
    )

    def broken_display(_event: ProgressEvent) -> None:
        raise BrokenPipeError("stdout closed")

    controller.add_listener(broken_display)
    controller.play()
    with pytest.raises(BrokenPipeError):
        scheduler.tick(1, clock)

    assert not controller.state.is_playing
    assert controller.state.chunk_cursor == 1
    assert scheduler.active == 0
    assert controller.wait(timeout=0)
    assert controller.play()
