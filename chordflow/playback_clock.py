"""PlaybackClock: fixed-tempo scheduler walking a compiled timeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from chordflow.chart_compiler import parse_leading_int
from chordflow.chart_models import BeatSnapshot, Section, Timeline
from chordflow.config import DEFAULT_SETTINGS, ChordFlowSettings
from chordflow.segment_compressor import active_segment_index, compress
from chordflow.timers import TimerHandle, TimerHost
from chordflow.tokenizer import display_chord, tokenize

logger = logging.getLogger(__name__)

#: Events a listener can subscribe to with :meth:`PlaybackClock.on_event`.
EVENTS: tuple[str, ...] = ("tick", "count_in", "beat", "section_change", "stop")


class PlaybackState(Enum):
    IDLE = "idle"
    COUNTING_IN = "counting_in"
    RUNNING = "running"


class PlaybackClock:
    """
    Steps through a timeline at a fixed tempo.

    State machine
    -------------
    ``IDLE -> COUNTING_IN`` on :meth:`start`: a lead-in of
    ``settings.count_in_beats`` ticks counting down in :attr:`display`,
    then one more tick and playback resumes at the current position.

    ``IDLE/COUNTING_IN/RUNNING -> RUNNING`` on :meth:`seek`: no lead-in, an
    immediate tick, then steady advance.

    ``* -> IDLE`` on :meth:`stop`, or when the position runs off the end of
    the timeline (the position then rewinds to 0).

    Exactly one timer is live while counting in or running, none while idle.

    Events
    ------
    ``tick()`` at every beat boundary including the lead-in,
    ``count_in(remaining)``, ``beat(snapshot)``,
    ``section_change(section_index, snapshot)`` (emitted before the ``beat``
    of the same position) and ``stop(clear_display)``.

    Exceptions raised by ``tick`` listeners are logged and ignored so a
    missing audio device never halts playback.
    """

    def __init__(
        self,
        timer_host: TimerHost,
        settings: ChordFlowSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.timer_host = timer_host
        self.settings = settings
        self._sections: tuple[Section, ...] = ()
        self._timeline = Timeline()
        self._position = 0
        self._current_section_index = 0
        self._state = PlaybackState.IDLE
        self._timer: TimerHandle | None = None
        self._count = 0
        self._period_ms = 60000.0 / settings.default_bpm
        self._display = ""
        self._listeners: dict[str, list[Callable[..., Any]]] = {name: [] for name in EVENTS}

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def position(self) -> int:
        return self._position

    @property
    def current_section_index(self) -> int:
        return self._current_section_index

    @property
    def display(self) -> str:
        """Current-chord display: countdown digits during the lead-in, else the chord."""
        return self._display

    @property
    def period_ms(self) -> float:
        """Beat period used by the most recent start or seek."""
        return self._period_ms

    @property
    def has_live_timer(self) -> bool:
        return self._timer is not None and self._timer.active

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _emit(self, name: str, *args: Any) -> None:
        for callback in list(self._listeners[name]):
            callback(*args)

    def _fire_tick(self) -> None:
        for callback in list(self._listeners["tick"]):
            try:
                callback()
            except Exception:
                logger.debug("Audio tick failed; continuing playback", exc_info=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, callback: Callable[[], None]) -> None:
        self._cancel_timer()
        self._timer = self.timer_host.call_every(self._period_ms, callback)

    def _sync_section(self, snapshot: BeatSnapshot) -> None:
        if snapshot.section_index != self._current_section_index:
            self._current_section_index = snapshot.section_index
            self._emit("section_change", snapshot.section_index, snapshot)

    def _show_position(self) -> bool:
        """Publish the snapshot for the current position; False if there is none."""
        snapshot = self.snapshot()
        if snapshot is None:
            return False
        self._sync_section(snapshot)
        self._display = snapshot.display_chord
        self._emit("beat", snapshot)
        return True

    def _count_in_step(self) -> None:
        if self._count > 0:
            self._fire_tick()
            self._display = str(self._count)
            self._emit("count_in", self._count)
            self._count -= 1
            return

        self._cancel_timer()
        self._display = ""
        self._state = PlaybackState.RUNNING
        self._fire_tick()
        if not self._show_position():
            self._finish()
            return
        if self._state is PlaybackState.RUNNING:
            self._schedule(self._advance)

    def _advance(self) -> None:
        self._position += 1
        if self._timeline.entry_at(self._position) is None:
            self._finish()
            return
        self._fire_tick()
        self._show_position()

    def _finish(self) -> None:
        logger.info("Reached end of timeline after %d beat(s)", len(self._timeline))
        self.stop()
        self._position = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def on_event(self, event_name: str, callback: Callable[..., Any]) -> None:
        """
        Register a listener for one of :data:`EVENTS`.

        Raises:
            ValueError: If the event name is unknown.
        """
        if event_name not in self._listeners:
            raise ValueError(f"Unknown event '{event_name}'. Use one of: {', '.join(EVENTS)}.")
        self._listeners[event_name].append(callback)

    def resolve_bpm(self, tempo_setting: object = None) -> int:
        """Parse a tempo setting, falling back to the default tempo."""
        bpm = parse_leading_int(tempo_setting)
        if bpm is None or bpm <= 0:
            logger.debug(
                "Tempo setting %r unusable; using %d BPM", tempo_setting, self.settings.default_bpm
            )
            return self.settings.default_bpm
        return bpm

    def load(self, sections: Sequence[Section], timeline: Timeline) -> None:
        """Replace the chart being played. Stops playback and rewinds to 0."""
        self.stop()
        self._sections = tuple(sections)
        self._timeline = timeline
        self._position = 0
        self._current_section_index = 0

    def snapshot(self, index: int | None = None) -> BeatSnapshot | None:
        """
        Describe the beat at *index* (default: the current position).

        The active segment is derived from the bar's tokens on every call.
        """
        position = self._position if index is None else index
        entry = self._timeline.entry_at(position)
        if entry is None:
            return None
        bar = self._sections[entry.section_index].bars[entry.bar_index]
        segments = compress(tokenize(bar.chord_def))
        return BeatSnapshot(
            position=position,
            section_index=entry.section_index,
            bar_index=entry.bar_index,
            beat_index=entry.beat_index,
            chord=entry.chord,
            display_chord=display_chord(entry.chord),
            segment_index=active_segment_index(segments, entry.beat_index),
            cue=bar.cue,
        )

    def start(self, tempo_setting: object = None) -> bool:
        """
        Count in, then play from the current position.

        Returns:
            False (and does nothing) when no timeline is loaded.
        """
        if not len(self._timeline):
            return False
        self._period_ms = 60000.0 / self.resolve_bpm(tempo_setting)
        self._count = self.settings.count_in_beats
        self._state = PlaybackState.COUNTING_IN
        self._schedule(self._count_in_step)
        logger.info("Counting in at %.0f ms per beat from position %d", self._period_ms, self._position)
        return True

    def seek(self, index: int, tempo_setting: object = None) -> bool:
        """
        Jump to *index* and play immediately without a lead-in.

        A target past the end is accepted and stops on the next beat.

        Returns:
            False (and does nothing) when no timeline is loaded or *index* is negative.
        """
        if not len(self._timeline) or index < 0:
            return False
        self._cancel_timer()
        self._period_ms = 60000.0 / self.resolve_bpm(tempo_setting)
        self._position = index
        self._state = PlaybackState.RUNNING
        self._fire_tick()
        self._show_position()
        if self._state is PlaybackState.RUNNING:
            self._schedule(self._advance)
        logger.info("Playing from position %d", index)
        return True

    def move_to(self, index: int) -> bool:
        """Stop without clearing the display and park the position at *index*."""
        self.stop(clear_display=False)
        if self._timeline.entry_at(index) is None:
            return False
        self._position = index
        self._show_position()
        return True

    def stop(self, clear_display: bool = True) -> None:
        """Cancel any live timer and return to IDLE. Safe to call repeatedly."""
        self._cancel_timer()
        if self._state is not PlaybackState.IDLE:
            logger.info("Playback stopped at position %d", self._position)
        self._state = PlaybackState.IDLE
        self._count = 0
        if clear_display:
            self._display = ""
        self._emit("stop", clear_display)
