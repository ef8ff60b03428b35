"""ChordFlowSession: command interface tying the compiler to the playback clock."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from chordflow.chart_compiler import ChartCompiler
from chordflow.chart_models import BeatSnapshot, CompiledChart, Timeline
from chordflow.config import DEFAULT_SETTINGS, ChordFlowSettings
from chordflow.playback_clock import PlaybackClock, PlaybackState
from chordflow.timeline_builder import build_timeline
from chordflow.timers import TimerHost

logger = logging.getLogger(__name__)


class ChordFlowSession:
    """
    Owns the loaded chart, its timeline and the clock that plays it.

    Every state change goes through the commands below; renderers subscribe
    with :meth:`on_event` and read snapshots, never internal state.

    Usage:
        session = ChordFlowSession(AsyncioTimerHost())
        session.on_event("beat", render_beat)
        session.load(chart_text)
        session.start()
    """

    def __init__(
        self,
        timer_host: TimerHost,
        settings: ChordFlowSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.settings = settings
        self.compiler = ChartCompiler(settings)
        self.clock = PlaybackClock(timer_host, settings)
        self.tempo_setting: object = settings.default_bpm
        self._chart: CompiledChart | None = None
        self._timeline = Timeline()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def chart(self) -> CompiledChart | None:
        return self._chart

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def state(self) -> PlaybackState:
        return self.clock.state

    @property
    def position(self) -> int:
        return self.clock.position

    def snapshot(self) -> BeatSnapshot | None:
        return self.clock.snapshot()

    def on_event(self, event_name: str, callback: Callable[..., Any]) -> None:
        self.clock.on_event(event_name, callback)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def load(self, raw_text: str) -> CompiledChart:
        """
        Compile *raw_text* and make it the playing chart.

        The chart tempo, when present, replaces the tempo setting.

        Raises:
            ChartInputError: If the text cannot be compiled. The previously
                loaded chart, timeline and playback state are left as they were.
        """
        chart = self.compiler.compile(raw_text)
        timeline = build_timeline(chart.sections)

        self.clock.load(chart.sections, timeline)
        self._chart = chart
        self._timeline = timeline
        if chart.tempo is not None:
            self.tempo_setting = chart.tempo
        logger.info("Loaded %r: %d beat(s)", chart.title, len(timeline))
        return chart

    def start(self) -> bool:
        """Count in and play from the current position. False when nothing is loaded."""
        return self.clock.start(self.tempo_setting)

    def seek(self, index: int) -> bool:
        """Play from a global beat index without a count-in."""
        return self.clock.seek(index, self.tempo_setting)

    def seek_bar(self, section_index: int, bar_index: int = 0) -> bool:
        """
        Play from the first beat of a bar without a count-in.

        Returns False when the section or bar does not exist.
        """
        if section_index < 0 or bar_index < 0:
            return False
        try:
            index = self._timeline.position_of(section_index, bar_index)
        except IndexError:
            return False
        return self.seek(index)

    def navigate_to_section(self, section_index: int) -> bool:
        """Stop (keeping the display) and park at the first beat of a section."""
        if not 0 <= section_index < len(self._timeline.section_offsets):
            return False
        return self.clock.move_to(self._timeline.section_offsets[section_index])

    def stop(self, clear_display: bool = True) -> None:
        self.clock.stop(clear_display)
