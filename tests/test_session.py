"""Unit tests for the ChordFlowSession command interface."""

import pytest

from chordflow.chart_compiler import ChartInputError
from chordflow.playback_clock import PlaybackState
from chordflow.session import ChordFlowSession
from chordflow.timers import ManualTimerHost

CHART = "Demo,100\nIntro,C . . .\nVerse,G . Am .,F . C ."


def _session() -> tuple[ManualTimerHost, ChordFlowSession]:
    host = ManualTimerHost()
    session = ChordFlowSession(host)
    session.load(CHART)
    return host, session


def test_load_applies_chart_tempo() -> None:
    _, session = _session()
    assert session.chart is not None
    assert session.chart.title == "Demo"
    assert session.tempo_setting == 100
    assert len(session.timeline) == 12


def test_load_without_tempo_keeps_setting() -> None:
    session = ChordFlowSession(ManualTimerHost())
    session.tempo_setting = "90"
    session.load("Intro,C . . .")
    assert session.tempo_setting == "90"


def test_start_uses_tempo_setting() -> None:
    _, session = _session()
    assert session.start()
    assert session.clock.period_ms == pytest.approx(600)
    assert session.state is PlaybackState.COUNTING_IN


def test_failed_load_leaves_previous_chart() -> None:
    host, session = _session()
    session.seek(5)
    previous_chart = session.chart
    previous_timeline = session.timeline

    with pytest.raises(ChartInputError):
        session.load("")
    with pytest.raises(ChartInputError):
        session.load("Title,120\nsection,bars")

    assert session.chart is previous_chart
    assert session.timeline is previous_timeline
    assert session.state is PlaybackState.RUNNING
    assert session.position == 5
    assert host.active_count == 1


def test_load_stops_active_playback() -> None:
    host, session = _session()
    session.seek(5)
    session.load("Other,D . . .")
    assert host.active_count == 0
    assert session.position == 0
    assert session.state is PlaybackState.IDLE


def test_seek_bar_uses_bar_offsets() -> None:
    _, session = _session()
    assert session.seek_bar(1, 1)
    assert session.position == 8
    snapshot = session.snapshot()
    assert snapshot is not None
    assert (snapshot.section_index, snapshot.bar_index, snapshot.beat_index) == (1, 1, 0)


def test_seek_bar_out_of_range() -> None:
    host, session = _session()
    assert not session.seek_bar(5, 0)
    assert not session.seek_bar(1, 7)
    assert not session.seek_bar(-1, 0)
    assert host.active_count == 0


def test_navigate_to_section_parks_position() -> None:
    host, session = _session()
    session.seek(1)
    assert session.navigate_to_section(1)
    assert session.position == 4
    assert session.state is PlaybackState.IDLE
    assert host.active_count == 0
    assert session.clock.current_section_index == 1
    assert session.clock.display == "G"
    assert not session.navigate_to_section(9)


def test_commands_without_chart_are_noops() -> None:
    host = ManualTimerHost()
    session = ChordFlowSession(host)
    assert not session.start()
    assert not session.seek(0)
    assert not session.seek_bar(0)
    assert not session.navigate_to_section(0)
    session.stop()
    assert host.active_count == 0
