"""Unit tests for the Metronome tick consumer."""

from chordflow.metronome import Metronome


def test_metronome_forwards_ticks() -> None:
    clicks: list[int] = []
    metronome = Metronome(sink=lambda: clicks.append(1))
    metronome.tick()
    metronome.tick()
    assert len(clicks) == 2


def test_metronome_toggle_silences() -> None:
    clicks: list[int] = []
    metronome = Metronome(sink=lambda: clicks.append(1))
    assert metronome.toggle() is False
    metronome.tick()
    assert clicks == []
    assert metronome.toggle() is True
    metronome.tick()
    assert clicks == [1]


def test_metronome_swallows_sink_errors() -> None:
    def _no_device() -> None:
        raise OSError("audio device unavailable")

    Metronome(sink=_no_device).tick()
