"""Unit tests for chord voicing and MIDI export."""

from chordflow.chart_compiler import ChartCompiler
from chordflow.midi_exporter import MidiExporter
from chordflow.timeline_builder import build_timeline
from chordflow.voicing_strategy import (
    ChordSymbol,
    TriadVoicer,
    TriadWithBassVoicer,
    parse_chord_symbol,
    pitch_class_to_midi,
)


def test_pitch_class_to_midi() -> None:
    assert pitch_class_to_midi(0, 4) == 60
    assert pitch_class_to_midi(9, 3) == 57


def test_parse_chord_symbol_qualities() -> None:
    assert parse_chord_symbol("C") == ChordSymbol(root=0, chord_type="major")
    assert parse_chord_symbol("Am7") == ChordSymbol(root=9, chord_type="minor")
    assert parse_chord_symbol("Cmaj7") == ChordSymbol(root=0, chord_type="major")
    assert parse_chord_symbol("Bbm") == ChordSymbol(root=10, chord_type="minor")
    assert parse_chord_symbol("F#dim") == ChordSymbol(root=6, chord_type="diminished")


def test_parse_chord_symbol_slash_bass() -> None:
    assert parse_chord_symbol("D/F#") == ChordSymbol(root=2, chord_type="major", bass=6)


def test_parse_chord_symbol_unplayable() -> None:
    assert parse_chord_symbol("_") is None
    assert parse_chord_symbol("N.C.") is None
    assert parse_chord_symbol("") is None


def test_triad_voicer() -> None:
    voiced = TriadVoicer().voice(ChordSymbol(root=9, chord_type="minor"))
    assert voiced.chord_notes == [69, 72, 76]
    assert voiced.bass_notes == []


def test_triad_with_bass_voicer_prefers_slash_bass() -> None:
    voicer = TriadWithBassVoicer()
    assert voicer.voice(ChordSymbol(root=0, chord_type="major")).bass_notes == [36]
    assert voicer.voice(ChordSymbol(root=0, chord_type="major", bass=4)).bass_notes == [40]


def test_export_writes_midi_file(tmp_path) -> None:
    chart = ChartCompiler().compile("Intro,C . G .,_ . . .\nVerse,Am . N.C. .")
    out = tmp_path / "song.mid"
    MidiExporter(tempo=100).export(chart, build_timeline(chart.sections), str(out))

    data = out.read_bytes()
    assert data.startswith(b"MThd")
    assert data.count(b"MTrk") == 4
