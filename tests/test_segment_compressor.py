"""Unit tests for run-length segment compression."""

from chordflow.chart_models import Segment
from chordflow.segment_compressor import (
    active_segment_index,
    compress,
    distinct_chords,
    is_single_chord,
)
from chordflow.tokenizer import tokenize


def test_compress_runs() -> None:
    assert compress(["C", "C", "G", "G", "G"]) == [Segment("C", 2), Segment("G", 3)]


def test_compress_empty() -> None:
    assert compress([]) == []


def test_compress_does_not_merge_separated_runs() -> None:
    assert compress(["C", "G", "C"]) == [Segment("C", 1), Segment("G", 1), Segment("C", 1)]


def test_compress_lengths_cover_every_beat() -> None:
    for chord_def in ["C . . G", "_ C . _", "Am . . . . F", ". . D", "E"]:
        beats = tokenize(chord_def)
        assert sum(seg.length for seg in compress(beats)) == len(beats)


def test_active_segment_index_walks_runs() -> None:
    segments = compress(["C", "C", "G", "G", "G"])
    assert [active_segment_index(segments, beat) for beat in range(5)] == [0, 0, 1, 1, 1]


def test_active_segment_index_outside_bar() -> None:
    segments = compress(["C", "C"])
    assert active_segment_index(segments, 2) is None
    assert active_segment_index(segments, -1) is None


def test_single_chord_ignores_indeterminate_beats() -> None:
    assert is_single_chord(tokenize(". C . ."))
    assert not is_single_chord(tokenize("C . G ."))
    assert not is_single_chord(tokenize(". ."))


def test_distinct_chords_keeps_first_seen_order() -> None:
    assert distinct_chords(["G", "C", "G", "_"]) == ["G", "C", "_"]
