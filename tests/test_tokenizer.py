"""Unit tests for the bar tokenizer."""

from chordflow.tokenizer import beat_count, display_chord, segment_label, tokenize


def test_tokenize_holds_repeat_previous_chord() -> None:
    assert tokenize("C . . G") == ["C", "C", "C", "G"]


def test_tokenize_doubled_hold_counts_twice() -> None:
    assert tokenize("C .. G") == ["C", "C", "C", "G"]


def test_tokenize_rest_is_kept_and_held() -> None:
    assert tokenize("_ C . _") == ["_", "C", "C", "_"]
    assert tokenize("C _ .") == ["C", "_", "_"]


def test_tokenize_leading_hold_is_empty() -> None:
    assert tokenize(". C") == ["", "C"]


def test_tokenize_collapses_whitespace() -> None:
    assert tokenize("  Am7 \t  D7/F#  ") == ["Am7", "D7/F#"]


def test_tokenize_no_padding() -> None:
    assert tokenize("C") == ["C"]
    assert beat_count("G . . . . .") == 6


def test_tokenize_empty_bar() -> None:
    assert tokenize("") == []
    assert tokenize("   ") == []


def test_tokenize_is_repeatable() -> None:
    assert tokenize("F . C .") == tokenize("F . C .")


def test_display_chord_blanks_rests() -> None:
    assert display_chord("_") == ""
    assert display_chord("") == ""
    assert display_chord("Am") == "Am"


def test_segment_label_dashes_rests() -> None:
    assert segment_label("_") == "—"
    assert segment_label("G") == "G"
