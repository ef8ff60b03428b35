"""Tests for the click command line interface."""

from pathlib import Path

from click.testing import CliRunner

from chordflow.cli import main

CHART = "Demo,100\nIntro,C . . .\nVerse,G . Am .\n"


def _chart_file(tmp_path: Path, text: str = CHART) -> Path:
    path = tmp_path / "song.csv"
    path.write_text(text, encoding="utf-8")
    return path


def test_show_prints_text_chart(tmp_path: Path) -> None:
    result = CliRunner().invoke(main, ["show", str(_chart_file(tmp_path))])
    assert result.exit_code == 0
    assert "Demo (100 BPM)" in result.output
    assert "Verse (4 beats)" in result.output


def test_show_writes_html(tmp_path: Path) -> None:
    out = tmp_path / "song.html"
    result = CliRunner().invoke(
        main, ["show", str(_chart_file(tmp_path)), "--format", "html", "-o", str(out)]
    )
    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_show_rejects_chart_without_sections(tmp_path: Path) -> None:
    result = CliRunner().invoke(main, ["show", str(_chart_file(tmp_path, "Song,120\n"))])
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_play_rejects_missing_section(tmp_path: Path) -> None:
    result = CliRunner().invoke(main, ["play", str(_chart_file(tmp_path)), "--section", "5"])
    assert result.exit_code == 1
    assert "no section 5" in result.output


def test_export_midi_default_path(tmp_path: Path) -> None:
    chart = _chart_file(tmp_path)
    result = CliRunner().invoke(main, ["export-midi", str(chart), "--bass"])
    assert result.exit_code == 0
    assert "100 BPM" in result.output
    assert (tmp_path / "song.mid").read_bytes().startswith(b"MThd")


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "chordflow" in result.output


def test_play_from_section_prints_header_once(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        main,
        ["play", str(_chart_file(tmp_path)), "--section", "1", "--tempo", "400", "--no-metronome"],
    )
    assert result.exit_code == 0
    assert result.output.count("== Verse ==") == 1
    assert "== Intro ==" not in result.output
    assert "Done!" in result.output


def test_play_from_top_counts_in(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        main, ["play", str(_chart_file(tmp_path)), "--tempo", "400", "--no-metronome"]
    )
    assert result.exit_code == 0
    assert result.output.count("== Intro ==") == 1
    assert result.output.count("== Verse ==") == 1
    assert "  1..." in result.output
