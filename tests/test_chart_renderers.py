"""Unit tests for the chart renderers."""

import pytest

from chordflow.chart_compiler import ChartCompiler
from chordflow.chart_models import Bar
from chordflow.chart_renderers import (
    HtmlChartRenderer,
    PlainTextRenderer,
    get_renderer,
)
from chordflow.timeline_builder import build_timeline

CHART = "Fur & Feathers,90\nIntro,C . . .,[coda] G . Am _\nVerse,D . . .,{first line=second line}"


def _render(renderer, text: str = CHART) -> str:
    chart = ChartCompiler().compile(text)
    return renderer.render(chart=chart, timeline=build_timeline(chart.sections), tempo=90)


def test_text_bar_single_chord() -> None:
    renderer = PlainTextRenderer()
    assert renderer.bar_text(Bar(chord_def="C . . .")).rstrip() == "C"
    assert renderer.bar_text(Bar(chord_def="C . . .")) == "C".ljust(15)


def test_text_bar_segments_and_rest() -> None:
    renderer = PlainTextRenderer()
    assert renderer.bar_text(Bar(chord_def="G . Am _")) == "G".ljust(7) + " " + "Am".ljust(3) + " " + "—".ljust(3)


def test_text_bar_shows_cue() -> None:
    text = PlainTextRenderer().bar_text(Bar(chord_def="F", cue="coda"))
    assert text.endswith("[coda]")


def test_text_render_layout() -> None:
    content = _render(PlainTextRenderer())
    lines = content.splitlines()
    assert lines[0] == "Fur & Feathers (90 BPM)"
    assert lines[1] == "Intro 67%  Verse 33%"
    assert "Intro (8 beats)" in lines
    assert "  > first line" in lines
    assert "  > second line" in lines


def test_html_render_escapes_title() -> None:
    content = _render(HtmlChartRenderer())
    assert "<title>Fur &amp; Feathers</title>" in content
    assert "Fur & Feathers" not in content


def test_html_render_structure() -> None:
    content = _render(HtmlChartRenderer())
    assert content.startswith("<!DOCTYPE html>")
    assert content.count('class="macro-section"') == 2
    assert content.count('class="bar"') == 3
    assert content.count('class="single-chord"') == 2
    assert content.count('class="segment"') == 3
    assert content.count('class="pip"') == 12
    assert '<div class="cue">coda</div>' in content
    assert "<p>first line</p>" in content


def test_get_renderer() -> None:
    assert isinstance(get_renderer("text"), PlainTextRenderer)
    assert isinstance(get_renderer(" HTML "), HtmlChartRenderer)
    assert get_renderer("html").default_extension == ".html"
    with pytest.raises(ValueError):
        get_renderer("pdf")
