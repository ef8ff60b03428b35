"""Renderer implementations for compiled chord charts."""

from __future__ import annotations

from abc import ABC, abstractmethod

from chordflow.chart_models import Bar, CompiledChart, Timeline
from chordflow.segment_compressor import compress, distinct_chords, is_single_chord
from chordflow.tokenizer import segment_label, tokenize


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class ChartRenderer(ABC):
    """Abstract chart renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(self, *, chart: CompiledChart, timeline: Timeline, tempo: int) -> str:
        """Render a compiled chart into a file content string."""


class PlainTextRenderer(ChartRenderer):
    """Render a chart as monospaced text, one line of bars per section."""

    BEAT_WIDTH: int = 4

    @property
    def default_extension(self) -> str:
        return ".txt"

    def bar_text(self, bar: Bar) -> str:
        """
        Lay out one bar with a fixed width per beat.

        A bar holding one chord shows a single label; otherwise each
        compressed segment gets a width proportional to its beats.
        """
        beats = tokenize(bar.chord_def)
        if is_single_chord(beats):
            body = segment_label(distinct_chords(beats)[0]).ljust(len(beats) * self.BEAT_WIDTH - 1)
        else:
            body = " ".join(
                segment_label(seg.chord).ljust(seg.length * self.BEAT_WIDTH - 1)
                for seg in compress(beats)
            )
        if bar.cue:
            body = f"{body} [{bar.cue}]"
        return body

    def render(self, *, chart: CompiledChart, timeline: Timeline, tempo: int) -> str:
        lines = [f"{chart.title} ({tempo} BPM)"]
        flow = "  ".join(
            f"{section.name} {share:.0%}"
            for section, share in zip(chart.sections, timeline.section_shares())
        )
        lines.append(flow)

        for si, section in enumerate(chart.sections):
            lines.append("")
            lines.append(f"{section.name} ({timeline.section_beat_count(si)} beats)")
            lines.append("| " + " | ".join(self.bar_text(bar) for bar in section.bars) + " |")
            for text_line in section.text_lines:
                lines.append(f"  > {text_line}")

        return "\n".join(lines) + "\n"


class HtmlChartRenderer(ChartRenderer):
    """Render a chart into a self-contained HTML page with flex-sized bars."""

    @property
    def default_extension(self) -> str:
        return ".html"

    def _bar_html(self, section_index: int, bar_index: int, bar: Bar) -> str:
        beats = tokenize(bar.chord_def)
        pips = "".join(f'<div class="pip" data-beat-index="{i}"></div>' for i in range(len(beats)))
        if is_single_chord(beats):
            label = _escape_html(segment_label(distinct_chords(beats)[0]))
            content = f'<div class="single-chord">{label}</div>'
        else:
            segments = "".join(
                f'<div class="segment" data-segment-index="{i}" style="flex-grow: {seg.length}">'
                f"{_escape_html(segment_label(seg.chord))}</div>"
                for i, seg in enumerate(compress(beats))
            )
            content = f'<div class="segment-container">{segments}</div>'
        cue = f'<div class="cue">{_escape_html(bar.cue)}</div>' if bar.cue else ""
        return (
            f'<div class="bar" data-section-index="{section_index}" data-bar-index="{bar_index}" '
            f'style="flex-grow: {len(beats)}">{cue}{content}'
            f'<div class="beat-pips">{pips}</div></div>'
        )

    def build_html(self, chart: CompiledChart, timeline: Timeline, tempo: int) -> str:
        """
        Build the page: a macro flow strip sized by section length, then one
        row of bars per section followed by its text lines.
        """
        title_safe = _escape_html(chart.title)
        macro = "".join(
            f'<div class="macro-section" data-index="{si}" style="flex-basis: {share * 100:.2f}%">'
            f"{_escape_html(section.name)}</div>"
            for si, (section, share) in enumerate(zip(chart.sections, timeline.section_shares()))
        )

        rows: list[str] = []
        for si, section in enumerate(chart.sections):
            bars = "".join(self._bar_html(si, bi, bar) for bi, bar in enumerate(section.bars))
            text = "".join(f"<p>{_escape_html(line)}</p>" for line in section.text_lines)
            text_block = f'<div class="section-text">{text}</div>' if text else ""
            rows.append(
                f'  <section data-index="{si}">\n'
                f"    <h2>{_escape_html(section.name)}</h2>\n"
                f'    <div class="micro-row">{bars}</div>\n'
                f"    {text_block}\n"
                f"  </section>"
            )
        body = "\n".join(rows)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    *, *::before, *::after {{ box-sizing: border-box; }}
    body {{
      font-family: system-ui, sans-serif;
      background: #f0f0f0;
      margin: 0;
      padding: 2rem;
    }}
    .macro-flow, .micro-row, .segment-container, .beat-pips {{ display: flex; }}
    .macro-section {{
      border: 1px solid #bbb;
      padding: 0.25rem;
      text-align: center;
      overflow: hidden;
    }}
    .bar {{
      flex-basis: 0;
      min-width: 4rem;
      background: #fff;
      border: 1px solid #d8d8d8;
      margin: 0 0.25rem 0.5rem 0;
      padding: 0.5rem;
    }}
    .segment {{ flex-basis: 0; }}
    .pip {{
      width: 0.5rem;
      height: 0.5rem;
      margin: 0.25rem 0.25rem 0 0;
      border-radius: 50%;
      background: #ccc;
    }}
    .cue {{ font-size: 0.75rem; color: #a33; }}
    @media print {{
      body {{
        background: #fff;
        padding: 0;
      }}
      section {{ page-break-inside: avoid; }}
    }}
  </style>
</head>
<body>
  <h1>{title_safe}</h1>
  <p class="tempo">{tempo} BPM</p>
  <div class="macro-flow">{macro}</div>
{body}
</body>
</html>"""

    def render(self, *, chart: CompiledChart, timeline: Timeline, tempo: int) -> str:
        return self.build_html(chart, timeline, tempo)


def get_renderer(output_format: str) -> ChartRenderer:
    """
    Return the renderer for ``text`` or ``html``.

    Raises:
        ValueError: If the format is not supported.
    """
    normalized = output_format.strip().lower()
    if normalized == "text":
        return PlainTextRenderer()
    if normalized == "html":
        return HtmlChartRenderer()
    raise ValueError(f"Unsupported output format '{output_format}'. Use one of: html, text.")
