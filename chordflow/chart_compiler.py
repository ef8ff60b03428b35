"""ChartCompiler: turns delimited chart text into sections and bars."""

from __future__ import annotations

import csv
import logging
import re

from chordflow.chart_models import Bar, CompiledChart, Section, SectionAnnotation
from chordflow.config import DEFAULT_SETTINGS, ChordFlowSettings
from chordflow.tokenizer import beat_count

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class ChartInputError(ValueError):
    """Raised when chart text is empty or contains no usable sections."""


def parse_leading_int(value: object) -> int | None:
    """
    Read an integer prefix the way a lenient form field would.

    ``"96"`` and ``"96 bpm"`` both give 96; ``"fast"``, ``""`` and None give None.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def detect_delimiter(first_row: str) -> str:
    """Semicolon when the first row has one and no comma, otherwise comma."""
    if ";" in first_row and "," not in first_row:
        return ";"
    return ","


def split_rows(text: str) -> list[list[str]]:
    """
    Split chart text into rows of trimmed cells.

    Quoted fields may contain the delimiter. Each line is parsed on its own,
    so an unterminated quote ends with its row. Blank lines become empty rows.
    """
    lines = text.strip().splitlines()
    if not lines:
        return []
    delimiter = detect_delimiter(lines[0])
    rows: list[list[str]] = []
    for line in lines:
        cells = next(csv.reader([line], delimiter=delimiter, skipinitialspace=True), [])
        rows.append([cell.strip() for cell in cells])
    return rows


class ChartCompiler:
    """
    Compile raw chart text into a :class:`CompiledChart`.

    Input format
    ------------
    One row per section; the first cell names the section and every following
    cell is one bar, e.g. ``Verse,G . Am .,C . . .``. Optional extras:

    - A leading ``title,tempo`` metadata row (second cell numeric).
    - A header row whose first cell is one of the configured header labels.
    - ``[cue]`` inside a bar cell: a short annotation for that bar.
    - A trailing ``{line one=line two}`` cell: text lines for the whole section.
    - ``{lyric}`` inside a bar cell: older lyric syntax, collected into the
      section text when no trailing text cell is present.

    A blank bar cell ends the section's bars. Bars without beats and sections
    without bars are dropped.
    """

    _CUE = re.compile(r"\[([^\]]*)\]")

    def __init__(self, settings: ChordFlowSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _take_metadata(self, rows: list[list[str]]) -> tuple[str, int | None]:
        """Consume a leading ``title,tempo`` row if present."""
        if rows and len(rows[0]) > 1:
            tempo = parse_leading_int(rows[0][1])
            if tempo is not None:
                title = rows.pop(0)[0]
                return title, tempo if tempo > 0 else None
        return "", None

    def _skip_header(self, rows: list[list[str]]) -> None:
        if rows and rows[0] and rows[0][0].strip().lower() in self.settings.header_labels:
            rows.pop(0)

    def _split_section_text(self, cells: list[str]) -> tuple[list[str], SectionAnnotation | None]:
        """
        Separate a trailing ``{a=b=c}`` cell from the bar cells.

        Returns the remaining bar cells (without the name cell) and the
        annotation, if any.
        """
        end = len(cells)
        while end > 1 and not cells[end - 1]:
            end -= 1

        last = cells[end - 1] if end > 1 else ""
        if len(last) >= 2 and last.startswith("{") and last.endswith("}"):
            inner = last[1:-1]
            annotation: SectionAnnotation | None = None
            if inner.strip():
                annotation = SectionAnnotation(lines=tuple(line.strip() for line in inner.split("=")))
            return cells[1 : end - 1], annotation
        return cells[1:end], None

    def _parse_bar_cell(self, cell: str) -> tuple[Bar, str | None]:
        """Extract the cue and any inline lyric from one bar cell."""
        text = cell
        cue: str | None = None
        match = self._CUE.search(text)
        if match:
            cue = match.group(1).strip() or None
            text = text[: match.start()] + text[match.end() :]

        lyric: str | None = None
        brace_start = text.find("{")
        brace_end = text.rfind("}")
        if 0 <= brace_start < brace_end:
            lyric = text[brace_start + 1 : brace_end].strip()
            text = text[:brace_start] + text[brace_end + 1 :]

        return Bar(chord_def=text.strip(), cue=cue), lyric

    def _parse_section(self, row_index: int, cells: list[str]) -> Section | None:
        name = (cells[0] if cells else "").strip() or f"Section {row_index}"
        bar_cells, annotation = self._split_section_text(cells) if cells else ([], None)

        bars: list[Bar] = []
        lyrics: list[str] = []
        for cell in bar_cells:
            if not cell:
                break
            bar, lyric = self._parse_bar_cell(cell)
            if beat_count(bar.chord_def) == 0:
                logger.debug("Dropping bar without beats in section %r: %r", name, cell)
                continue
            bars.append(bar)
            if lyric:
                lyrics.append(lyric)

        if not bars:
            return None
        if annotation is None and lyrics:
            annotation = SectionAnnotation(lines=tuple(lyrics))
        return Section(name=name, bars=tuple(bars), annotation=annotation)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile(self, raw_text: str) -> CompiledChart:
        """
        Compile chart text.

        Args:
            raw_text: Delimited chart text (comma or semicolon separated).

        Returns:
            CompiledChart with the title (placeholder if absent), the tempo
            from the metadata row (None if absent) and the kept sections.

        Raises:
            ChartInputError: If the text is blank or yields no sections.
        """
        if not raw_text or not raw_text.strip():
            raise ChartInputError("Chart text is empty. Paste or load chart data first.")

        rows = split_rows(raw_text)
        title, tempo = self._take_metadata(rows)
        self._skip_header(rows)

        sections: list[Section] = []
        for row_index, cells in enumerate(rows):
            section = self._parse_section(row_index, cells)
            if section is not None:
                sections.append(section)

        if not sections:
            raise ChartInputError("No sections found. Check the chart format.")

        logger.info(
            "Compiled chart %r: %d section(s), %d bar(s)",
            title or self.settings.default_title,
            len(sections),
            sum(len(section.bars) for section in sections),
        )
        return CompiledChart(
            title=title.strip() or self.settings.default_title,
            tempo=tempo,
            sections=tuple(sections),
        )
