"""Data models for compiled chord charts and their playback timeline."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Bar:
    """One measure: a raw per-beat token string and an optional cue."""

    chord_def: str
    cue: str | None = None


@dataclass(frozen=True)
class SectionAnnotation:
    """Display lines attached to a whole section (lyrics, cues)."""

    lines: tuple[str, ...]


@dataclass(frozen=True)
class Section:
    """A named chart division holding its bars in document order."""

    name: str
    bars: tuple[Bar, ...]
    annotation: SectionAnnotation | None = None

    @property
    def text_lines(self) -> tuple[str, ...]:
        return self.annotation.lines if self.annotation is not None else ()


@dataclass(frozen=True)
class CompiledChart:
    """Result of compiling raw chart text."""

    title: str
    tempo: int | None
    sections: tuple[Section, ...]


@dataclass(frozen=True)
class TimelineEntry:
    """One global beat of the flattened chart."""

    section_index: int
    bar_index: int
    beat_index: int
    chord: str


@dataclass(frozen=True)
class Segment:
    """A maximal run of identical consecutive beat tokens within a bar."""

    chord: str
    length: int


@dataclass
class Timeline:
    """
    Flat beat sequence plus offset tables for constant-time seeking.

    Attributes:
        entries:         Every beat of the chart in playback order.
        section_offsets: Global index of each section's first beat.
        bar_offsets:     Global index of each bar's first beat, per section.
    """

    entries: list[TimelineEntry] = field(default_factory=list)
    section_offsets: list[int] = field(default_factory=list)
    bar_offsets: list[list[int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def entry_at(self, index: int) -> TimelineEntry | None:
        """Return the entry at *index*, or None when it lies outside the timeline."""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    def position_of(self, section_index: int, bar_index: int = 0) -> int:
        """
        Global index of the first beat of a bar.

        Raises:
            IndexError: If the section or bar does not exist.
        """
        return self.bar_offsets[section_index][bar_index]

    def section_beat_count(self, section_index: int) -> int:
        start = self.section_offsets[section_index]
        if section_index + 1 < len(self.section_offsets):
            return self.section_offsets[section_index + 1] - start
        return len(self.entries) - start

    def section_shares(self) -> list[float]:
        """Fraction of all beats that each section occupies (0.0 for an empty timeline)."""
        total = len(self.entries)
        if not total:
            return [0.0 for _ in self.section_offsets]
        return [self.section_beat_count(si) / total for si in range(len(self.section_offsets))]


@dataclass(frozen=True)
class BeatSnapshot:
    """
    Everything a renderer needs to highlight the current beat.

    Attributes:
        position:       Global timeline index.
        section_index:  Section containing the beat.
        bar_index:      Bar within that section.
        beat_index:     Beat within that bar.
        chord:          Resolved token (rest marker kept, ``""`` when indeterminate).
        display_chord:  Chord as shown in the current-chord display (rests blank).
        segment_index:  Index of the compressed segment containing the beat.
        cue:            The bar's cue annotation, if any.
    """

    position: int
    section_index: int
    bar_index: int
    beat_index: int
    chord: str
    display_chord: str
    segment_index: int | None
    cue: str | None = None
