"""Segment compression: run-length encoding of a bar's beat tokens."""

from chordflow.chart_models import Segment


def compress(beats: list[str]) -> list[Segment]:
    """
    Merge consecutive identical tokens into segments.

    The segment lengths always sum to ``len(beats)``; an empty bar yields no
    segments.

    Example:
        >>> compress(["C", "C", "G", "G", "G"])
        [Segment(chord='C', length=2), Segment(chord='G', length=3)]
    """
    segments: list[Segment] = []
    if not beats:
        return segments

    current = beats[0]
    length = 1
    for token in beats[1:]:
        if token == current:
            length += 1
            continue
        segments.append(Segment(chord=current, length=length))
        current = token
        length = 1
    segments.append(Segment(chord=current, length=length))
    return segments


def active_segment_index(segments: list[Segment], beat_index: int) -> int | None:
    """
    Index of the segment that contains *beat_index*.

    Returns None when the beat lies outside the bar.
    """
    if beat_index < 0:
        return None
    accumulated = 0
    for index, segment in enumerate(segments):
        accumulated += segment.length
        if beat_index < accumulated:
            return index
    return None


def distinct_chords(beats: list[str]) -> list[str]:
    """Distinct non-empty tokens in first-seen order."""
    seen: list[str] = []
    for token in beats:
        if token and token not in seen:
            seen.append(token)
    return seen


def is_single_chord(beats: list[str]) -> bool:
    """True when the bar can be drawn as one label instead of segments."""
    return len(distinct_chords(beats)) == 1
