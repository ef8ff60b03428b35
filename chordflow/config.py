"""Runtime settings shared by the compiler, the clock and the CLI."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChordFlowSettings:
    """
    Defaults applied when a chart or the user leaves a value unspecified.

    Attributes:
        default_bpm:    Tempo used when the tempo setting is missing or not numeric.
        count_in_beats: Length of the lead-in played by ``start()``.
        default_title:  Title shown when the chart has no metadata row.
        header_labels:  Lower-cased first-cell values that mark a header row.
    """

    default_bpm: int = 120
    count_in_beats: int = 4
    default_title: str = "Title"
    header_labels: tuple[str, ...] = ("section", "sektion")


DEFAULT_SETTINGS = ChordFlowSettings()
