"""TimelineBuilder: flattens compiled sections into a beat-indexed timeline."""

import logging
from collections.abc import Sequence

from chordflow.chart_models import Section, Timeline, TimelineEntry
from chordflow.tokenizer import tokenize

logger = logging.getLogger(__name__)


def build_timeline(sections: Sequence[Section]) -> Timeline:
    """
    Build the flat timeline and its offset tables in a single pass.

    Sections, bars and beats are visited in document order. The result is
    always a fresh object; timelines are never patched in place.
    """
    timeline = Timeline()
    global_index = 0

    for si, section in enumerate(sections):
        timeline.section_offsets.append(global_index)
        offsets: list[int] = []
        for bi, bar in enumerate(section.bars):
            offsets.append(global_index)
            for beat_index, chord in enumerate(tokenize(bar.chord_def)):
                timeline.entries.append(
                    TimelineEntry(
                        section_index=si,
                        bar_index=bi,
                        beat_index=beat_index,
                        chord=chord,
                    )
                )
                global_index += 1
        timeline.bar_offsets.append(offsets)

    logger.debug("Built timeline: %d beats in %d sections", global_index, len(sections))
    return timeline
