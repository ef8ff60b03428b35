"""MidiExporter: writes a compiled chart as a play-along MIDI file."""

import logging

from midiutil import MIDIFile

from chordflow.chart_models import CompiledChart, Timeline
from chordflow.segment_compressor import compress
from chordflow.tokenizer import tokenize
from chordflow.voicing_strategy import TriadVoicer, VoicingStrategy, parse_chord_symbol

logger = logging.getLogger(__name__)

# midiutil writes Format 1 files with its own tempo track in front of these.
TRACK_CHORDS = 0
TRACK_BASS = 1
TRACK_CLICK = 2

CHANNEL_CHORDS = 0
CHANNEL_BASS = 1
CHANNEL_CLICK = 9  # General MIDI percussion channel

CLICK_ACCENT_PITCH = 76  # Hi Wood Block
CLICK_PITCH = 77         # Low Wood Block


class MidiExporter:
    """
    Writes a chart's timeline to a Standard MIDI File.

    Track layout (Format 1, 3 data tracks after the tempo track)
    -----------------------------------------------------------
    Chords — one triad per compressed segment, held for the segment's beats.
        Rests, indeterminate beats and symbols that do not start with a note
        name are silent.

    Bass   — bass notes from the voicing strategy, if any.

    Click  — one click per beat on the percussion channel, the first beat of
        every bar accented, preceded by the count-in.

    One timeline beat is one MIDI beat (quarter note).
    """

    DEFAULT_VELOCITY = 80
    BASS_VELOCITY = 68
    CLICK_ACCENT_VELOCITY = 110
    CLICK_VELOCITY = 70

    def __init__(
        self,
        tempo: int,
        voicer: VoicingStrategy | None = None,
        count_in_beats: int = 4,
        velocity: int = DEFAULT_VELOCITY,
    ) -> None:
        """
        Args:
            tempo:          Playback tempo in beats per minute.
            voicer:         Strategy used to voice chord symbols.
            count_in_beats: Clicks written before the first chart beat.
            velocity:       MIDI note-on velocity for chord notes.
        """
        self.tempo = tempo
        self.voicer = voicer if voicer is not None else TriadVoicer()
        self.count_in_beats = count_in_beats
        self.velocity = velocity

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _add_click(self, midi: MIDIFile, time: float, accent: bool) -> None:
        midi.addNote(
            track=TRACK_CLICK,
            channel=CHANNEL_CLICK,
            pitch=CLICK_ACCENT_PITCH if accent else CLICK_PITCH,
            time=time,
            duration=0.25,
            volume=self.CLICK_ACCENT_VELOCITY if accent else self.CLICK_VELOCITY,
        )

    def _add_segment(self, midi: MIDIFile, chord: str, time: float, length: int) -> bool:
        symbol = parse_chord_symbol(chord)
        if symbol is None:
            return False
        voiced = self.voicer.voice(symbol)
        for pitch in voiced.bass_notes:
            midi.addNote(
                track=TRACK_BASS,
                channel=CHANNEL_BASS,
                pitch=pitch,
                time=time,
                duration=length,
                volume=self.BASS_VELOCITY,
            )
        for pitch in voiced.chord_notes:
            midi.addNote(
                track=TRACK_CHORDS,
                channel=CHANNEL_CHORDS,
                pitch=pitch,
                time=time,
                duration=length,
                volume=self.velocity,
            )
        return True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, chart: CompiledChart, timeline: Timeline) -> MIDIFile:
        """Build the MIDI document in memory."""
        midi = MIDIFile(numTracks=3, removeDuplicates=False, deinterleave=False)
        midi.addTempo(TRACK_CHORDS, 0, self.tempo)
        midi.addTrackName(TRACK_CHORDS, 0, "Chords")
        midi.addTrackName(TRACK_BASS, 0, "Bass")
        midi.addTrackName(TRACK_CLICK, 0, "Click")

        for beat in range(self.count_in_beats):
            self._add_click(midi, beat, accent=beat == 0)

        skipped = 0
        for si, section in enumerate(chart.sections):
            for bi, bar in enumerate(section.bars):
                start = self.count_in_beats + timeline.position_of(si, bi)
                beats = tokenize(bar.chord_def)
                for beat_index in range(len(beats)):
                    self._add_click(midi, start + beat_index, accent=beat_index == 0)

                offset = 0
                for segment in compress(beats):
                    if segment.chord and not self._add_segment(
                        midi, segment.chord, start + offset, segment.length
                    ):
                        skipped += 1
                    offset += segment.length

        if skipped:
            logger.debug("Left %d segment(s) silent (rests or unknown symbols)", skipped)
        return midi

    def export(self, chart: CompiledChart, timeline: Timeline, output_path: str) -> None:
        """
        Render the chart to a Standard MIDI File.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        midi = self.build(chart, timeline)
        with open(output_path, "wb") as f:
            midi.writeFile(f)
        logger.info("Wrote %d beat(s) to %s", len(timeline), output_path)
