"""VoicingStrategy: Strategy pattern for mapping chord symbols to MIDI note sets."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

# ── MIDI constants ──────────────────────────────────────────────────────────
SEMITONES_PER_OCTAVE = 12

#: Pitch class of each natural note name.
NATURAL_PITCH_CLASSES: dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

_SYMBOL = re.compile(
    r"^(?P<root>[A-Ga-g])(?P<accidental>[#b]?)"
    r"(?P<quality>maj|min|m|-|dim|°)?"
    r"[^/]*"
    r"(?:/(?P<bass>[A-Ga-g])(?P<bass_accidental>[#b]?))?$"
)


def pitch_class_to_midi(pitch_class: int, octave: int) -> int:
    """
    Convert a pitch class (0-11) and an octave number to an absolute MIDI note.

    MIDI octave numbering: C-1 = 0, C0 = 12, C1 = 24, ... C4 (Middle C) = 60.
    """
    return (octave + 1) * SEMITONES_PER_OCTAVE + pitch_class


def _pitch_class(letter: str, accidental: str) -> int:
    base = NATURAL_PITCH_CLASSES[letter.upper()]
    if accidental == "#":
        base += 1
    elif accidental == "b":
        base -= 1
    return base % SEMITONES_PER_OCTAVE


@dataclass(frozen=True)
class ChordSymbol:
    """
    The playable core of a chord symbol.

    Attributes:
        root:       Pitch class of the root (0=C ... 11=B).
        chord_type: "major", "minor" or "diminished".
        bass:       Pitch class of a slash bass, or None.
    """

    root: int
    chord_type: str
    bass: int | None = None


def parse_chord_symbol(symbol: str) -> ChordSymbol | None:
    """
    Read root, triad quality and slash bass from a chord symbol.

    Extensions (``7``, ``sus4``, ``add9``) are ignored. Symbols that do not
    start with a note name return None; chord symbols are not validated.
    """
    match = _SYMBOL.match(symbol.strip())
    if not match:
        return None
    quality = match.group("quality")
    if quality in ("m", "min", "-"):
        chord_type = "minor"
    elif quality in ("dim", "°"):
        chord_type = "diminished"
    else:
        chord_type = "major"
    bass = None
    if match.group("bass"):
        bass = _pitch_class(match.group("bass"), match.group("bass_accidental"))
    return ChordSymbol(
        root=_pitch_class(match.group("root"), match.group("accidental")),
        chord_type=chord_type,
        bass=bass,
    )


@dataclass
class VoicedChord:
    """
    A chord symbol annotated with concrete MIDI note assignments.

    Attributes:
        symbol:      The parsed chord symbol.
        chord_notes: MIDI note numbers for the chord track.
        bass_notes:  MIDI note numbers for the bass, empty when not voiced.
    """

    symbol: ChordSymbol
    chord_notes: list[int] = field(default_factory=list)
    bass_notes: list[int] = field(default_factory=list)


# ── Interval tables ─────────────────────────────────────────────────────────

TRIAD_INTERVALS: dict[str, list[int]] = {
    "major": [0, 4, 7],
    "minor": [0, 3, 7],
    "diminished": [0, 3, 6],
}


# ── Abstract base ────────────────────────────────────────────────────────────

class VoicingStrategy(ABC):
    """Abstract Strategy for assigning MIDI pitches to a chord symbol."""

    CHORD_OCTAVE = 4  # Middle C octave — C4 = MIDI 60

    def _triad(self, symbol: ChordSymbol) -> list[int]:
        root_midi = pitch_class_to_midi(symbol.root, self.CHORD_OCTAVE)
        return [root_midi + iv for iv in TRIAD_INTERVALS[symbol.chord_type]]

    @abstractmethod
    def voice(self, symbol: ChordSymbol) -> VoicedChord:
        """Map a chord symbol to concrete MIDI note numbers."""


# ── Concrete strategies ──────────────────────────────────────────────────────

class TriadVoicer(VoicingStrategy):
    """Root-position triads in the Middle C octave, no bass."""

    def voice(self, symbol: ChordSymbol) -> VoicedChord:
        return VoicedChord(symbol=symbol, chord_notes=self._triad(symbol), bass_notes=[])


class TriadWithBassVoicer(VoicingStrategy):
    """
    Root-position triads plus one bass note an octave below.

    The bass plays the slash bass when the symbol has one, else the root.
    """

    BASS_OCTAVE = 2  # C2 = MIDI 36

    def voice(self, symbol: ChordSymbol) -> VoicedChord:
        bass_pc = symbol.bass if symbol.bass is not None else symbol.root
        return VoicedChord(
            symbol=symbol,
            chord_notes=self._triad(symbol),
            bass_notes=[pitch_class_to_midi(bass_pc, self.BASS_OCTAVE)],
        )
