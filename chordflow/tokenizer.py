"""Tokenizer: expands one bar's chord definition into per-beat chord tokens."""

import re

HOLD_MARKER = "."
REST_MARKER = "_"

#: Label shown for rest segments in rendered charts.
REST_LABEL = "—"

_WHITESPACE = re.compile(r"\s+")


def tokenize(chord_def: str) -> list[str]:
    """
    Split a chord definition into one token per beat.

    ``.`` repeats the most recent chord or rest, ``_`` is a rest and anything
    else is a chord symbol kept verbatim. ``..`` counts as two holds. A hold
    with nothing before it resolves to ``""``. No padding is applied, so the
    bar length is exactly the number of tokens.

    Examples:
        >>> tokenize("C . . G")
        ['C', 'C', 'C', 'G']
        >>> tokenize("_ C . _")
        ['_', 'C', 'C', '_']
    """
    normalized = chord_def.replace(HOLD_MARKER * 2, f"{HOLD_MARKER} {HOLD_MARKER}")
    beats: list[str] = []
    last = ""
    for raw in _WHITESPACE.split(normalized):
        if not raw:
            continue
        if raw == HOLD_MARKER:
            beats.append(last)
        else:
            last = raw
            beats.append(raw)
    return beats


def beat_count(chord_def: str) -> int:
    return len(tokenize(chord_def))


def display_chord(token: str) -> str:
    """Current-chord display text: rests and indeterminate beats are blank."""
    return "" if token == REST_MARKER else token


def segment_label(token: str) -> str:
    """Label for a rendered segment: rests become a dash."""
    return REST_LABEL if token == REST_MARKER else token
