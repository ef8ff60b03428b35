"""ChordFlow: chord chart compiler and fixed-tempo playback clock."""

__version__ = "0.1.0"
