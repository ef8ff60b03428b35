"""Metronome: best-effort audio feedback for clock ticks."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Metronome:
    """
    Forwards clock ticks to a sound sink while enabled.

    The sink is whatever makes the click (a terminal bell, an audio device
    callback, a test recorder). Sink failures are logged and swallowed; the
    visual timeline keeps running without sound.

    Usage:
        metronome = Metronome(sink=play_click)
        clock.on_event("tick", metronome.tick)
    """

    def __init__(self, sink: Callable[[], None], enabled: bool = True) -> None:
        self.sink = sink
        self.enabled = enabled

    def toggle(self) -> bool:
        """Flip the on/off state and return the new state."""
        self.enabled = not self.enabled
        logger.debug("Metronome %s", "on" if self.enabled else "off")
        return self.enabled

    def tick(self) -> None:
        if not self.enabled:
            return
        try:
            self.sink()
        except Exception:
            logger.debug("Metronome sink unavailable", exc_info=True)
