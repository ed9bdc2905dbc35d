"""
Coaching speech gate for FormCoach.

The engine never talks to an audio device. Sessions emit SpeechCommand
values and the caller hands them to whatever speech backend it owns.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class SpeechPriority(Enum):
    """How a speech backend should treat a command."""
    COACHING = "coaching"      # may be dropped while something else is playing
    ANNOUNCEMENT = "announcement"  # rep / rest / countdown cues


@dataclass(frozen=True)
class SpeechCommand:
    """
    Request to speak a text.

    Attributes:
        text: Utterance.
        delay_seconds: Debounce delay before speaking; a newer command
            replaces a pending one.
        priority: Coaching or announcement.
    """
    text: str
    delay_seconds: float = 0.0
    priority: SpeechPriority = SpeechPriority.COACHING


class SpeechGate:
    """
    De-duplicates coaching speech.

    The same text is never emitted twice in a row.
    """

    def __init__(self, debounce_seconds: float = 2.0):
        self._debounce_seconds = debounce_seconds
        self._last_text: Optional[str] = None

    @property
    def last_text(self) -> Optional[str]:
        return self._last_text

    def request(self, text: Optional[str], delay_seconds: Optional[float] = None) -> Optional[SpeechCommand]:
        """
        Turn a text into a speech command, or None if it would repeat.

        Args:
            text: Text to speak; None or empty emits nothing.
            delay_seconds: Override of the default debounce delay.
        """
        if not text or text == self._last_text:
            return None

        self._last_text = text
        delay = self._debounce_seconds if delay_seconds is None else delay_seconds
        logger.debug(f"[SPEECH] Queue '{text}' (delay={delay}s)")
        return SpeechCommand(text=text, delay_seconds=delay)

    def reset(self) -> None:
        self._last_text = None


def announcement(text: str) -> SpeechCommand:
    """Immediate announcement, never de-duplicated."""
    return SpeechCommand(text=text, delay_seconds=0.0, priority=SpeechPriority.ANNOUNCEMENT)
