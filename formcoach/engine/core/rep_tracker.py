"""
Rep/Cycle Tracker for FormCoach.

Counts repetitions by watching the cycle index of the active exercise time.
A rep is complete each time elapsed time crosses a multiple of the cycle
duration. The tracker is single-writer: one instance per session.
"""

from typing import Callable, Optional
import logging
import math

logger = logging.getLogger(__name__)


class CycleTracker:
    """
    Detects cycle wraparound.

    The caller must feed monotonic active-exercise time (rest intervals
    excluded); a decreasing input is not guarded against.

    Example:
        >>> tracker = CycleTracker(cycle_duration=6.0)
        >>> tracker.update(5.9)
        False
        >>> tracker.update(6.1)
        True
    """

    def __init__(
        self,
        cycle_duration: float,
        on_rep_complete: Optional[Callable[[int], None]] = None
    ):
        self._cycle_duration = float(cycle_duration)
        self._on_rep_complete = on_rep_complete
        self._last_cycle_index = 0
        self._rep_count = 0

    @property
    def cycle_duration(self) -> float:
        return self._cycle_duration

    @property
    def last_cycle_index(self) -> int:
        return self._last_cycle_index

    @property
    def rep_count(self) -> int:
        return self._rep_count

    def cycle_index(self, elapsed: float) -> int:
        """Index of the cycle containing `elapsed`."""
        return math.floor(elapsed / self._cycle_duration)

    def update(self, elapsed: float) -> bool:
        """
        Observe an elapsed time.

        Returns:
            bool: True if a repetition boundary was crossed.
        """
        if self._cycle_duration <= 0:
            return False

        current = self.cycle_index(elapsed)
        if current <= self._last_cycle_index:
            return False

        self._last_cycle_index = current
        self._rep_count += 1
        logger.info(f"[REP] Rep {self._rep_count} complete (cycle index {current})")

        if self._on_rep_complete:
            self._on_rep_complete(self._rep_count)
        return True

    def reset(self) -> None:
        """Reset to the initial state."""
        self._last_cycle_index = 0
        self._rep_count = 0
