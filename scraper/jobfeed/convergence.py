from __future__ import annotations
from enum import Enum
from typing import Any, Optional

_UNSET = object()


class Progress(str, Enum):
    PROGRESSED = "progressed"
    STALLED = "stalled"


class ConvergenceDetector:
    """Counts consecutive advance cycles whose progress signal did not change.

    The signal is opaque (card count, container height, ...) and only compared
    for equality with the previous sample.
    """

    def __init__(self, threshold: int = 3):
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.threshold = threshold
        self.stalls = 0
        self._previous: Any = _UNSET

    def reset(self, baseline: Any = _UNSET) -> None:
        self.stalls = 0
        self._previous = baseline

    def prime(self, baseline: Any) -> None:
        self._previous = baseline

    def observe(self, signal: Any) -> Progress:
        previous, self._previous = self._previous, signal
        if previous is not _UNSET and signal == previous:
            self.stalls += 1
            return Progress.STALLED
        self.stalls = 0
        return Progress.PROGRESSED

    def mark_progress(self, signal: Optional[Any] = None) -> None:
        # New records were admitted even if the signal did not move (virtualized lists)
        self.stalls = 0
        if signal is not None:
            self._previous = signal

    def should_stop(self) -> bool:
        return self.stalls >= self.threshold


__all__ = ["Progress", "ConvergenceDetector"]
