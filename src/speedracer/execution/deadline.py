"""Shared race deadline.

A race has exactly one deadline, measured on the monotonic clock from the
moment ``RaceTrack.run()`` starts its racers. This module normalises the
caller-supplied duration into seconds and provides the clock every racer's
duration is measured against.

Examples:
    >>> to_seconds(timedelta(milliseconds=300))
    0.3
    >>> deadline = Deadline.start(0.3)
    >>> deadline.remaining() <= 0.3
    True

Guardrails:
    - Zero and negative durations are accepted; they expire immediately
    - ``bool`` is rejected even though it is an ``int`` subclass
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import timedelta

from speedracer.core.errors import InvalidConfigError

DurationLike = float | int | timedelta


def to_seconds(duration: DurationLike) -> float:
    """Convert a duration given as seconds or ``timedelta`` into float seconds.

    Raises:
        InvalidConfigError: If ``duration`` is not a number or timedelta,
            or is NaN.
    """
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise InvalidConfigError(
            "deadline",
            duration,
            f"Deadline must be seconds or a timedelta, got {type(duration).__name__}",
        )
    seconds = float(duration)
    if math.isnan(seconds):
        raise InvalidConfigError("deadline", duration, "Deadline must not be NaN")
    return seconds


@dataclass
class Deadline:
    """Deadline state for one race.

    Attributes:
        timeout_seconds: Configured duration in seconds
        start_time: Monotonic timestamp the race started at
    """

    timeout_seconds: float
    start_time: float = field(default_factory=time.monotonic)

    @classmethod
    def start(cls, timeout_seconds: float) -> Deadline:
        return cls(timeout_seconds=timeout_seconds)

    @property
    def expires_at(self) -> float:
        """Absolute monotonic timestamp of expiry."""
        return self.start_time + self.timeout_seconds

    def remaining(self) -> float:
        """Seconds left until expiry, never negative."""
        return max(self.expires_at - time.monotonic(), 0.0)

    @property
    def elapsed(self) -> float:
        """Elapsed time since start in seconds."""
        return time.monotonic() - self.start_time

    def elapsed_at(self, timestamp: float) -> float:
        """Seconds between race start and ``timestamp``."""
        return timestamp - self.start_time


__all__ = ["Deadline", "DurationLike", "to_seconds"]
