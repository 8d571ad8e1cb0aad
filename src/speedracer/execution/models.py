"""Race domain models.

Defines the data structures shared by the coordinator and its callers:
- Racer: a registered, not-yet-started unit of async work
- RaceResult: the classified outcome of one racer
- RaceSummary: aggregate view of a finished race
- RaceStatus: the NOT_STARTED → RUNNING → FINISHED state machine
"""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Union

from speedracer.core.errors import InvalidRacerError, InvalidTransitionError, SpeedracerError

Work = Union[Awaitable[Any], Callable[[], Awaitable[Any]]]


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


class RaceStatus(str, Enum):
    """Lifecycle of a RaceTrack.

    Valid transition graph::

        NOT_STARTED → RUNNING
        RUNNING     → FINISHED
        FINISHED    → (terminal)
    """

    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"


RACE_VALID_TRANSITIONS: dict[RaceStatus, frozenset[RaceStatus]] = {
    RaceStatus.NOT_STARTED: frozenset({RaceStatus.RUNNING}),
    RaceStatus.RUNNING: frozenset({RaceStatus.FINISHED}),
    RaceStatus.FINISHED: frozenset(),  # terminal
}


def validate_race_transition(current: RaceStatus, target: RaceStatus) -> None:
    """Raise :class:`InvalidTransitionError` if *current → target* is illegal.

    Example:
        >>> validate_race_transition(RaceStatus.RUNNING, RaceStatus.FINISHED)
        >>> # OK — no exception
        >>> validate_race_transition(RaceStatus.FINISHED, RaceStatus.RUNNING)
        InvalidTransitionError: Invalid RaceStatus transition: finished → running
    """
    allowed = RACE_VALID_TRANSITIONS.get(current, frozenset())
    if target not in allowed:
        raise InvalidTransitionError(current.value, target.value)


class Outcome(str, Enum):
    """Terminal classification of a racer."""

    SUCCESS = "success"
    FAILURE = "failure"
    DISQUALIFIED = "disqualified"


@dataclass
class Racer:
    """A named unit of deferred async work.

    ``work`` is either an awaitable that has not been awaited yet, or a
    zero-argument callable producing one. The name is an opaque tag.
    """

    name: Any
    work: Work
    index: int = 0

    def __post_init__(self) -> None:
        if not (inspect.isawaitable(self.work) or callable(self.work)):
            raise InvalidRacerError(
                f"Racer {self.name!r} work must be awaitable or a zero-argument callable, "
                f"got {type(self.work).__name__}"
            )

    def start(self) -> Awaitable[Any]:
        """Produce the awaitable to drive. Called once, when the race starts."""
        if inspect.isawaitable(self.work):
            return self.work
        awaitable = self.work()
        if not inspect.isawaitable(awaitable):
            raise InvalidRacerError(
                f"Racer {self.name!r} work returned {type(awaitable).__name__}, not an awaitable"
            )
        return awaitable


@dataclass(frozen=True)
class RaceResult:
    """The rank and disqualification status of a racer after the race."""

    name: Any
    outcome: Outcome
    finish_order: int | None = None
    duration: float = 0.0
    value: Any = None
    error: Exception | None = None

    @property
    def disqualified(self) -> bool:
        """True iff the racer had not settled by the deadline."""
        return self.outcome is Outcome.DISQUALIFIED

    @property
    def finished(self) -> bool:
        return not self.disqualified

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAILURE

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging / API responses."""
        return {
            "name": self.name,
            "outcome": self.outcome.value,
            "disqualified": self.disqualified,
            "finish_order": self.finish_order,
            "duration_seconds": self.duration,
            "value": self.value,
            "error": _error_dict(self.error),
        }


def _error_dict(error: Exception | None) -> dict[str, Any] | None:
    if error is None:
        return None
    if isinstance(error, SpeedracerError):
        return error.to_dict()
    return {"error_type": type(error).__name__, "message": str(error)}


@dataclass
class RaceSummary:
    """Aggregate result of a finished race."""

    race_id: str
    deadline_seconds: float
    results: list[RaceResult] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        """Number of racers that finished successfully."""
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        """Number of racers that finished with a failure."""
        return sum(1 for r in self.results if r.failed)

    @property
    def disqualified(self) -> int:
        """Number of racers that missed the deadline."""
        return sum(1 for r in self.results if r.disqualified)

    @property
    def winner(self) -> RaceResult | None:
        """First racer to settle, successful or not."""
        if self.results and self.results[0].finished:
            return self.results[0]
        return None

    @property
    def duration_seconds(self) -> float | None:
        """Wall-clock duration of the race if both timestamps are set."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging / API responses."""
        return {
            "race_id": self.race_id,
            "deadline_seconds": self.deadline_seconds,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "disqualified": self.disqualified,
            "duration_seconds": self.duration_seconds,
            "rankings": [r.to_dict() for r in self.results],
        }


__all__ = [
    "Outcome",
    "RACE_VALID_TRANSITIONS",
    "RaceResult",
    "RaceStatus",
    "RaceSummary",
    "Racer",
    "Work",
    "utcnow",
    "validate_race_transition",
]
