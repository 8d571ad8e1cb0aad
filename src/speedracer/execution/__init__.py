"""
Race execution.

    track.py     RaceTrack coordinator (asyncio)
    models.py    Racer / RaceResult / RaceSummary / RaceStatus
    deadline.py  Shared deadline clock
"""

from speedracer.execution.deadline import Deadline, to_seconds
from speedracer.execution.models import (
    Outcome,
    RaceResult,
    RaceStatus,
    RaceSummary,
    Racer,
    validate_race_transition,
)
from speedracer.execution.track import RaceTrack

__all__ = [
    "Deadline",
    "Outcome",
    "RaceResult",
    "RaceStatus",
    "RaceSummary",
    "RaceTrack",
    "Racer",
    "to_seconds",
    "validate_race_transition",
]
