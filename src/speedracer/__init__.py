"""
Speedracer - race awaitables against a shared deadline and rank them.

    >>> track = RaceTrack.disqualify_after(0.3)
    >>> track.add_racer("Racer #1", fast_lap)
    >>> track.add_racer("Racer #2", slow_lap)
    >>> await track.run()
    >>> [r.name for r in track.rankings()]
    ['Racer #1', 'Racer #2']
"""

__version__ = "0.1.0"

from speedracer.core.errors import (
    RaceAlreadyStartedError,
    RaceNotFinishedError,
    RacerError,
    RacerTimedOut,
    SpeedracerError,
    UsageError,
)
from speedracer.core.result import Err, Ok, Result
from speedracer.execution.models import Outcome, RaceResult, RaceStatus, RaceSummary
from speedracer.execution.track import RaceTrack

__all__ = [
    "Err",
    "Ok",
    "Outcome",
    "RaceAlreadyStartedError",
    "RaceNotFinishedError",
    "RaceResult",
    "RaceStatus",
    "RaceSummary",
    "RaceTrack",
    "RacerError",
    "RacerTimedOut",
    "Result",
    "SpeedracerError",
    "UsageError",
    "__version__",
]
