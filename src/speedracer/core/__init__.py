"""
Speedracer core primitives.

    errors.py    Typed error hierarchy (usage / racer / config)
    result.py    Ok / Err envelope for racer settlements
    logging.py   structlog configuration and context binding
    settings.py  RaceSettings (pydantic-settings)
"""

from speedracer.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    InvalidRacerError,
    InvalidTransitionError,
    RaceAlreadyStartedError,
    RaceNotFinishedError,
    RacerError,
    RacerFailure,
    RacerTimedOut,
    SpeedracerError,
    UsageError,
)
from speedracer.core.result import Err, Ok, Result, as_result, try_result_async

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigError",
    "InvalidRacerError",
    "InvalidTransitionError",
    "RaceAlreadyStartedError",
    "RaceNotFinishedError",
    "RacerError",
    "RacerFailure",
    "RacerTimedOut",
    "SpeedracerError",
    "UsageError",
    # Result
    "Err",
    "Ok",
    "Result",
    "as_result",
    "try_result_async",
]
