"""
Structured error types for speedracer.

Provides a small hierarchy of typed errors carrying a category and a
structured context, so that usage mistakes, racer failures and configuration
problems can be told apart by callers and by log processors.

Manifesto:
    - **Typed Error Hierarchy:** Usage, racer and config errors are distinct
    - **Contained Racer Failures:** RacerError instances are *recorded* in
      rankings, never raised out of ``RaceTrack.run()``
    - **Rich Context:** Errors carry race_id / racer metadata for logging
    - **Error Chaining:** Preserve original exceptions as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     SpeedracerError                          │
        │            (category, context, cause)                        │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  UsageError              RacerError          ConfigError     │
        │  (USAGE)                 (RACER)             (CONFIG)        │
        │     │                       │                    │           │
        │  RaceAlreadyStarted      RacerFailure        InvalidConfig   │
        │  RaceNotFinished         RacerTimedOut                       │
        │  InvalidTransition                                           │
        │  InvalidRacer                                                │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = RaceAlreadyStartedError("cannot add racer")
    >>> error.category
    <ErrorCategory.USAGE: 'USAGE'>
    >>> error.with_context(race_id="abc").context.race_id
    'abc'

Guardrails:
    ❌ DON'T: Raise RacerError from inside the coordinator
    ✅ DO: Attach it to the RaceResult of the racer it describes

    ❌ DON'T: Swallow usage errors
    ✅ DO: Fail fast at the call site that broke the race state machine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing.

    - **USAGE:** caller broke the race state machine
    - **RACER:** a racer's own work failed or ran out of time
    - **CONFIG:** invalid settings or constructor arguments
    - **INTERNAL:** everything else
    """

    USAGE = "USAGE"
    RACER = "RACER"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured context attached to a :class:`SpeedracerError`.

    Attributes:
        race_id: Identifier of the race the error belongs to
        racer: Name of the racer involved, if any
        status: Race status at the time of the error
        metadata: Additional key-value pairs
    """

    race_id: str | None = None
    racer: Any = None
    status: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["race_id", "racer", "status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SpeedracerError(Exception):
    """
    Base exception for all speedracer errors.

    Subclasses set ``default_category`` to classify themselves. Every
    instance carries:

    - **message:** human-readable description
    - **category:** :class:`ErrorCategory`
    - **context:** :class:`ErrorContext` with race metadata
    - **cause:** optional underlying exception (also set as ``__cause__``)
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SpeedracerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise RaceNotFinishedError("not yet").with_context(
                race_id=track.race_id,
                status="running",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# USAGE ERRORS (caller broke the race lifecycle)
# =============================================================================


class UsageError(SpeedracerError):
    """The caller violated the RaceTrack state machine."""

    default_category = ErrorCategory.USAGE


class RaceAlreadyStartedError(UsageError):
    """A racer was added, or ``run()`` was called, after the race started."""

    pass


class RaceNotFinishedError(UsageError):
    """Rankings were requested before ``run()`` completed."""

    pass


class InvalidTransitionError(UsageError):
    """Raised when an illegal race status transition is attempted."""

    def __init__(self, current: str, target: str, **kwargs: Any):
        self.current = current
        self.target = target
        super().__init__(f"Invalid RaceStatus transition: {current} → {target}", **kwargs)


class InvalidRacerError(UsageError):
    """The work handed to ``add_racer`` is neither awaitable nor callable."""

    pass


# =============================================================================
# RACER ERRORS (recorded in rankings, never raised by the coordinator)
# =============================================================================


class RacerError(SpeedracerError):
    """Outcome error describing why a racer did not succeed."""

    default_category = ErrorCategory.RACER


class RacerFailure(RacerError):
    """A racer returned ``Err`` with a payload that is not an exception."""

    def __init__(self, payload: Any, **kwargs: Any):
        self.payload = payload
        super().__init__(f"Racer failed: {payload!r}", **kwargs)


class RacerTimedOut(RacerError):
    """A racer had not settled when the race deadline expired."""

    def __init__(self, message: str = "Racer timed out", *, timeout: float | None = None, **kwargs: Any):
        self.timeout = timeout
        super().__init__(message, **kwargs)


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(SpeedracerError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid value for {key}: {value!r}")


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "SpeedracerError",
    # Usage
    "UsageError",
    "RaceAlreadyStartedError",
    "RaceNotFinishedError",
    "InvalidTransitionError",
    "InvalidRacerError",
    # Racer
    "RacerError",
    "RacerFailure",
    "RacerTimedOut",
    # Config
    "ConfigError",
    "InvalidConfigError",
]
