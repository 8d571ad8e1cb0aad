"""
Result envelope for racer settlements.

Provides a typed Result[T] pattern that makes a racer's success or failure
explicit. Racer work may either raise or return a value; the coordinator
normalises both shapes into ``Ok`` / ``Err`` before recording them, so that
one failing racer never surfaces as an exception from the race itself.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[T]      │     Utilities           │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: Exc    │ • as_result()           │
        │ • is_ok()       │ • is_err()      │ • try_result_async()    │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> from speedracer.core.result import Ok, Err
    >>> Ok(10).is_ok()
    True
    >>> match Err(ValueError("oops")):
    ...     case Err(error):
    ...         print(error)
    oops

    Racers may return results directly:

    >>> async def racer():
    ...     return Err(ValueError("bad lap"))

Guardrails:
    ✅ DO: Use pattern matching to pull the value or error out
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from speedracer.core.errors import RacerFailure


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Examples:
        >>> ok = Ok(42)
        >>> ok.is_ok()
        True
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    Examples:
        >>> err = Err(ValueError("Invalid input"))
        >>> err.is_err()
        True
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[T]


# =============================================================================
# RESULT CONSTRUCTORS AND UTILITIES
# =============================================================================


def as_result(value: Any) -> Result[Any]:
    """
    Normalise whatever a racer returned into a Result.

    ``Ok`` passes through, plain values become ``Ok(value)``. An ``Err``
    whose payload is not an exception is rewrapped so that the recorded
    error is always an ``Exception``.

    Examples:
        >>> as_result(3)
        Ok(3)
        >>> as_result(Err("flat tyre")).error
        RacerFailure("Racer failed: 'flat tyre'", category=RACER)
    """
    if isinstance(value, Ok):
        return value
    if isinstance(value, Err):
        if isinstance(value.error, Exception):
            return value
        return Err(RacerFailure(value.error))
    return Ok(value)


async def try_result_async(awaitable: Awaitable[Any]) -> Result[Any]:
    """
    Await ``awaitable`` and capture its outcome as a Result.

    Exceptions raised by the awaitable become ``Err``. ``BaseException``
    subclasses such as ``asyncio.CancelledError`` are not caught.

    Examples:
        >>> async def lap():
        ...     raise ValueError("spun out")
        >>> result = await try_result_async(lap())
        >>> result.is_err()
        True
    """
    try:
        value = await awaitable
    except Exception as e:
        return Err(e)
    return as_result(value)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "as_result",
    "try_result_async",
]
