"""RaceTrack — race async racers against one shared deadline.

WHY
───
Sometimes the question is not "what did every task return" but "who got
there first, and who did not make it at all".  ``asyncio.gather`` loses the
completion order and ``asyncio.wait_for`` per task multiplies timers.  The
RaceTrack starts every racer at once, times them against a single deadline
and records finishers in the exact order their settlement was observed.

ARCHITECTURE
────────────
::

    RaceTrack
      ├── .add_racer(name, work)   ─ register deferred work (NOT_STARTED only)
      ├── .run()                   ─ race all racers against the deadline
      ├── .rankings()              ─ finishers by finish order, then DQs
      └── .summary()               ─ RaceSummary with counts + timestamps

    racer tasks ──done callback──▶ inbox (asyncio.Queue) ──▶ coordinator
                                                               │
    deadline timer (one task) ─────────────────────────────────┘
                                   asyncio.wait(FIRST_COMPLETED)

    The coordinator is the only writer of the rankings list.  Racer tasks
    never touch it; they report through the inbox.

Related modules:
    models.py    — Racer, RaceResult, RaceSummary, RaceStatus
    deadline.py  — Deadline clock and duration normalisation

Example::

    track = RaceTrack.disqualify_after(timedelta(milliseconds=300))
    track.add_racer("Racer #1", fetch_from_primary)
    track.add_racer("Racer #2", fetch_from_replica())
    await track.run()
    for result in track.rankings():
        print(result.name, result.outcome, result.finish_order)
"""

from __future__ import annotations

import asyncio
import functools
import time
import uuid
from dataclasses import dataclass
from typing import Any

from speedracer.core.errors import (
    RaceAlreadyStartedError,
    RaceNotFinishedError,
    RacerError,
    RacerTimedOut,
)
from speedracer.core.logging import LogContext, get_logger
from speedracer.core.result import Err, Ok, Result, try_result_async
from speedracer.core.settings import get_settings
from speedracer.execution.deadline import Deadline, DurationLike, to_seconds
from speedracer.execution.models import (
    Outcome,
    RaceResult,
    RaceStatus,
    RaceSummary,
    Racer,
    Work,
    utcnow,
    validate_race_transition,
)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Settlement:
    """Message a racer task posts to the coordinator's inbox."""

    index: int
    result: Result[Any]
    settled_at: float


class RaceTrack:
    """Race a set of awaitables and rank them.

    Parameters
    ----------
    deadline : float | int | timedelta | None
        Time allowed to every racer, in seconds or as a ``timedelta``.
        ``None`` uses ``RaceSettings.default_deadline_seconds``.
        Zero or negative values expire immediately.
    """

    def __init__(self, deadline: DurationLike | None = None) -> None:
        if deadline is None:
            deadline = get_settings().default_deadline_seconds
        self._deadline_seconds = to_seconds(deadline)
        self._racers: list[Racer] = []
        self._rankings: list[RaceResult] = []
        self._status = RaceStatus.NOT_STARTED
        self._race_id = str(uuid.uuid4())
        self._started_at = None
        self._completed_at = None

    @classmethod
    def disqualify_after(cls, deadline: DurationLike) -> RaceTrack:
        """Create a new RaceTrack with the given deadline."""
        return cls(deadline)

    # ── Building ─────────────────────────────────────────────────────

    def add_racer(self, name: Any, work: Work) -> RaceTrack:
        """Register a racer.

        Args:
            name: Opaque tag carried into the rankings unchanged.
            work: An awaitable that has not been awaited yet, or a
                zero-argument callable returning one.  Raising, or
                returning an ``Err``, counts as a failure.

        Returns:
            ``self`` for fluent chaining.

        Raises:
            RaceAlreadyStartedError: If ``run()`` has already been called.
            InvalidRacerError: If ``work`` is neither awaitable nor callable.
        """
        if self._status is not RaceStatus.NOT_STARTED:
            raise RaceAlreadyStartedError(
                f"Cannot add racer {name!r}: race is {self._status.value}"
            ).with_context(race_id=self._race_id, racer=name, status=self._status.value)
        self._racers.append(Racer(name=name, work=work, index=len(self._racers)))
        return self

    # ── Execution ────────────────────────────────────────────────────

    async def run(self) -> RaceSummary:
        """Start every racer and wait until all settle or the deadline fires.

        Returns:
            :class:`RaceSummary` of the finished race.

        Raises:
            RaceAlreadyStartedError: If the race was already run.
        """
        if self._status is not RaceStatus.NOT_STARTED:
            raise RaceAlreadyStartedError(
                f"Race {self._race_id} cannot be run twice"
            ).with_context(race_id=self._race_id, status=self._status.value)

        self._transition(RaceStatus.RUNNING)
        async with LogContext(race_id=self._race_id):
            await self._race()
        self._transition(RaceStatus.FINISHED)
        return self.summary()

    async def _race(self) -> None:
        inbox: asyncio.Queue[_Settlement] = asyncio.Queue()
        settled: set[int] = set()
        total = len(self._racers)

        self._started_at = utcnow()
        deadline = Deadline.start(self._deadline_seconds)
        logger.info(
            "race.start",
            racers=total,
            deadline_seconds=self._deadline_seconds,
        )

        tasks: dict[int, asyncio.Task[Result[Any]]] = {}
        for racer in self._racers:
            task = asyncio.create_task(self._drive(racer), name=f"speedracer-racer-{racer.index}")
            task.add_done_callback(functools.partial(self._report, inbox, racer.index))
            tasks[racer.index] = task
        timer = asyncio.create_task(asyncio.sleep(deadline.remaining()), name="speedracer-deadline")

        getter: asyncio.Future[_Settlement] | None = None
        try:
            while len(settled) < total and not timer.done():
                getter = asyncio.ensure_future(inbox.get())
                await asyncio.wait({getter, timer}, return_when=asyncio.FIRST_COMPLETED)
                if getter.done():
                    self._record(getter.result(), deadline, settled)
                else:
                    getter.cancel()

            if len(settled) < total:
                # Settlements already queued happened before the deadline was processed.
                while not inbox.empty():
                    self._record(inbox.get_nowait(), deadline, settled)
                self._disqualify(tasks, deadline, settled)
        finally:
            if getter is not None and not getter.done():
                getter.cancel()
            timer.cancel()
            for task in tasks.values():
                if not task.done():
                    task.cancel()

        self._completed_at = utcnow()
        summary = self._build_summary()
        logger.info(
            "race.complete",
            succeeded=summary.succeeded,
            failed=summary.failed,
            disqualified=summary.disqualified,
            duration_seconds=summary.duration_seconds,
        )

    @staticmethod
    async def _drive(racer: Racer) -> Result[Any]:
        try:
            awaitable = racer.start()
        except Exception as e:
            return Err(e)
        return await try_result_async(awaitable)

    @staticmethod
    def _report(inbox: asyncio.Queue[_Settlement], index: int, task: asyncio.Task[Result[Any]]) -> None:
        settled_at = time.monotonic()
        if task.cancelled():
            result: Result[Any] = Err(RacerError("Racer was cancelled", cause=asyncio.CancelledError()))
        elif task.exception() is not None:
            exc = task.exception()
            result = Err(RacerError(f"Racer crashed: {exc!r}", cause=exc))
        else:
            result = task.result()
        inbox.put_nowait(_Settlement(index=index, result=result, settled_at=settled_at))

    def _record(self, settlement: _Settlement, deadline: Deadline, settled: set[int]) -> None:
        if settlement.index in settled:
            return
        racer = self._racers[settlement.index]
        finish_order = len(self._rankings)
        duration = deadline.elapsed_at(settlement.settled_at)

        match settlement.result:
            case Ok(value):
                result = RaceResult(
                    name=racer.name,
                    outcome=Outcome.SUCCESS,
                    finish_order=finish_order,
                    duration=duration,
                    value=value,
                )
            case Err(error):
                result = RaceResult(
                    name=racer.name,
                    outcome=Outcome.FAILURE,
                    finish_order=finish_order,
                    duration=duration,
                    error=error,
                )

        settled.add(settlement.index)
        self._rankings.append(result)
        logger.debug(
            "race.racer_settled",
            racer=racer.name,
            outcome=result.outcome.value,
            finish_order=finish_order,
            duration_seconds=result.duration,
        )

    def _disqualify(
        self,
        tasks: dict[int, asyncio.Task[Result[Any]]],
        deadline: Deadline,
        settled: set[int],
    ) -> None:
        elapsed = deadline.elapsed
        disqualified = []
        for racer in self._racers:
            if racer.index in settled:
                continue
            tasks[racer.index].cancel()
            error = RacerTimedOut(timeout=self._deadline_seconds).with_context(
                race_id=self._race_id, racer=racer.name
            )
            self._rankings.append(
                RaceResult(
                    name=racer.name,
                    outcome=Outcome.DISQUALIFIED,
                    duration=elapsed,
                    error=error,
                )
            )
            disqualified.append(racer.name)

        logger.info(
            "race.deadline",
            deadline_seconds=self._deadline_seconds,
            disqualified=disqualified,
        )

    def _transition(self, target: RaceStatus) -> None:
        validate_race_transition(self._status, target)
        self._status = target

    # ── Inspection ───────────────────────────────────────────────────

    def rankings(self) -> list[RaceResult]:
        """Rankings of the finished race.

        Finishers come first in finish order, then disqualified racers in
        registration order.  Every call returns an equal, fresh list.

        Raises:
            RaceNotFinishedError: If ``run()`` has not completed.
        """
        self._require_finished()
        return list(self._rankings)

    def summary(self) -> RaceSummary:
        """Aggregate view of the finished race.

        Raises:
            RaceNotFinishedError: If ``run()`` has not completed.
        """
        self._require_finished()
        return self._build_summary()

    def _build_summary(self) -> RaceSummary:
        return RaceSummary(
            race_id=self._race_id,
            deadline_seconds=self._deadline_seconds,
            results=list(self._rankings),
            started_at=self._started_at,
            completed_at=self._completed_at,
        )

    def _require_finished(self) -> None:
        if self._status is not RaceStatus.FINISHED:
            raise RaceNotFinishedError(
                f"Rankings are not available while the race is {self._status.value}"
            ).with_context(race_id=self._race_id, status=self._status.value)

    @property
    def race_id(self) -> str:
        return self._race_id

    @property
    def status(self) -> RaceStatus:
        return self._status

    @property
    def deadline_seconds(self) -> float:
        return self._deadline_seconds

    @property
    def racer_count(self) -> int:
        """Number of racers registered."""
        return len(self._racers)

    def __repr__(self) -> str:
        return (
            f"RaceTrack(race_id={self._race_id!r}, racers={len(self._racers)}, "
            f"deadline_seconds={self._deadline_seconds}, status={self._status.value})"
        )
