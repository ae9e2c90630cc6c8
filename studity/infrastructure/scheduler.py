"""Background job scheduler driven by wall-clock cadences.

Jobs are coroutines fired at the instants produced by a cadence. Every firing
runs in its own task, so a slow run never delays the next one and runs of the
same job may overlap.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, Protocol

from studity.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[None]]


class Cadence(Protocol):
    def next_run(self, after: datetime) -> datetime:
        """Return the first firing instant strictly later than ``after``."""


@dataclass(frozen=True)
class IntervalCadence:
    """Every ``minutes`` minutes, aligned to the top of the hour (``*/n``)."""

    minutes: int

    def __post_init__(self) -> None:
        if self.minutes <= 0 or 60 % self.minutes:
            raise ValueError("minutes must be a positive divisor of 60")

    def next_run(self, after: datetime) -> datetime:
        base = after.replace(second=0, microsecond=0)
        return base + timedelta(minutes=self.minutes - base.minute % self.minutes)


@dataclass(frozen=True)
class HourlyCadence:
    minute: int = 0

    def next_run(self, after: datetime) -> datetime:
        candidate = after.replace(minute=self.minute, second=0, microsecond=0)
        if candidate <= after:
            candidate += timedelta(hours=1)
        return candidate


@dataclass(frozen=True)
class DailyCadence:
    hour: int
    minute: int = 0

    def next_run(self, after: datetime) -> datetime:
        candidate = after.replace(
            hour=self.hour, minute=self.minute, second=0, microsecond=0
        )
        if candidate <= after:
            candidate += timedelta(days=1)
        return candidate


@dataclass(frozen=True)
class WeeklyCadence:
    """Once a week; ``weekday`` follows :meth:`datetime.weekday` (Sunday is 6)."""

    weekday: int
    hour: int
    minute: int = 0

    def next_run(self, after: datetime) -> datetime:
        candidate = after.replace(
            hour=self.hour, minute=self.minute, second=0, microsecond=0
        ) + timedelta(days=(self.weekday - after.weekday()) % 7)
        if candidate <= after:
            candidate += timedelta(days=7)
        return candidate


def _seconds_between(start: datetime, end: datetime) -> float:
    # Aware datetimes sharing a tzinfo subtract as wall time; compare in UTC.
    return max(
        0.0,
        (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds(),
    )


class Scheduler:
    """Simple asyncio job scheduler."""

    def __init__(self, clock: Callable[[], datetime] = now_in_app_timezone) -> None:
        self.tasks: list[asyncio.Task] = []
        self.jobs: dict[str, Cadence] = {}
        self.running = False
        self._clock = clock
        self._runs: set[asyncio.Task] = set()

    def start(self) -> None:
        self.running = True
        logger.debug("Scheduler started")

    def schedule(self, func: Job, cadence: Cadence, name: str) -> None:
        """Fire ``func`` at every instant of ``cadence``.

        Must be called from a running event loop.
        """

        if name in self.jobs:
            raise ValueError(f"Job '{name}' is already scheduled")

        async def job_loop() -> None:
            previous: datetime | None = None
            while self.running:
                now = self._clock()
                after = now if previous is None or now > previous else previous
                next_run = cadence.next_run(after)
                logger.debug("Job %s will run at %s", name, next_run.isoformat())
                try:
                    await asyncio.sleep(_seconds_between(now, next_run))
                except asyncio.CancelledError:
                    break
                if not self.running:
                    break
                previous = next_run
                self._launch(func, name)

        self.jobs[name] = cadence
        self.tasks.append(asyncio.create_task(job_loop(), name=f"schedule:{name}"))
        logger.debug("Scheduled job %s with cadence %s", name, cadence)

    def _launch(self, func: Job, name: str) -> None:
        run = asyncio.create_task(self._run_job(func, name), name=f"run:{name}")
        self._runs.add(run)
        run.add_done_callback(self._runs.discard)

    @staticmethod
    async def _run_job(func: Job, name: str) -> None:
        logger.debug("Running job %s", name)
        try:
            await func()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled job %s failed", name)

    async def stop(self, timeout: float = 10.0) -> None:
        """Stop the scheduler and cancel pending and running jobs."""

        self.running = False
        pending = [*self.tasks, *self._runs]
        if not pending:
            logger.debug("Scheduler stopped (no active jobs)")
            self.jobs.clear()
            return

        for task in pending:
            task.cancel()

        try:
            await asyncio.wait_for(
                asyncio.gather(*pending, return_exceptions=True),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Scheduler stop timed out after %ss", timeout)

        self.tasks.clear()
        self.jobs.clear()
        logger.debug("Scheduler stopped")


_scheduler: Optional[Scheduler] = None


def get_scheduler() -> Scheduler:
    """Return the process-wide scheduler instance."""

    global _scheduler
    if _scheduler is None:
        _scheduler = Scheduler()
    return _scheduler


__all__ = [
    "Cadence",
    "DailyCadence",
    "HourlyCadence",
    "IntervalCadence",
    "Scheduler",
    "WeeklyCadence",
    "get_scheduler",
]
