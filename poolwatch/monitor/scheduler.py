"""
Job Scheduler
=============

Runs registered callbacks on their own daemon thread each:
- Every(seconds): immediately, then every `seconds` (start to start)
- DailyAt(hour, minute, timezone): once a day at a wall-clock time (pytz)

A job never overlaps itself; different jobs may run concurrently.
stop() sets a shared Event; a callback already running finishes on its own.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import pytz

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Every:
    seconds: float
    run_immediately: bool = True

    def initial_delay(self, now: Optional[datetime] = None) -> float:
        return 0.0 if self.run_immediately else self.seconds

    def next_delay(self, elapsed: float, now: Optional[datetime] = None) -> float:
        return max(0.0, self.seconds - elapsed)


@dataclass(frozen=True)
class DailyAt:
    hour: int
    minute: int = 0
    timezone: str = "UTC"

    def seconds_until_next(self, now: Optional[datetime] = None) -> float:
        """Seconds from `now` (aware; default current time) to the next occurrence."""
        tz = pytz.timezone(self.timezone)
        now = now or datetime.now(pytz.utc)
        local_now = now.astimezone(tz)

        day = local_now.date()
        target = tz.localize(datetime(day.year, day.month, day.day, self.hour, self.minute))
        if target <= local_now:
            day = day + timedelta(days=1)
            target = tz.localize(datetime(day.year, day.month, day.day, self.hour, self.minute))
        return (target - local_now).total_seconds()

    def initial_delay(self, now: Optional[datetime] = None) -> float:
        return self.seconds_until_next(now)

    def next_delay(self, elapsed: float, now: Optional[datetime] = None) -> float:
        return self.seconds_until_next(now)


@dataclass
class ScheduledJob:
    name: str
    schedule: object
    callback: Callable[[], object]
    runs: int = 0
    failures: int = 0


class JobScheduler:
    """
    Minimal thread-per-job scheduler.

    Usage:
        scheduler = JobScheduler()
        scheduler.register(Every(30), job.run, name="pools")
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(self):
        self.jobs: List[ScheduledJob] = []
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []

    @property
    def running(self) -> bool:
        return bool(self._threads) and not self._stop.is_set()

    def register(self, schedule, callback: Callable[[], object], name: Optional[str] = None) -> ScheduledJob:
        job = ScheduledJob(name=name or getattr(callback, "__name__", "job"), schedule=schedule, callback=callback)
        self.jobs.append(job)
        logger.info(f"Registered job {job.name}: {schedule}")
        return job

    def _run_once(self, job: ScheduledJob):
        job.runs += 1
        try:
            job.callback()
        except Exception:
            job.failures += 1
            logger.exception(f"Job {job.name} failed")

    def _loop(self, job: ScheduledJob):
        delay = job.schedule.initial_delay()
        while not self._stop.wait(delay):
            started = time.monotonic()
            self._run_once(job)
            delay = job.schedule.next_delay(time.monotonic() - started)
            logger.debug(f"Job {job.name}: next run in {delay:.0f}s")

    def start(self):
        if self._threads:
            raise RuntimeError("Scheduler already started")
        self._stop.clear()
        for job in self.jobs:
            thread = threading.Thread(target=self._loop, args=(job,), name=f"job-{job.name}", daemon=True)
            thread.start()
            self._threads.append(thread)
        logger.info(f"Scheduler started with {len(self.jobs)} jobs")

    def request_stop(self):
        """Signal loops to stop without waiting (safe from signal handlers)."""
        self._stop.set()

    def stop(self, timeout: Optional[float] = None):
        """Signal all loops to stop and wait up to `timeout` for each thread."""
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []
        logger.info("Scheduler stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until stop() is called; True if stopped."""
        return self._stop.wait(timeout)
