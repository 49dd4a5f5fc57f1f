"""
Tests for interval schedules, the scheduler and the daily reset job.
"""

import threading
from datetime import date, datetime

import pytest
import pytz

from poolwatch.db import SeenPoolStore
from poolwatch.monitor.reset_job import DailyResetJob
from poolwatch.monitor.scheduler import DailyAt, Every, JobScheduler


class TestSchedules:

    def test_every(self):
        schedule = Every(30)
        assert schedule.initial_delay() == 0.0
        assert schedule.next_delay(elapsed=5) == 25
        assert schedule.next_delay(elapsed=45) == 0.0
        assert Every(30, run_immediately=False).initial_delay() == 30

    def test_daily_at_later_today(self):
        # 15:00 UTC == 23:00 in Shanghai
        now = pytz.utc.localize(datetime(2026, 1, 1, 15, 0))
        assert DailyAt(0, 0, "Asia/Shanghai").seconds_until_next(now) == 3600

    def test_daily_at_tomorrow(self):
        # 16:30 UTC == 00:30 next day in Shanghai
        now = pytz.utc.localize(datetime(2026, 1, 1, 16, 30))
        assert DailyAt(0, 0, "Asia/Shanghai").seconds_until_next(now) == 23.5 * 3600

    def test_daily_at_across_dst(self):
        # New York springs forward on 2026-03-08: 23 hours between midnights
        tz = pytz.timezone("America/New_York")
        now = tz.localize(datetime(2026, 3, 7, 0, 0, 1))
        assert DailyAt(0, 0, "America/New_York").seconds_until_next(now) == 24 * 3600 - 1
        now = tz.localize(datetime(2026, 3, 8, 0, 0, 0))
        assert DailyAt(0, 0, "America/New_York").seconds_until_next(now) == 23 * 3600


class TestJobScheduler:

    def test_runs_jobs_and_survives_failures(self):
        done = threading.Event()
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            done.set()

        scheduler = JobScheduler()
        job = scheduler.register(Every(0.01), flaky, name="flaky")
        scheduler.start()
        try:
            assert done.wait(5)
        finally:
            scheduler.stop(timeout=5)

        assert job.failures == 1
        assert job.runs >= 2
        assert not scheduler.running

    def test_daily_job_does_not_run_immediately(self):
        ran = threading.Event()
        scheduler = JobScheduler()
        scheduler.register(DailyAt(0, 0, "UTC"), ran.set, name="daily")
        scheduler.start()
        scheduler.stop(timeout=5)
        assert not ran.is_set()

    def test_double_start_rejected(self):
        scheduler = JobScheduler()
        scheduler.register(Every(60, run_immediately=False), lambda: None)
        scheduler.start()
        try:
            with pytest.raises(RuntimeError):
                scheduler.start()
        finally:
            scheduler.stop(timeout=5)

    def test_request_stop_unblocks_wait(self):
        scheduler = JobScheduler()
        scheduler.request_stop()
        assert scheduler.wait(0.1)


class TestDailyResetJob:

    def test_clears_window_and_prunes(self, tmp_path):
        today = {"day": date(2026, 4, 1)}
        store = SeenPoolStore(tmp_path, today=lambda: today["day"])
        store.add_seen(["old"])
        today["day"] = date(2026, 4, 20)
        store.add_seen(["a", "b"])

        DailyResetJob(store, keep_days=7).run()

        assert store.get_seen_today() == set()
        assert [p.stem for p in store.day_files()] == ["2026-04-20"]

    def test_idempotent(self, tmp_path):
        store = SeenPoolStore(tmp_path, today=lambda: date(2026, 4, 20))
        job = DailyResetJob(store)
        job.run()
        job.run()
        assert store.get_seen_today() == set()
