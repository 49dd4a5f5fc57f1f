"""
Tests for the dedup window and snapshot stores.
"""

import json
import os
import time
from datetime import date, datetime

import pytest
import pytz

from poolwatch.db import SeenPoolStore, SnapshotStore, zoned_today
from poolwatch.exceptions import StoreError
from tests.conftest import make_record


class FakeClock:

    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day


@pytest.fixture
def clock():
    return FakeClock(date(2026, 3, 15))


@pytest.fixture
def seen_store(tmp_path, clock):
    return SeenPoolStore(tmp_path / "sent_pools", today=clock)


class TestSeenPoolStore:

    def test_missing_file_is_empty(self, seen_store):
        assert seen_store.get_seen_today() == set()

    def test_empty_file_is_empty(self, seen_store):
        seen_store.today_path.parent.mkdir(parents=True)
        seen_store.today_path.write_text("")
        assert seen_store.get_seen_today() == set()

    def test_file_is_keyed_by_iso_date(self, seen_store, tmp_path):
        seen_store.add_seen(["b", "a"])
        path = tmp_path / "sent_pools" / "2026-03-15.json"
        assert json.loads(path.read_text()) == ["a", "b"]

    def test_add_seen_is_idempotent(self, seen_store):
        seen_store.add_seen(["poolA", "poolB"])
        first = seen_store.today_path.read_text()

        seen_store.add_seen(["poolA", "poolB"])

        assert seen_store.today_path.read_text() == first
        assert seen_store.get_seen_today() == {"poolA", "poolB"}

    def test_add_seen_unions(self, seen_store):
        seen_store.add_seen(["a"])
        assert seen_store.add_seen(["b", "a"]) == {"a", "b"}
        assert seen_store.get_seen_today() == {"a", "b"}

    def test_new_day_starts_empty(self, seen_store, clock):
        seen_store.add_seen(["a"])
        clock.day = date(2026, 3, 16)
        assert seen_store.get_seen_today() == set()

    def test_reset_today(self, seen_store):
        seen_store.add_seen(["a", "b"])
        seen_store.reset_today()
        seen_store.reset_today()
        assert seen_store.get_seen_today() == set()
        assert json.loads(seen_store.today_path.read_text()) == []

    def test_corrupt_file_raises(self, seen_store):
        seen_store.today_path.parent.mkdir(parents=True)
        seen_store.today_path.write_text("{not json")
        with pytest.raises(StoreError):
            seen_store.get_seen_today()

    def test_add_seen_replaces_corrupt_file(self, seen_store):
        seen_store.today_path.parent.mkdir(parents=True)
        seen_store.today_path.write_text("[broken")
        assert seen_store.add_seen(["a"]) == {"a"}

    def test_prune_keeps_recent_days(self, seen_store, clock):
        for day in ("2026-03-01", "2026-03-07", "2026-03-08", "2026-03-15"):
            clock.day = date.fromisoformat(day)
            seen_store.add_seen(["x"])
        clock.day = date(2026, 3, 15)

        assert seen_store.prune(keep_days=7) == 2
        assert [p.stem for p in seen_store.day_files()] == ["2026-03-08", "2026-03-15"]


class TestZonedToday:

    def at(self, hour, minute=0):
        moment = pytz.utc.localize(datetime(2026, 5, 1, hour, minute))
        return lambda: moment

    def test_date_follows_the_zone_not_the_host(self):
        assert zoned_today("Asia/Shanghai", now=self.at(15, 59))() == date(2026, 5, 1)
        assert zoned_today("Asia/Shanghai", now=self.at(16, 0))() == date(2026, 5, 2)
        assert zoned_today("UTC", now=self.at(16, 0))() == date(2026, 5, 1)

    def test_rolls_over_at_reset_time(self):
        assert zoned_today("UTC", 8, 30, now=self.at(8, 29))() == date(2026, 4, 30)
        assert zoned_today("UTC", 8, 30, now=self.at(8, 30))() == date(2026, 5, 1)


class TestSnapshotStore:

    def test_round_trip(self, tmp_path):
        store = SnapshotStore(tmp_path / "pools_snapshot.json")
        records = [make_record("a"), make_record("b", apr=2500.0, chain_id=8453, version="v4")]

        store.save(records)

        assert store.load() == records

    def test_missing_file_loads_empty(self, tmp_path):
        store = SnapshotStore(tmp_path / "nope.json")
        assert store.load() == []
        assert not store.exists()
        assert store.age_seconds() is None

    def test_save_replaces_wholesale(self, tmp_path):
        store = SnapshotStore(tmp_path / "snap.json")
        store.save([make_record("a"), make_record("b")])
        store.save([make_record("c")])
        assert [r.id for r in store.load()] == ["c"]

    def test_load_ignores_unknown_fields(self, tmp_path):
        path = tmp_path / "snap.json"
        data = make_record("a").to_dict()
        data["legacy_field"] = 1
        path.write_text(json.dumps([data]))
        assert SnapshotStore(path).load() == [make_record("a")]

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "snap.json"
        path.write_text('{"pools": 1}')
        with pytest.raises(StoreError):
            SnapshotStore(path).load()

    def test_age_seconds(self, tmp_path):
        store = SnapshotStore(tmp_path / "snap.json")
        store.save([])
        written = time.time() - 120
        os.utime(store.path, (written, written))
        assert store.age_seconds(now=written + 120) == pytest.approx(120)
