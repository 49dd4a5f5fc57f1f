"""
Seen Pool Store (daily dedup window)

One JSON array of pool ids per calendar day:
    data/sent_pools/2026-01-31.json

The set only grows during a day and is cleared by the daily reset.
Single writer (the monitor job); no locking.
"""

import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set

import pytz

from ..exceptions import StoreError
from .files import read_json, write_json_atomic

logger = logging.getLogger(__name__)


def zoned_today(
    timezone: str,
    hour: int = 0,
    minute: int = 0,
    now: Optional[Callable[[], datetime]] = None,
) -> Callable[[], date]:
    """
    Clock for the dedup day key: the date in `timezone`, rolling over at
    hour:minute instead of midnight. Matches the daily reset schedule.
    """
    tz = pytz.timezone(timezone)
    rollover = timedelta(hours=hour, minutes=minute)
    now = now or (lambda: datetime.now(pytz.utc))

    def today() -> date:
        return (now().astimezone(tz) - rollover).date()

    return today


class SeenPoolStore:
    """
    Day-keyed set of already-announced pool ids.

    Args:
        directory: Folder holding one file per ISO date
        today: Clock returning the current date (see zoned_today)
    """

    def __init__(self, directory: Path, today: Callable[[], date] = date.today):
        self.directory = Path(directory)
        self._today = today

    def day_key(self) -> str:
        return self._today().isoformat()

    def path_for(self, day_key: str) -> Path:
        return self.directory / f"{day_key}.json"

    @property
    def today_path(self) -> Path:
        return self.path_for(self.day_key())

    def get_seen_today(self) -> Set[str]:
        """
        Ids recorded today.

        Raises:
            StoreError: today's file is corrupt
        """
        data = read_json(self.today_path, default=[])
        if not isinstance(data, list):
            raise StoreError(f"Expected a JSON array in {self.today_path}")
        return {str(item) for item in data}

    def add_seen(self, ids: Iterable[str]) -> Set[str]:
        """
        Union `ids` into today's set and persist it.

        Returns:
            The full set after the update
        """
        ids = {str(i) for i in ids}
        try:
            current = self.get_seen_today()
        except StoreError as e:
            logger.warning(f"Replacing unreadable dedup file: {e}")
            current = set()

        merged = current | ids
        if merged != current or not self.today_path.exists():
            write_json_atomic(self.today_path, sorted(merged))
            logger.debug(f"Dedup {self.day_key()}: {len(current)} -> {len(merged)} ids")
        return merged

    def reset_today(self):
        """Overwrite today's set with an empty one."""
        write_json_atomic(self.today_path, [])
        logger.info(f"Dedup window reset for {self.day_key()}")

    def day_files(self) -> List[Path]:
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob("????-??-??.json"))

    def prune(self, keep_days: int = 7) -> int:
        """
        Delete day files older than `keep_days` days.

        Returns:
            Number of files removed
        """
        cutoff = self._today() - timedelta(days=keep_days)
        removed = 0
        for path in self.day_files():
            try:
                day = datetime.strptime(path.stem, "%Y-%m-%d").date()
            except ValueError:
                continue
            if day < cutoff:
                path.unlink()
                removed += 1
        if removed:
            logger.info(f"Pruned {removed} dedup files older than {cutoff.isoformat()}")
        return removed
