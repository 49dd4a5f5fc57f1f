"""
Snapshot Store

Latest full fetch result, replaced wholesale every tick:
    data/pools_snapshot.json
"""

import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional

from ..exceptions import StoreError
from ..models import PoolRecord
from .files import read_json, write_json_atomic

logger = logging.getLogger(__name__)


class SnapshotStore:
    """JSON array of PoolRecord dicts."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, records: Iterable[PoolRecord]):
        records = list(records)
        write_json_atomic(self.path, [r.to_dict() for r in records])
        logger.debug(f"Snapshot saved: {len(records)} pools -> {self.path}")

    def load(self) -> List[PoolRecord]:
        """
        Raises:
            StoreError: file is corrupt or not an array
        """
        data = read_json(self.path, default=[])
        if not isinstance(data, list):
            raise StoreError(f"Expected a JSON array in {self.path}")
        return [PoolRecord.from_dict(item) for item in data if isinstance(item, dict)]

    def age_seconds(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds since the last save, or None when there is no snapshot."""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        return (now if now is not None else time.time()) - mtime
