from .seen_store import SeenPoolStore, zoned_today
from .snapshot_store import SnapshotStore

__all__ = ["SeenPoolStore", "SnapshotStore", "zoned_today"]
