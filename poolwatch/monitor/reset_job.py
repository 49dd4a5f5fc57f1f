"""
Daily reset: start a fresh dedup window and drop old day files.
"""

import logging

from ..db import SeenPoolStore

logger = logging.getLogger(__name__)


class DailyResetJob:
    """Clears today's dedup window and prunes day files older than keep_days."""

    def __init__(self, seen_store: SeenPoolStore, keep_days: int = 7):
        self.seen_store = seen_store
        self.keep_days = keep_days

    def run(self):
        try:
            self.seen_store.reset_today()
        except OSError as e:
            logger.error(f"Daily reset failed: {e}")
            return
        try:
            self.seen_store.prune(self.keep_days)
        except OSError as e:
            logger.warning(f"Could not prune old dedup files: {e}")
