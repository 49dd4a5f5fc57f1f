"""
Pool Monitor Job
================

One polling tick:

    FetchSeen -> FetchSource(s) -> Diff -> Format+Chunk -> NotifyEach
              -> RecordSeen -> SaveSnapshot

- Pools are new when their id is not in today's dedup window
- Ids are recorded when selected for notification, whatever the delivery
  outcome, so a failed send is not retried later the same day
- The snapshot always holds the full result of the latest successful fetch
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Tuple

from ..alerts.formatter import (
    DEFAULT_APR_LEVELS,
    format_pools_message,
    format_pools_plain,
    split_message,
)
from ..alerts.telegram import TelegramNotifier
from ..alerts.webhook import WebhookNotifier
from ..api.fallback import SourceChain
from ..db import SeenPoolStore, SnapshotStore
from ..exceptions import NotificationError, StoreError
from ..models import PoolRecord

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Outcome of one monitor tick."""
    source: Optional[str] = None
    fetched: int = 0
    new_records: List[PoolRecord] = field(default_factory=list)
    is_first_run: bool = False
    chunks_sent: int = 0
    chunk_failures: int = 0

    @property
    def new_ids(self) -> List[str]:
        return [r.id for r in self.new_records]


def diff_new(records: Sequence[PoolRecord], seen: Set[str]) -> List[PoolRecord]:
    """Records whose id is not in `seen`, in fetch order."""
    return [r for r in records if r.id not in seen]


class PoolMonitorJob:
    """
    Detects newly listed pools and announces them.

    Args:
        sources: Provider chain (first non-empty provider wins)
        seen_store: Daily dedup window
        snapshot_store: Latest full fetch
        telegram: Telegram sender (chunk 0 carries the action button)
        webhook: Optional plain-text webhook sender
        apr_levels: (medium, high, hot) emphasis thresholds
        message_interval: Pause between chunk sends, seconds
    """

    def __init__(
        self,
        sources: SourceChain,
        seen_store: SeenPoolStore,
        snapshot_store: SnapshotStore,
        telegram: Optional[TelegramNotifier] = None,
        webhook: Optional[WebhookNotifier] = None,
        apr_levels: Tuple[float, float, float] = DEFAULT_APR_LEVELS,
        max_message_length: int = 4096,
        message_interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.sources = sources
        self.seen_store = seen_store
        self.snapshot_store = snapshot_store
        self.telegram = telegram
        self.webhook = webhook
        self.apr_levels = apr_levels
        self.max_message_length = max_message_length
        self.message_interval = message_interval
        self._sleep = sleep

    def _load_seen(self) -> Set[str]:
        try:
            return self.seen_store.get_seen_today()
        except (StoreError, OSError) as e:
            logger.error(f"Could not read dedup window, treating as empty: {e}")
            return set()

    def _send_chunks(self, chunks: List[str], send_first: Callable, send_rest: Callable, label: str, result: TickResult):
        for i, chunk in enumerate(chunks):
            if i > 0 and self.message_interval > 0:
                self._sleep(self.message_interval)
            sender = send_first if i == 0 else send_rest
            try:
                message_id = sender(chunk)
            except NotificationError as e:
                result.chunk_failures += 1
                logger.error(f"{label} chunk {i + 1}/{len(chunks)} failed: {e}")
                continue
            if message_id is not None:
                result.chunks_sent += 1

    def _notify(self, new_records: List[PoolRecord], result: TickResult):
        if self.telegram is not None:
            text = format_pools_message(new_records, result.is_first_run, self.apr_levels)
            chunks = split_message(text, self.max_message_length)
            logger.info(f"Sending {len(new_records)} pools to Telegram in {len(chunks)} message(s)")
            self._send_chunks(
                chunks,
                send_first=self.telegram.send_text_with_button,
                send_rest=self.telegram.send_text,
                label="Telegram",
                result=result,
            )

        if self.webhook is not None:
            text = format_pools_plain(new_records)
            chunks = split_message(text, self.webhook.max_message_length)
            logger.info(f"Sending {len(new_records)} pools to {self.webhook.service} in {len(chunks)} message(s)")
            self._send_chunks(
                chunks,
                send_first=self.webhook.send_text,
                send_rest=self.webhook.send_text,
                label=self.webhook.service,
                result=result,
            )

    def run(self) -> TickResult:
        """Run one tick. Never raises for source, store or delivery errors."""
        seen = self._load_seen()

        records, source = self.sources.fetch()
        result = TickResult(source=source, fetched=len(records))
        if not records:
            logger.warning("No pools fetched this tick; dedup window and snapshot left untouched")
            return result

        result.is_first_run = not seen and not self.snapshot_store.exists()
        result.new_records = diff_new(records, seen)

        if result.new_records:
            logger.info(
                f"{len(result.new_records)} new pools out of {len(records)} from {source}"
                + (" (first run)" if result.is_first_run else "")
            )
            self._notify(result.new_records, result)
            try:
                self.seen_store.add_seen(result.new_ids)
            except (StoreError, OSError) as e:
                logger.error(f"Could not record seen pools: {e}")
        else:
            logger.info(f"No new pools ({len(records)} fetched from {source}, {len(seen)} seen today)")

        try:
            self.snapshot_store.save(records)
        except OSError as e:
            logger.error(f"Could not save snapshot: {e}")

        return result
