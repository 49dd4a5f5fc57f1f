"""
Monitor Service
===============

Builds every client, store and job once from a Config and runs them on the
scheduler:

1. Pool monitor (every MONITOR_INTERVAL_SEC): new pools -> Telegram/webhook
2. Daily reset (RESET_TIME in RESET_TIMEZONE): clear the dedup window
3. Alpha monitor (every ALPHA_INTERVAL_SEC, optional): listings and movers
"""

import logging
import signal
from datetime import datetime
from typing import Optional

from ..alerts.telegram import TelegramNotifier
from ..alerts.webhook import WebhookNotifier
from ..api import BinanceTickerClient, DexScreenerClient, KyberSwapClient, SourceChain
from ..config import Config
from ..db import SeenPoolStore, SnapshotStore, zoned_today
from ..filters import PoolNormalizer
from ..utils.retry import RetryPolicy, is_retriable_source_error
from .alpha_job import AlphaMonitorJob
from .pool_job import PoolMonitorJob, TickResult
from .reset_job import DailyResetJob
from .scheduler import DailyAt, Every, JobScheduler

logger = logging.getLogger(__name__)


class MonitorService:
    """
    Long-running pool monitor.

    All collaborators are passed in; use from_config() to build the
    production wiring.
    """

    def __init__(
        self,
        config: Config,
        sources: SourceChain,
        seen_store: SeenPoolStore,
        snapshot_store: SnapshotStore,
        telegram: TelegramNotifier,
        webhook: Optional[WebhookNotifier] = None,
        alpha_client: Optional[BinanceTickerClient] = None,
        scheduler: Optional[JobScheduler] = None,
    ):
        self.config = config
        self.sources = sources
        self.seen_store = seen_store
        self.snapshot_store = snapshot_store
        self.telegram = telegram
        self.webhook = webhook
        self.alpha_client = alpha_client
        self.scheduler = scheduler or JobScheduler()

        levels = (config.apr_medium, config.apr_high, config.apr_hot)
        self.pool_job = PoolMonitorJob(
            sources=sources,
            seen_store=seen_store,
            snapshot_store=snapshot_store,
            telegram=telegram,
            webhook=webhook,
            apr_levels=levels,
            max_message_length=config.max_message_length,
            message_interval=config.message_interval_sec,
        )
        self.reset_job = DailyResetJob(seen_store, keep_days=config.dedup_keep_days)
        self.alpha_job = None
        if alpha_client is not None:
            self.alpha_job = AlphaMonitorJob(
                client=alpha_client,
                telegram=telegram,
                min_change_pct=config.alpha_min_change_pct,
                min_quote_volume=config.alpha_min_quote_volume,
                max_message_length=config.max_message_length,
                message_interval=config.message_interval_sec,
            )

    @classmethod
    def from_config(cls, config: Config, alpha: Optional[bool] = None) -> "MonitorService":
        """Build the production service graph."""
        source_retry = RetryPolicy(
            max_attempts=config.source_max_attempts,
            base_delay=config.source_backoff_sec,
            backoff="exponential",
            retry_on=is_retriable_source_error,
        )
        kyberswap = KyberSwapClient(
            url=config.kyberswap_url,
            chain_ids=config.kyberswap_chain_ids,
            pages=config.kyberswap_pages,
            page_size=config.kyberswap_page_size,
            timeout=config.source_timeout_sec,
            retry_policy=source_retry,
        )
        dexscreener = DexScreenerClient(
            endpoints=config.dexscreener_endpoints,
            chains=config.dexscreener_chains,
            dex_filter=config.dexscreener_dex_filter,
            min_liquidity=config.dexscreener_min_liquidity,
            timeout=config.source_timeout_sec,
            retry_policy=source_retry,
        )
        normalizer = PoolNormalizer(config.reference_symbols, config.disallowed_symbols)

        dedup_clock = zoned_today(config.reset_timezone, *config.reset_at)
        alpha_enabled = config.alpha_enabled if alpha is None else alpha
        return cls(
            config=config,
            sources=SourceChain([kyberswap, dexscreener], normalizer),
            seen_store=SeenPoolStore(config.seen_dir, today=dedup_clock),
            snapshot_store=SnapshotStore(config.snapshot_path),
            telegram=TelegramNotifier.from_config(config),
            webhook=WebhookNotifier.from_config(config),
            alpha_client=BinanceTickerClient(url=config.binance_ticker_url) if alpha_enabled else None,
        )

    # -------------------------------------------------------------------------
    # One-shot operations
    # -------------------------------------------------------------------------

    def run_once(self) -> TickResult:
        return self.pool_job.run()

    def reset_today(self):
        self.reset_job.run()

    def send_test_message(self) -> Optional[int]:
        text = (
            "✅ *Pool monitor test message*\n\n"
            f"Sent at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        )
        return self.telegram.send_text_with_button(text)

    # -------------------------------------------------------------------------
    # Long-running mode
    # -------------------------------------------------------------------------

    def _handle_shutdown(self, signum, frame):
        logger.info("Shutdown signal received, stopping monitor...")
        self.scheduler.request_stop()

    def register_jobs(self):
        hour, minute = self.config.reset_at
        self.scheduler.register(Every(self.config.monitor_interval_sec), self.pool_job.run, name="pools")
        self.scheduler.register(
            DailyAt(hour, minute, self.config.reset_timezone), self.reset_job.run, name="daily-reset"
        )
        if self.alpha_job is not None:
            self.scheduler.register(Every(self.config.alpha_interval_sec), self.alpha_job.run, name="alpha")

    def run(self):
        """Run until SIGINT/SIGTERM."""
        logger.info("=" * 60)
        logger.info("POOL MONITOR SERVICE STARTING")
        logger.info("=" * 60)
        logger.info(f"Poll interval: {self.config.monitor_interval_sec} seconds")
        logger.info(f"Daily reset: {self.config.reset_time} {self.config.reset_timezone}")
        logger.info(f"Alpha monitor: {'on' if self.alpha_job else 'off'}")
        logger.info(f"Webhook: {self.webhook.service if self.webhook else 'off'}")
        logger.info(f"Dry run: {self.config.dry_run}")

        signal.signal(signal.SIGINT, self._handle_shutdown)
        signal.signal(signal.SIGTERM, self._handle_shutdown)

        self.register_jobs()
        self.scheduler.start()
        try:
            self.scheduler.wait()
        finally:
            self.stop()
            logger.info("POOL MONITOR SERVICE STOPPED")

    def stop(self):
        self.scheduler.stop(timeout=self.config.source_timeout_sec)
        self.close()

    def close(self):
        self.sources.close()
        self.telegram.close()
        if self.webhook is not None:
            self.webhook.close()
        if self.alpha_client is not None:
            self.alpha_client.close()
