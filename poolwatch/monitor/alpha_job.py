"""
Alpha Ticker Monitor
====================

Watches Binance 24h USDT tickers for:
- New listings: symbols that appear after the first tick (the first tick
  only learns the current symbol set)
- Big movers: |24h change| >= min_change_pct with 24h quote volume
  >= min_quote_volume. A symbol is reported once when it crosses into that
  zone and again only after it has dropped out of it.
"""

import logging
import time
from typing import Callable, List, Optional, Set, Tuple

from ..alerts.formatter import format_alpha_message, split_message
from ..alerts.telegram import TelegramNotifier
from ..api.binance import BinanceTickerClient
from ..exceptions import NotificationError, SourceError
from ..models import AlphaTicker

logger = logging.getLogger(__name__)


class AlphaMonitorJob:
    """In-memory listing/mover detector; state is lost on restart."""

    def __init__(
        self,
        client: BinanceTickerClient,
        telegram: Optional[TelegramNotifier] = None,
        min_change_pct: float = 10.0,
        min_quote_volume: float = 10_000_000,
        max_message_length: int = 4096,
        message_interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.telegram = telegram
        self.min_change_pct = min_change_pct
        self.min_quote_volume = min_quote_volume
        self.max_message_length = max_message_length
        self.message_interval = message_interval
        self._sleep = sleep

        self.known_symbols: Set[str] = set()
        self.active_movers: Set[str] = set()
        self._seeded = False

    def is_big_mover(self, ticker: AlphaTicker) -> bool:
        return (
            abs(ticker.price_change_percent) >= self.min_change_pct
            and ticker.quote_volume >= self.min_quote_volume
        )

    def detect(self, tickers: List[AlphaTicker]) -> Tuple[List[AlphaTicker], List[AlphaTicker]]:
        """
        Update state from one ticker list.

        Returns:
            (new listings, movers that just crossed the threshold)
        """
        new_listings = []
        if self._seeded:
            new_listings = [t for t in tickers if t.symbol not in self.known_symbols]
        else:
            logger.info(f"Alpha monitor seeded with {len(tickers)} symbols")
        self.known_symbols.update(t.symbol for t in tickers)
        self._seeded = True

        movers_now = {t.symbol for t in tickers if self.is_big_mover(t)}
        crossed = [t for t in tickers if t.symbol in movers_now and t.symbol not in self.active_movers]
        self.active_movers = movers_now

        crossed.sort(key=lambda t: abs(t.price_change_percent), reverse=True)
        return new_listings, crossed

    def run(self) -> Tuple[List[AlphaTicker], List[AlphaTicker]]:
        try:
            tickers = self.client.fetch_tickers()
        except SourceError as e:
            logger.error(f"Alpha ticker fetch failed: {e}")
            return [], []
        if not tickers:
            logger.warning("Alpha ticker fetch returned nothing")
            return [], []

        new_listings, movers = self.detect(tickers)
        if not new_listings and not movers:
            return new_listings, movers

        logger.info(f"Alpha: {len(new_listings)} new listings, {len(movers)} big movers")
        if self.telegram is not None:
            text = format_alpha_message(new_listings, movers)
            for i, chunk in enumerate(split_message(text, self.max_message_length)):
                if i > 0 and self.message_interval > 0:
                    self._sleep(self.message_interval)
                try:
                    self.telegram.send_text(chunk)
                except NotificationError as e:
                    logger.error(f"Alpha alert chunk {i + 1} failed: {e}")
        return new_listings, movers
