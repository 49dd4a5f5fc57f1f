"""
Binance Ticker Client

Single responsibility: read 24h spot tickers and keep USDT-quoted pairs.
"""

import logging
from typing import List, Optional

import requests

from ..filters.pools import to_float
from ..models import AlphaTicker
from .base import BaseSourceClient

logger = logging.getLogger(__name__)

BINANCE_TICKER_URL = "https://api.binance.com/api/v3/ticker/24hr"


class BinanceTickerClient(BaseSourceClient):
    """Client for the Binance 24h ticker endpoint (no retries)."""

    name = "binance"

    def __init__(
        self,
        url: str = BINANCE_TICKER_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(timeout=timeout, session=session)
        self.url = url

    def fetch_tickers(self) -> List[AlphaTicker]:
        """
        Fetch all 24h tickers.

        Returns:
            AlphaTicker list for *USDT symbols whose numbers parse

        Raises:
            SourceError: transport/HTTP failure
        """
        payload = self._get_json(self.url)
        if not isinstance(payload, list):
            if payload is not None:
                logger.warning(f"{self.name}: expected a list, got {type(payload).__name__}")
            return []

        tickers = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            symbol = str(item.get("symbol") or "")
            if not symbol.endswith("USDT"):
                continue
            price = to_float(item.get("lastPrice"))
            change = to_float(item.get("priceChangePercent"))
            quote_volume = to_float(item.get("quoteVolume"))
            if price is None or change is None or quote_volume is None:
                continue
            tickers.append(AlphaTicker(
                symbol=symbol,
                last_price=price,
                price_change_percent=change,
                quote_volume=quote_volume,
            ))

        logger.debug(f"{self.name}: {len(tickers)} USDT tickers")
        return tickers
