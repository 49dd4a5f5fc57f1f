"""
DexScreener Client

Single responsibility: read trading pairs from DexScreener search/token
endpoints and keep the ones worth normalizing.
"""

import logging
import time
from typing import Any, List, Optional, Sequence

import requests

from ..exceptions import SourceError
from ..filters.pools import extract_id, lookup, to_float
from ..utils.retry import RetryPolicy
from .base import DEFAULT_TIMEOUT_SEC, BaseSourceClient
from .shapes import describe_payload, extract_entities

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINTS = (
    "https://api.dexscreener.com/latest/dex/search?q=uniswap",
)

# DexScreener does not report fees; assume the common 0.3% tier
ASSUMED_FEE_RATE = 0.003

ENDPOINT_DELAY_SEC = 1.0


def has_pair_id(item: Any) -> bool:
    return extract_id(item) is not None


class DexScreenerClient(BaseSourceClient):
    """
    Client for DexScreener pair listings.

    Pairs are kept when they are on an allowed chain, their dexId contains
    the dex filter (if any) and their USD liquidity reaches the minimum.
    A missing fees24h is estimated from 24h volume.
    """

    name = "dexscreener"
    url_template = ""

    def __init__(
        self,
        endpoints: Sequence[str] = DEFAULT_ENDPOINTS,
        chains: Sequence[str] = ("bsc", "bsc-mainnet", "56"),
        dex_filter: str = "uniswap",
        min_liquidity: float = 1_000,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        endpoint_delay: float = ENDPOINT_DELAY_SEC,
        sleep=time.sleep,
    ):
        super().__init__(timeout=timeout, retry_policy=retry_policy, session=session)
        self.endpoints = list(endpoints)
        self.chains = {c.lower() for c in chains}
        self.dex_filter = dex_filter.lower()
        self.min_liquidity = min_liquidity
        self.endpoint_delay = endpoint_delay
        self._sleep = sleep

    def _keep(self, pair: dict) -> bool:
        chain = str(pair.get("chainId") or "").lower()
        if self.chains and chain not in self.chains:
            return False
        dex_id = str(pair.get("dexId") or "").lower()
        if self.dex_filter and self.dex_filter not in dex_id:
            return False
        liquidity = to_float(lookup(pair, "liquidity.usd")) or 0.0
        return liquidity >= self.min_liquidity

    @staticmethod
    def _with_fees(pair: dict) -> dict:
        if to_float(pair.get("fees24h")) is not None:
            return pair
        volume = to_float(lookup(pair, "volume.h24")) or 0.0
        enriched = dict(pair)
        enriched["fees24h"] = volume * ASSUMED_FEE_RATE
        return enriched

    def fetch_pairs(self, endpoint: str) -> List[dict]:
        """
        Fetch and filter pairs from one endpoint.

        Raises:
            SourceError: transport/HTTP failure
        """
        payload = self._get_json(endpoint)
        if payload is None:
            return []

        pairs, shape = extract_entities(payload, has_pair_id)
        if shape is None:
            logger.warning(f"{self.name}: unrecognised response from {endpoint}: {describe_payload(payload)}")
            logger.debug(f"{self.name}: payload preview: {str(payload)[:500]}")
            return []

        kept = [self._with_fees(p) for p in pairs if isinstance(p, dict) and self._keep(p)]
        logger.debug(f"{self.name}: {len(kept)}/{len(pairs)} pairs kept from {endpoint}")
        return kept

    def fetch_all_pools(self) -> List[dict]:
        """
        Try each endpoint in order; the first non-empty result wins.

        Raises:
            SourceError: when every endpoint failed (as opposed to being empty)
        """
        last_error = None
        failures = 0
        for i, endpoint in enumerate(self.endpoints):
            if i > 0 and self.endpoint_delay > 0:
                self._sleep(self.endpoint_delay)
            try:
                pairs = self.fetch_pairs(endpoint)
            except SourceError as e:
                logger.warning(f"{self.name}: {endpoint} failed: {e}")
                last_error = e
                failures += 1
                continue
            if pairs:
                logger.info(f"{self.name}: {len(pairs)} pairs from {endpoint}")
                return pairs

        if last_error is not None and failures == len(self.endpoints):
            raise last_error
        return []
