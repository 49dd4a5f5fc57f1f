"""
KyberSwap Zap Explorer Client

Single responsibility: read the high-APR pool listing from the KyberSwap
zap-earn explorer API.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..exceptions import SourceError
from ..filters import KYBERSWAP_POOL_URL, extract_id
from ..utils.retry import RetryPolicy
from .base import DEFAULT_TIMEOUT_SEC, BaseSourceClient
from .shapes import describe_payload, extract_entities

logger = logging.getLogger(__name__)

KYBERSWAP_EXPLORER_URL = "https://zap-earn-service-v3.kyberengineering.io/api/v1/explorer/pools"

PAGE_DELAY_SEC = 0.5


def has_pool_id(item: Any) -> bool:
    return extract_id(item) is not None


class KyberSwapClient(BaseSourceClient):
    """
    Client for the KyberSwap explorer pools endpoint.

    Handles:
    - Fetching one page of pools for the configured chains
    - Walking pages 1..N with de-duplication by pool id
    """

    name = "kyberswap"
    url_template = KYBERSWAP_POOL_URL

    def __init__(
        self,
        url: str = KYBERSWAP_EXPLORER_URL,
        chain_ids: Sequence[int] = (56, 8453),
        pages: int = 10,
        page_size: int = 10,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        page_delay: float = PAGE_DELAY_SEC,
        sleep=time.sleep,
    ):
        super().__init__(timeout=timeout, retry_policy=retry_policy, session=session)
        self.url = url
        self.chain_ids = list(chain_ids)
        self.pages = pages
        self.page_size = page_size
        self.page_delay = page_delay
        self._sleep = sleep

    def _params(self, page: int) -> Dict[str, Any]:
        return {
            "chainIds": ",".join(str(c) for c in self.chain_ids),
            "page": page,
            "limit": self.page_size,
            "interval": "24h",
            "tag": "high_apr",
        }

    def fetch_pools(self, page: int = 1) -> List[dict]:
        """
        Fetch one page of raw pool entities.

        Returns:
            Raw pool dicts (possibly empty when the payload is unrecognised)

        Raises:
            SourceError: transport/HTTP failure or a non-zero API `code`
        """
        payload = self._get_json(self.url, self._params(page))
        if payload is None:
            return []

        if isinstance(payload, dict):
            code = payload.get("code")
            if code not in (None, 0, "0"):
                message = payload.get("message") or payload.get("msg") or "unknown error"
                raise SourceError(f"{self.name} API error code {code}: {message}")

        pools, shape = extract_entities(payload, has_pool_id)
        if shape is None:
            logger.warning(f"{self.name}: unrecognised response on page {page}: {describe_payload(payload)}")
            logger.debug(f"{self.name}: payload preview: {str(payload)[:500]}")
        return pools

    def fetch_all_pools(self) -> List[dict]:
        """
        Fetch pages 1..N, skipping pages that fail.

        Returns:
            Raw pool dicts, de-duplicated by id, in first-seen order
        """
        all_pools = []
        seen_ids = set()

        for page in range(1, self.pages + 1):
            try:
                pools = self.fetch_pools(page)
            except SourceError as e:
                logger.error(f"{self.name}: page {page} failed: {e}")
                pools = []

            added = 0
            for pool in pools:
                pool_id = extract_id(pool)
                if pool_id in seen_ids:
                    continue
                seen_ids.add(pool_id)
                all_pools.append(pool)
                added += 1
            logger.debug(f"{self.name}: page {page} returned {len(pools)} pools ({added} new)")

            if page < self.pages and self.page_delay > 0:
                self._sleep(self.page_delay)

        logger.info(f"{self.name}: fetched {len(all_pools)} unique pools from {self.pages} pages")
        return all_pools
