"""
Source Fallback Chain
=====================

Providers are tried in fixed priority order. A provider that errors or
yields zero normalized records hands over to the next one; the first
non-empty result is returned as-is. Results are never merged.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..exceptions import SourceError
from ..filters import PoolNormalizer
from ..models import PoolRecord

logger = logging.getLogger(__name__)


class SourceChain:
    """
    Ordered pool providers with fallback.

    Each provider needs `name`, `url_template` and `fetch_all_pools()`.
    """

    def __init__(self, providers: Sequence, normalizer: PoolNormalizer):
        self.providers = list(providers)
        self.normalizer = normalizer

    def fetch(self) -> Tuple[List[PoolRecord], Optional[str]]:
        """
        Returns:
            (records, provider name) from the first provider with results,
            or ([], None) when all are empty or failing
        """
        for provider in self.providers:
            try:
                raws = provider.fetch_all_pools()
            except SourceError as e:
                logger.error(f"Source {provider.name} failed: {e}")
                continue

            records = self.normalizer.normalize_all(
                raws, source=provider.name, url_template=provider.url_template
            )
            if records:
                logger.info(f"Using {provider.name}: {len(records)} pools ({len(raws)} raw)")
                return records, provider.name

            logger.warning(f"Source {provider.name} returned no usable pools ({len(raws)} raw)")

        logger.error("All pool sources empty or failing")
        return [], None

    def close(self):
        for provider in self.providers:
            provider.close()
