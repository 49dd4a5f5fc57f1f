"""
Filters Package
===============

Normalization and inclusion rules for raw pool entities.
"""

from .pools import (
    PoolNormalizer,
    KYBERSWAP_POOL_URL,
    compute_apr,
    extract_id,
    extract_tokens,
    fee_tier_label,
    normalize_protocol,
)

__all__ = [
    "PoolNormalizer",
    "KYBERSWAP_POOL_URL",
    "compute_apr",
    "extract_id",
    "extract_tokens",
    "fee_tier_label",
    "normalize_protocol",
]
