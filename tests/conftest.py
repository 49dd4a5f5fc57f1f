"""
Shared fixtures: fake HTTP responses, raw pool factories, instant sleeps.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from poolwatch.models import PoolRecord

_NO_JSON = object()


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, json_data=_NO_JSON, text=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else ("" if json_data is _NO_JSON else str(json_data))

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._json


def make_raw_pool(
    pool_id="0xpool",
    symbols=("USDT", "CAKE"),
    addresses=None,
    apr=120.5,
    tvl=250_000,
    **extra,
):
    """Raw entity in the KyberSwap explorer shape."""
    addresses = addresses or [f"0x{s.lower()}" for s in symbols]
    raw = {
        "address": pool_id,
        "chainId": 56,
        "exchange": "uniswap-v3",
        "feeTier": 0.01,
        "tvl": tvl,
        "volume": 1_000_000,
        "earnFee": 800,
        "tokens": [{"address": a, "symbol": s} for a, s in zip(addresses, symbols)],
    }
    if apr is not None:
        raw["apr"] = apr
    raw.update(extra)
    return raw


def make_record(pool_id="poolA", **overrides):
    fields = dict(
        id=pool_id,
        name=f"{pool_id} USDT/CAKE",
        token0="0xusdt",
        token1="0xcake",
        token0_symbol="USDT",
        token1_symbol="CAKE",
        tvl=2_300_000,
        volume_24h=500_000,
        fees_24h=1_500,
        apr=45.678,
        fee_tier=0.01,
        protocol="Uniswap",
        version="v3",
        chain_id=56,
        chain_name="",
        contract_address="0xcake",
        url=f"https://kyberswap.com/earn/pools/{pool_id}",
        source="kyberswap",
    )
    fields.update(overrides)
    return PoolRecord(**fields)


@pytest.fixture
def sleeps():
    """Collects requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def session():
    """Mocked requests.Session."""
    mock = MagicMock()
    mock.headers = {}
    return mock
