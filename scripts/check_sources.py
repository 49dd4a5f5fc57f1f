#!/usr/bin/env python3
"""
Quick smoke test for the data sources. Nothing is sent or saved.

Run with: python scripts/check_sources.py
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from poolwatch.alerts.formatter import format_apr, format_usd
from poolwatch.api import BinanceTickerClient, DexScreenerClient, KyberSwapClient
from poolwatch.config import Config
from poolwatch.exceptions import SourceError
from poolwatch.filters import PoolNormalizer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def print_records(records, limit: int = 10):
    print(f"   {len(records)} pools after filtering")
    for r in records[:limit]:
        print(f"   {r.pair:<18} APR {format_apr(r.apr):>10}  TVL {format_usd(r.tvl):>10}  {r.protocol} {r.version}  {r.id}")


def test_kyberswap(config: Config, normalizer: PoolNormalizer):
    print("\n" + "=" * 60)
    print("TESTING KYBERSWAP")
    print("=" * 60)
    with KyberSwapClient(url=config.kyberswap_url, chain_ids=config.kyberswap_chain_ids,
                         page_size=config.kyberswap_page_size,
                         timeout=config.source_timeout_sec) as client:
        try:
            raws = client.fetch_pools(1)
        except SourceError as e:
            print(f"   FAILED: {e}")
            return
        print(f"   page 1: {len(raws)} raw pools")
        print_records(normalizer.normalize_all(raws, source=client.name, url_template=client.url_template))


def test_dexscreener(config: Config, normalizer: PoolNormalizer):
    print("\n" + "=" * 60)
    print("TESTING DEXSCREENER")
    print("=" * 60)
    with DexScreenerClient(endpoints=config.dexscreener_endpoints, chains=config.dexscreener_chains,
                           dex_filter=config.dexscreener_dex_filter,
                           min_liquidity=config.dexscreener_min_liquidity,
                           timeout=config.source_timeout_sec) as client:
        try:
            raws = client.fetch_pairs(config.dexscreener_endpoints[0])
        except SourceError as e:
            print(f"   FAILED: {e}")
            return
        print(f"   {len(raws)} pairs kept")
        print_records(normalizer.normalize_all(raws, source=client.name, url_template=client.url_template))


def test_binance(config: Config):
    print("\n" + "=" * 60)
    print("TESTING BINANCE TICKERS")
    print("=" * 60)
    with BinanceTickerClient(url=config.binance_ticker_url) as client:
        try:
            tickers = client.fetch_tickers()
        except SourceError as e:
            print(f"   FAILED: {e}")
            return
        print(f"   {len(tickers)} USDT tickers")
        top = sorted(tickers, key=lambda t: abs(t.price_change_percent), reverse=True)[:5]
        for t in top:
            print(f"   {t.symbol:<14} {t.price_change_percent:+.2f}%  vol {format_usd(t.quote_volume)}")


def main():
    config = Config.from_env()
    normalizer = PoolNormalizer(config.reference_symbols, config.disallowed_symbols)
    test_kyberswap(config, normalizer)
    test_dexscreener(config, normalizer)
    test_binance(config)
    print("\nDone")


if __name__ == "__main__":
    main()
