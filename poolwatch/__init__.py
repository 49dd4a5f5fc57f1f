"""
poolwatch
=========

Polls DeFi pool aggregators and exchange ticker feeds, detects pools that
have not been announced yet today, and pushes formatted alerts to Telegram
and webhook chat services.

Sub-packages:
- api/: upstream data providers (KyberSwap, DexScreener, Binance)
- filters/: raw entity -> PoolRecord normalization and inclusion rules
- db/: per-day dedup window and latest snapshot (JSON files)
- alerts/: message formatting and notifier clients
- monitor/: jobs, scheduler and service wiring
"""

__version__ = "0.3.0"
