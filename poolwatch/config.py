"""
Configuration for the Pool Monitor

All settings in one place for easy tuning. Values come from environment
variables (a `.env` file in the project root is loaded first) and fall back
to the defaults below.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

_env_path = PROJECT_ROOT / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


# =============================================================================
# Env helpers
# =============================================================================

def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int_list(name: str, default: List[int]) -> List[int]:
    return [int(item) for item in _env_list(name, [str(d) for d in default])]


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw not in (None, "") else default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_time(value: str) -> Tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)."""
    hour_str, _, minute_str = value.partition(":")
    hour, minute = int(hour_str), int(minute_str or 0)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hour, minute


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class Config:
    """All configuration settings."""

    # -------------------------------------------------------------------------
    # Pool filter
    # -------------------------------------------------------------------------
    # A pool must contain at least one of these tokens...
    reference_symbols: List[str] = field(default_factory=lambda: ["USDT", "USDC"])
    # ...and none of these
    disallowed_symbols: List[str] = field(default_factory=lambda: ["WETH"])

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------
    kyberswap_url: str = "https://zap-earn-service-v3.kyberengineering.io/api/v1/explorer/pools"
    kyberswap_chain_ids: List[int] = field(default_factory=lambda: [56, 8453])
    kyberswap_pages: int = 10
    kyberswap_page_size: int = 10

    dexscreener_endpoints: List[str] = field(default_factory=lambda: [
        "https://api.dexscreener.com/latest/dex/search?q=uniswap",
        "https://api.dexscreener.com/latest/dex/tokens/0x55d398326f99059fF775485246999027B3197955",  # BSC USDT
        "https://api.dexscreener.com/latest/dex/tokens/0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d",  # BSC USDC
    ])
    dexscreener_chains: List[str] = field(default_factory=lambda: ["bsc", "bsc-mainnet", "56"])
    dexscreener_dex_filter: str = "uniswap"
    dexscreener_min_liquidity: float = 1_000

    binance_ticker_url: str = "https://api.binance.com/api/v3/ticker/24hr"

    # Upstreams are slow; keep this generous
    source_timeout_sec: float = 30.0
    source_max_attempts: int = 3
    source_backoff_sec: float = 2.0

    # -------------------------------------------------------------------------
    # Schedules
    # -------------------------------------------------------------------------
    monitor_interval_sec: int = 30
    reset_time: str = "00:00"
    reset_timezone: str = "Asia/Shanghai"
    dedup_keep_days: int = 7

    alpha_enabled: bool = True
    alpha_interval_sec: int = 60
    alpha_min_change_pct: float = 10.0
    alpha_min_quote_volume: float = 10_000_000

    # -------------------------------------------------------------------------
    # Telegram
    # -------------------------------------------------------------------------
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    telegram_button_text: str = ""
    telegram_button_url: str = ""
    telegram_timeout_sec: float = 45.0
    max_message_length: int = 4096
    message_interval_sec: float = 1.0

    # -------------------------------------------------------------------------
    # Webhook chat service ("serverchan", "wxpusher", "qywx"; empty = off)
    # -------------------------------------------------------------------------
    webhook_service: str = ""
    webhook_api_key: str = ""
    webhook_url: str = ""
    webhook_key: str = ""
    webhook_uid: str = ""
    webhook_max_message_length: int = 2000

    # -------------------------------------------------------------------------
    # Message formatting (APR emphasis levels, percent)
    # -------------------------------------------------------------------------
    apr_medium: float = 50.0
    apr_high: float = 100.0
    apr_hot: float = 200.0

    # -------------------------------------------------------------------------
    # Runtime
    # -------------------------------------------------------------------------
    dry_run: bool = False
    data_dir: Path = field(default_factory=lambda: PROJECT_ROOT / "data")
    log_level: str = "INFO"
    log_file: str = "logs/monitor.log"

    @property
    def seen_dir(self) -> Path:
        return self.data_dir / "sent_pools"

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / "pools_snapshot.json"

    @property
    def reset_at(self) -> Tuple[int, int]:
        return _parse_time(self.reset_time)

    @property
    def webhook_endpoint(self) -> Optional[str]:
        """WeCom bots may be configured with just the key."""
        if self.webhook_url:
            return self.webhook_url
        if self.webhook_service == "qywx" and self.webhook_key:
            return f"https://qyapi.weixin.qq.com/cgi-bin/webhook/send?key={self.webhook_key}"
        return None

    @classmethod
    def from_env(cls) -> "Config":
        """Build a Config from environment variables."""
        defaults = cls()
        data_dir = _env_str("POOLWATCH_DATA_DIR")
        return cls(
            reference_symbols=_env_list("REFERENCE_SYMBOLS", defaults.reference_symbols),
            disallowed_symbols=_env_list("DISALLOWED_SYMBOLS", defaults.disallowed_symbols),
            kyberswap_url=_env_str("KYBERSWAP_URL", defaults.kyberswap_url),
            kyberswap_chain_ids=_env_int_list("KYBERSWAP_CHAIN_IDS", defaults.kyberswap_chain_ids),
            kyberswap_pages=_env_int("KYBERSWAP_PAGES", defaults.kyberswap_pages),
            kyberswap_page_size=_env_int("KYBERSWAP_PAGE_SIZE", defaults.kyberswap_page_size),
            dexscreener_endpoints=_env_list("DEXSCREENER_ENDPOINTS", defaults.dexscreener_endpoints),
            dexscreener_chains=_env_list("DEXSCREENER_CHAINS", defaults.dexscreener_chains),
            dexscreener_dex_filter=_env_str("DEXSCREENER_DEX_FILTER", defaults.dexscreener_dex_filter),
            dexscreener_min_liquidity=_env_float("DEXSCREENER_MIN_LIQUIDITY", defaults.dexscreener_min_liquidity),
            binance_ticker_url=_env_str("BINANCE_TICKER_URL", defaults.binance_ticker_url),
            source_timeout_sec=_env_float("SOURCE_TIMEOUT_SEC", defaults.source_timeout_sec),
            source_max_attempts=_env_int("SOURCE_MAX_ATTEMPTS", defaults.source_max_attempts),
            source_backoff_sec=_env_float("SOURCE_BACKOFF_SEC", defaults.source_backoff_sec),
            monitor_interval_sec=_env_int("MONITOR_INTERVAL_SEC", defaults.monitor_interval_sec),
            reset_time=_env_str("RESET_TIME", defaults.reset_time),
            reset_timezone=_env_str("RESET_TIMEZONE", defaults.reset_timezone),
            dedup_keep_days=_env_int("DEDUP_KEEP_DAYS", defaults.dedup_keep_days),
            alpha_enabled=_env_bool("ALPHA_ENABLED", defaults.alpha_enabled),
            alpha_interval_sec=_env_int("ALPHA_INTERVAL_SEC", defaults.alpha_interval_sec),
            alpha_min_change_pct=_env_float("ALPHA_MIN_CHANGE_PCT", defaults.alpha_min_change_pct),
            alpha_min_quote_volume=_env_float("ALPHA_MIN_QUOTE_VOLUME", defaults.alpha_min_quote_volume),
            telegram_bot_token=_env_str("TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=_env_str("TELEGRAM_CHAT_ID"),
            telegram_button_text=_env_str("TELEGRAM_BUTTON_TEXT"),
            telegram_button_url=_env_str("TELEGRAM_BUTTON_URL"),
            telegram_timeout_sec=_env_float("TELEGRAM_TIMEOUT_SEC", defaults.telegram_timeout_sec),
            webhook_service=_env_str("WEBHOOK_SERVICE").lower(),
            webhook_api_key=_env_str("WEBHOOK_API_KEY"),
            webhook_url=_env_str("WEBHOOK_URL"),
            webhook_key=_env_str("WEBHOOK_KEY"),
            webhook_uid=_env_str("WEBHOOK_UID"),
            apr_medium=_env_float("APR_MEDIUM", defaults.apr_medium),
            apr_high=_env_float("APR_HIGH", defaults.apr_high),
            apr_hot=_env_float("APR_HOT", defaults.apr_hot),
            dry_run=_env_bool("DRY_RUN", defaults.dry_run),
            data_dir=Path(data_dir) if data_dir else defaults.data_dir,
            log_level=_env_str("LOG_LEVEL", defaults.log_level).upper(),
            log_file=_env_str("LOG_FILE", defaults.log_file),
        )
