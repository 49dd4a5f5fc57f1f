#!/usr/bin/env python3
"""
Pool Monitor Service - CLI Entry Point
======================================

Polls KyberSwap (falling back to DexScreener) for high-APR pools that pair
with USDT/USDC and announces new ones to Telegram and an optional webhook
chat service. The dedup window is cleared once a day.

Usage:
    # Start monitor
    python scripts/run_monitor.py

    # Dry run (log alerts only, nothing is sent)
    python scripts/run_monitor.py --dry-run

    # One tick and exit
    python scripts/run_monitor.py --once

    # Test Telegram configuration
    python scripts/run_monitor.py --test-telegram
"""

import argparse
import dataclasses
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from poolwatch.config import Config
from poolwatch.exceptions import NotificationError
from poolwatch.monitor import MonitorService


def setup_logging(log_level: str, log_file: str):
    """Configure logging for the monitor service."""
    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = project_root / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Create date-stamped log file (e.g., logs/monitor_2026-01-18.log)
    date_str = datetime.now().strftime("%Y-%m-%d")
    dated_log_file = log_path.parent / f"{log_path.stem}_{date_str}{log_path.suffix}"

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(dated_log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from requests library
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    root_logger.info(f"Logging to: {dated_log_file}")


def main():
    config = Config.from_env()

    parser = argparse.ArgumentParser(
        description='Pool Monitor Service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_monitor.py                 # Start monitor
  python scripts/run_monitor.py --dry-run       # Log alerts only
  python scripts/run_monitor.py --once          # One tick and exit
  python scripts/run_monitor.py --reset-today   # Clear today's dedup window
  python scripts/run_monitor.py --test-telegram # Test Telegram setup
        """
    )
    parser.add_argument('--dry-run', action='store_true',
                        help='Log alerts instead of sending them')
    parser.add_argument('--once', action='store_true',
                        help='Run a single monitor tick and exit')
    parser.add_argument('--reset-today', action='store_true',
                        help="Clear today's dedup window before starting")
    parser.add_argument('--no-alpha', action='store_true',
                        help='Disable the Binance alpha ticker monitor')
    parser.add_argument('--test-telegram', action='store_true',
                        help='Send a test message to verify Telegram configuration')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default=config.log_level,
                        help=f'Log level (default: {config.log_level})')
    args = parser.parse_args()

    if args.dry_run:
        config = dataclasses.replace(config, dry_run=True)

    setup_logging(args.log_level, config.log_file)
    logger = logging.getLogger(__name__)

    service = MonitorService.from_config(config, alpha=False if args.no_alpha else None)

    if args.test_telegram:
        print("Testing Telegram configuration...")
        try:
            message_id = service.send_test_message()
        except NotificationError as e:
            print(f"Failed to send test message: {e}")
            sys.exit(1)
        finally:
            service.close()
        if message_id is None:
            print("Telegram not configured. Set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID.")
            sys.exit(1)
        print(f"Test message sent (message_id: {message_id})")
        sys.exit(0)

    print("\n" + "=" * 60)
    print("POOL MONITOR SERVICE")
    print("=" * 60)
    print(f"Sources:        KyberSwap (chains {config.kyberswap_chain_ids}) -> DexScreener")
    print(f"Filter:         one of {config.reference_symbols}, none of {config.disallowed_symbols}")
    print(f"Poll interval:  {config.monitor_interval_sec} seconds")
    print(f"Daily reset:    {config.reset_time} {config.reset_timezone}")
    print(f"Dry run:        {config.dry_run}")
    print(f"Log level:      {args.log_level}")
    print("=" * 60)

    if not config.dry_run and not (config.telegram_bot_token and config.telegram_chat_id):
        print("\nWARNING: TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID not set - Telegram alerts will be skipped.")
        print("Set them in .env or use --dry-run for log output.")

    if args.reset_today:
        service.reset_today()
        print("Dedup window for today cleared.")

    try:
        if args.once:
            result = service.run_once()
            print(
                f"\nSource: {result.source or 'none'} | fetched {result.fetched} | "
                f"new {len(result.new_records)} | sent {result.chunks_sent} | "
                f"failed {result.chunk_failures}"
            )
            service.close()
            sys.exit(0)

        print("\nStarting monitor service...")
        print("Press Ctrl+C to stop\n")
        service.run()

    except KeyboardInterrupt:
        print("\n\nMonitor stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Monitor service error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
