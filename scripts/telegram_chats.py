#!/usr/bin/env python3
"""
List the chats your bot can post to.

Add the bot to a group/channel (or message it), then run:
    python scripts/telegram_chats.py
    python scripts/telegram_chats.py --chat-id -1001234567890
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from poolwatch.alerts import TelegramNotifier
from poolwatch.config import Config
from poolwatch.exceptions import NotificationError


def main():
    parser = argparse.ArgumentParser(description="Discover Telegram chat ids")
    parser.add_argument("--chat-id", help="Show details for one chat instead of listing")
    args = parser.parse_args()

    config = Config.from_env()
    if not config.telegram_bot_token:
        print("TELEGRAM_BOT_TOKEN is not set")
        sys.exit(1)

    notifier = TelegramNotifier.from_config(config, dry_run=False)
    try:
        if args.chat_id:
            info = notifier.get_chat_info(args.chat_id)
            print(json.dumps(info, indent=2, ensure_ascii=False))
            return

        chats = notifier.list_chats()
        if not chats:
            print("No chats found. Send a message to the bot (or add it to a group) and retry.")
            return

        print(f"{'CHAT ID':<20} {'TYPE':<12} TITLE")
        print("-" * 60)
        for chat in chats:
            print(f"{chat['id']:<20} {chat['type']:<12} {chat['title']}")
        print("\nSet TELEGRAM_CHAT_ID to one of the ids above.")
    except NotificationError as e:
        print(f"Telegram error: {e}")
        sys.exit(1)
    finally:
        notifier.close()


if __name__ == "__main__":
    main()
