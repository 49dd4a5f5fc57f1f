from .formatter import (
    format_alpha_message,
    format_apr,
    format_pool_message,
    format_pools_message,
    format_pools_plain,
    format_usd,
    split_message,
)
from .telegram import TelegramConfig, TelegramNotifier
from .webhook import WebhookNotifier

__all__ = [
    "format_alpha_message",
    "format_apr",
    "format_pool_message",
    "format_pools_message",
    "format_pools_plain",
    "format_usd",
    "split_message",
    "TelegramConfig",
    "TelegramNotifier",
    "WebhookNotifier",
]
