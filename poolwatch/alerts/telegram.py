"""
Telegram Alerts
===============

Telegram Bot API client for the pool monitor.

Supported calls:
- sendMessage: plain/Markdown text, optionally with one inline URL button
- sendPhoto: local file / bytes (multipart) or a public image URL
- getUpdates / getChat: discover and inspect chats the bot can post to

The bot token is part of every request URL, so it is never logged:
transport errors are re-raised with the token masked and API errors only
carry the status code and Telegram's description.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from ..exceptions import NotificationError, NotifierHTTPError
from ..utils.retry import RetryPolicy, is_retriable_notifier_error

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/{method}"

# Returned instead of a real message_id in dry-run mode
DRY_RUN_MESSAGE_ID = 999999

PHOTO_FILENAME = "pool_info.png"


@dataclass
class TelegramConfig:
    """Configuration for Telegram sending."""
    bot_token: str
    chat_id: str
    dry_run: bool = False
    timeout: float = 45.0
    max_message_length: int = 4096
    button_text: str = ""
    button_url: str = ""


def default_notifier_retry() -> RetryPolicy:
    """3 attempts, linear backoff attempt * 2s, transport errors only."""
    return RetryPolicy(
        max_attempts=3,
        base_delay=2.0,
        backoff="linear",
        retry_on=is_retriable_notifier_error,
    )


class TelegramNotifier:
    """
    Telegram Bot API sender.

    Send methods return the Telegram message_id, or None when skipped
    because the bot token / chat id is not configured.
    """

    def __init__(
        self,
        config: TelegramConfig,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.retry_policy = retry_policy or default_notifier_retry()
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config, dry_run: Optional[bool] = None) -> "TelegramNotifier":
        """Build from a poolwatch Config."""
        return cls(TelegramConfig(
            bot_token=config.telegram_bot_token,
            chat_id=config.telegram_chat_id,
            dry_run=config.dry_run if dry_run is None else dry_run,
            timeout=config.telegram_timeout_sec,
            max_message_length=config.max_message_length,
            button_text=config.telegram_button_text,
            button_url=config.telegram_button_url,
        ))

    @property
    def is_configured(self) -> bool:
        return bool(self.config.bot_token and self.config.chat_id)

    @property
    def has_button(self) -> bool:
        return bool(self.config.button_text and self.config.button_url)

    def close(self):
        self.session.close()

    # -------------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------------

    def _mask(self, text: str) -> str:
        if self.config.bot_token:
            return text.replace(self.config.bot_token, "***")
        return text

    def _post(self, method: str, **kwargs) -> requests.Response:
        url = TELEGRAM_API_URL.format(token=self.config.bot_token, method=method)
        try:
            return self.session.post(url, timeout=self.config.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            # Same exception type so the retry predicate still applies
            raise type(e)(self._mask(str(e))) from None

    def _call(self, method: str, **kwargs) -> Any:
        """
        Call a Bot API method and return its `result`.

        Raises:
            NotifierHTTPError: non-2xx or ok=false (not retried)
            NotificationError: transport failure after retries
        """
        try:
            response = self.retry_policy.call(self._post, method, description=f"Telegram {method}", **kwargs)
        except requests.exceptions.RequestException as e:
            raise NotificationError(f"Telegram {method} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not 200 <= response.status_code < 300 or not body.get("ok", False):
            description = body.get("description") or "no description"
            if response.status_code == 429:
                logger.warning("Telegram rate limit hit (429)")
            raise NotifierHTTPError(
                f"Telegram {method} failed: HTTP {response.status_code}: {description}",
                status_code=response.status_code,
            )
        return body.get("result")

    def _dry_run(self, kind: str, text: str) -> int:
        logger.info(f"[DRY RUN] Would send Telegram {kind}:\n{text}")
        print(f"\n{'='*60}")
        print(f"[DRY RUN] Telegram {kind}:")
        print("=" * 60)
        print(text)
        print("=" * 60 + "\n")
        return DRY_RUN_MESSAGE_ID

    def _target(self, chat_id: Optional[str]) -> Optional[str]:
        target = chat_id or self.config.chat_id
        if not self.config.bot_token or not target:
            logger.warning("Telegram not configured (set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID) - skipped")
            return None
        return target

    @staticmethod
    def _message_id(result: Any) -> Optional[int]:
        if isinstance(result, dict):
            return result.get("message_id")
        return None

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def send_text(self, text: str, markdown: bool = True, chat_id: Optional[str] = None) -> Optional[int]:
        """
        Send a text message (form-encoded body).

        Returns:
            message_id, or None when skipped
        """
        if self.config.dry_run:
            return self._dry_run("message", text)
        target = self._target(chat_id)
        if target is None:
            return None

        data = {"chat_id": target, "text": text}
        if markdown:
            data["parse_mode"] = "Markdown"
        message_id = self._message_id(self._call("sendMessage", data=data))
        logger.info(f"Telegram message sent (message_id: {message_id})")
        return message_id

    def send_text_with_button(
        self,
        text: str,
        button_text: Optional[str] = None,
        button_url: Optional[str] = None,
        markdown: bool = True,
        chat_id: Optional[str] = None,
    ) -> Optional[int]:
        """
        Send a text message with one inline URL button under it (JSON body).

        Falls back to send_text when no button is configured.
        """
        button_text = button_text or self.config.button_text
        button_url = button_url or self.config.button_url
        if not (button_text and button_url):
            return self.send_text(text, markdown=markdown, chat_id=chat_id)

        if self.config.dry_run:
            return self._dry_run("message", f"{text}\n[{button_text}]({button_url})")
        target = self._target(chat_id)
        if target is None:
            return None

        payload: Dict[str, Any] = {
            "chat_id": target,
            "text": text,
            "reply_markup": {
                "inline_keyboard": [[{"text": button_text, "url": button_url}]],
            },
        }
        if markdown:
            payload["parse_mode"] = "Markdown"
        message_id = self._message_id(self._call("sendMessage", json=payload))
        logger.info(f"Telegram message with button sent (message_id: {message_id})")
        return message_id

    def send_photo(
        self,
        photo: Union[str, Path, bytes],
        caption: str = "",
        chat_id: Optional[str] = None,
    ) -> Optional[int]:
        """Upload an image (file path or raw bytes) as multipart/form-data."""
        if self.config.dry_run:
            return self._dry_run("photo", caption or "(no caption)")
        target = self._target(chat_id)
        if target is None:
            return None

        content = photo if isinstance(photo, bytes) else Path(photo).read_bytes()
        data = {"chat_id": target}
        if caption:
            data["caption"] = caption
        files = {"photo": (PHOTO_FILENAME, content, "image/png")}
        message_id = self._message_id(self._call("sendPhoto", data=data, files=files))
        logger.info(f"Telegram photo sent (message_id: {message_id})")
        return message_id

    def send_photo_by_url(self, photo_url: str, caption: str = "", chat_id: Optional[str] = None) -> Optional[int]:
        """Let Telegram fetch the image from a public URL."""
        if not photo_url:
            raise ValueError("photo_url is required")
        if self.config.dry_run:
            return self._dry_run("photo", f"{photo_url}\n{caption}")
        target = self._target(chat_id)
        if target is None:
            return None

        data = {"chat_id": target, "photo": photo_url}
        if caption:
            data["caption"] = caption
        message_id = self._message_id(self._call("sendPhoto", data=data))
        logger.info(f"Telegram photo (by URL) sent (message_id: {message_id})")
        return message_id

    # -------------------------------------------------------------------------
    # Chat discovery
    # -------------------------------------------------------------------------

    def get_updates(self) -> List[dict]:
        """Recent updates the bot has received (empty without a token)."""
        if not self.config.bot_token:
            logger.warning("TELEGRAM_BOT_TOKEN not set - cannot fetch updates")
            return []
        result = self._call("getUpdates")
        return result if isinstance(result, list) else []

    def get_chat_info(self, chat_id: str) -> Optional[dict]:
        """Chat object for chat_id (None without a token)."""
        if not self.config.bot_token:
            logger.warning("TELEGRAM_BOT_TOKEN not set - cannot fetch chat info")
            return None
        result = self._call("getChat", data={"chat_id": chat_id})
        return result if isinstance(result, dict) else None

    def list_chats(self) -> List[dict]:
        """
        Chats seen in recent updates, de-duplicated by chat id.

        Each entry has id, type and title (group/channel title or user name).
        """
        chats: Dict[Any, dict] = {}
        for update in self.get_updates():
            for key in ("message", "edited_message", "channel_post", "my_chat_member"):
                chat = (update.get(key) or {}).get("chat")
                if not chat or chat.get("id") in chats:
                    continue
                title = chat.get("title") or chat.get("username") or " ".join(
                    p for p in (chat.get("first_name"), chat.get("last_name")) if p
                )
                chats[chat["id"]] = {
                    "id": chat["id"],
                    "type": chat.get("type", ""),
                    "title": title,
                }
        return list(chats.values())
