"""
Webhook Chat Alerts
===================

Plain-text push to WeChat-side services:
- serverchan: Server酱 (SendKey in the URL, form body, `code` == 0 on success)
- wxpusher:   WxPusher (app token + UID, JSON body, `success` == true)
- qywx:       WeCom group bot webhook (JSON text message, `errcode` == 0)
"""

import logging
from typing import Optional

import requests

from ..exceptions import NotificationError, NotifierHTTPError
from ..utils.retry import RetryPolicy
from .telegram import DRY_RUN_MESSAGE_ID, default_notifier_retry

logger = logging.getLogger(__name__)

SERVERCHAN_URL = "https://sctapi.ftqq.com/{key}.send"
WXPUSHER_URL = "https://wxpusher.zjiecode.com/api/send/message"

SERVICES = ("serverchan", "wxpusher", "qywx")

DEFAULT_TITLE = "New pool alert"


class WebhookNotifier:
    """
    Sender for one webhook chat service.

    Args:
        service: "serverchan", "wxpusher" or "qywx"
        api_key: SendKey (serverchan) or app token (wxpusher)
        url: WeCom webhook URL (qywx)
        uid: WxPusher recipient UID

    Raises:
        NotificationError: unknown service type
    """

    def __init__(
        self,
        service: str,
        api_key: str = "",
        url: str = "",
        uid: str = "",
        timeout: float = 45.0,
        max_message_length: int = 2000,
        dry_run: bool = False,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
    ):
        service = service.lower()
        if service not in SERVICES:
            raise NotificationError(f"Unsupported webhook service: {service!r} (use one of {', '.join(SERVICES)})")
        self.service = service
        self.api_key = api_key
        self.url = url
        self.uid = uid
        self.timeout = timeout
        self.max_message_length = max_message_length
        self.dry_run = dry_run
        self.retry_policy = retry_policy or default_notifier_retry()
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config, dry_run: Optional[bool] = None) -> Optional["WebhookNotifier"]:
        """None when no webhook service is configured."""
        if not config.webhook_service:
            return None
        return cls(
            service=config.webhook_service,
            api_key=config.webhook_api_key,
            url=config.webhook_endpoint or "",
            uid=config.webhook_uid,
            timeout=config.telegram_timeout_sec,
            max_message_length=config.webhook_max_message_length,
            dry_run=config.dry_run if dry_run is None else dry_run,
        )

    def close(self):
        self.session.close()

    def _missing_credentials(self) -> Optional[str]:
        if self.service == "serverchan" and not self.api_key:
            return "WEBHOOK_API_KEY (Server酱 SendKey)"
        if self.service == "wxpusher" and not (self.api_key and self.uid):
            return "WEBHOOK_API_KEY and WEBHOOK_UID (WxPusher)"
        if self.service == "qywx" and not self.url:
            return "WEBHOOK_URL or WEBHOOK_KEY (WeCom)"
        return None

    def _post(self, url: str, **kwargs) -> requests.Response:
        return self.session.post(url, timeout=self.timeout, **kwargs)

    def _request(self, url: str, **kwargs) -> dict:
        try:
            response = self.retry_policy.call(self._post, url, description=f"{self.service} send", **kwargs)
        except requests.exceptions.RequestException as e:
            # Server酱 keys live in the URL
            message = str(e).replace(self.api_key, "***") if self.api_key else str(e)
            raise NotificationError(f"{self.service} request failed: {message}") from None

        if not 200 <= response.status_code < 300:
            raise NotifierHTTPError(
                f"{self.service} HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise NotifierHTTPError(f"{self.service} returned non-JSON body", response.status_code) from e
        return body if isinstance(body, dict) else {}

    def send_text(self, text: str, title: str = DEFAULT_TITLE) -> Optional[int]:
        """
        Push one plain-text message.

        Returns:
            A truthy marker on success (fake id in dry-run), None when skipped

        Raises:
            NotifierHTTPError: error status or service-level failure code
            NotificationError: transport failure after retries
        """
        if self.dry_run:
            logger.info(f"[DRY RUN] Would send {self.service} message:\n{text}")
            return DRY_RUN_MESSAGE_ID

        missing = self._missing_credentials()
        if missing:
            logger.warning(f"{self.service} not configured (set {missing}) - skipped")
            return None

        if self.service == "serverchan":
            body = self._request(SERVERCHAN_URL.format(key=self.api_key), data={"title": title, "desp": text})
            if body.get("code") != 0:
                raise NotifierHTTPError(f"serverchan error {body.get('code')}: {body.get('message', '')}")
        elif self.service == "wxpusher":
            body = self._request(WXPUSHER_URL, json={
                "appToken": self.api_key,
                "content": text,
                "summary": title[:100],
                "contentType": 1,
                "uids": [self.uid],
            })
            if body.get("success") is not True:
                raise NotifierHTTPError(f"wxpusher error: {body.get('msg', '')}")
        else:
            body = self._request(self.url, json={"msgtype": "text", "text": {"content": text}})
            if body.get("errcode") != 0:
                raise NotifierHTTPError(f"qywx error {body.get('errcode')}: {body.get('errmsg', '')}")

        logger.info(f"{self.service} message sent ({len(text)} chars)")
        return 1
