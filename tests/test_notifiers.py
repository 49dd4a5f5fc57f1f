"""
Tests for the Telegram and webhook notifiers.
"""

import pytest
import requests

from poolwatch.alerts.telegram import DRY_RUN_MESSAGE_ID, TelegramConfig, TelegramNotifier
from poolwatch.alerts.webhook import WebhookNotifier
from poolwatch.exceptions import NotificationError, NotifierHTTPError
from poolwatch.utils.retry import RetryPolicy, is_retriable_notifier_error
from tests.conftest import FakeResponse

TOKEN = "123456:SECRET-token"


def notifier_retry(sleeps):
    return RetryPolicy(max_attempts=3, base_delay=2.0, backoff="linear",
                       retry_on=is_retriable_notifier_error, sleep=sleeps.append)


def ok(message_id=42):
    return FakeResponse(200, {"ok": True, "result": {"message_id": message_id}})


@pytest.fixture
def telegram(session, sleeps):
    config = TelegramConfig(bot_token=TOKEN, chat_id="-100123", button_text="Contact", button_url="https://t.me/me")
    return TelegramNotifier(config, retry_policy=notifier_retry(sleeps), session=session)


# ============================================================
# Telegram
# ============================================================

class TestTelegramSend:

    def test_send_text_uses_form_body(self, telegram, session):
        session.post.return_value = ok(7)

        assert telegram.send_text("*hi*") == 7

        url = session.post.call_args.args[0]
        kwargs = session.post.call_args.kwargs
        assert url == f"https://api.telegram.org/bot{TOKEN}/sendMessage"
        assert kwargs["data"] == {"chat_id": "-100123", "text": "*hi*", "parse_mode": "Markdown"}
        assert "json" not in kwargs
        assert kwargs["timeout"] == 45.0

    def test_send_plain_text_without_parse_mode(self, telegram, session):
        session.post.return_value = ok()
        telegram.send_text("plain", markdown=False, chat_id="999")
        assert session.post.call_args.kwargs["data"] == {"chat_id": "999", "text": "plain"}

    def test_button_switches_to_json_body(self, telegram, session):
        session.post.return_value = ok(8)

        assert telegram.send_text_with_button("hello") == 8

        payload = session.post.call_args.kwargs["json"]
        assert payload["reply_markup"] == {"inline_keyboard": [[{"text": "Contact", "url": "https://t.me/me"}]]}
        assert payload["parse_mode"] == "Markdown"
        assert "data" not in session.post.call_args.kwargs

    def test_button_without_config_falls_back_to_text(self, session, sleeps):
        notifier = TelegramNotifier(TelegramConfig(TOKEN, "1"), retry_policy=notifier_retry(sleeps), session=session)
        session.post.return_value = ok()
        notifier.send_text_with_button("hello")
        assert "data" in session.post.call_args.kwargs

    def test_missing_credentials_skip(self, session):
        notifier = TelegramNotifier(TelegramConfig(bot_token="", chat_id=""), session=session)
        assert notifier.send_text("x") is None
        assert notifier.send_text_with_button("x", "b", "https://u") is None
        session.post.assert_not_called()

    def test_dry_run_sends_nothing(self, session):
        notifier = TelegramNotifier(TelegramConfig(bot_token="", chat_id="", dry_run=True), session=session)
        assert notifier.send_text("x") == DRY_RUN_MESSAGE_ID
        session.post.assert_not_called()

    def test_error_status_not_retried(self, telegram, session, sleeps):
        session.post.return_value = FakeResponse(400, {"ok": False, "description": "Bad Request: can't parse entities"})

        with pytest.raises(NotifierHTTPError, match="can't parse entities") as exc_info:
            telegram.send_text("*broken")

        assert exc_info.value.status_code == 400
        assert session.post.call_count == 1
        assert sleeps == []

    def test_ok_false_is_an_error(self, telegram, session):
        session.post.return_value = FakeResponse(200, {"ok": False, "description": "chat not found"})
        with pytest.raises(NotifierHTTPError, match="chat not found"):
            telegram.send_text("x")

    def test_transient_error_retried_linearly(self, telegram, session, sleeps):
        session.post.side_effect = [
            requests.exceptions.ConnectionError("Connection reset by peer"),
            requests.exceptions.ReadTimeout("Read timed out"),
            ok(9),
        ]

        assert telegram.send_text("x") == 9
        assert sleeps == [2.0, 4.0]

    def test_token_masked_after_exhaustion(self, telegram, session):
        session.post.side_effect = requests.exceptions.ConnectionError(
            f"Max retries exceeded with url: /bot{TOKEN}/sendMessage "
            "(Caused by NewConnectionError('[Errno 111] Connection refused'))"
        )

        with pytest.raises(NotificationError) as exc_info:
            telegram.send_text("x")

        assert TOKEN not in str(exc_info.value)
        assert session.post.call_count == 3

    def test_dns_failure_not_retried(self, telegram, session, sleeps):
        session.post.side_effect = requests.exceptions.ConnectionError(
            "Failed to resolve 'api.telegram.org' ([Errno -2] Name or service not known)"
        )

        with pytest.raises(NotificationError):
            telegram.send_text("x")

        assert session.post.call_count == 1
        assert sleeps == []


class TestTelegramPhotos:

    def test_send_photo_bytes_is_multipart(self, telegram, session):
        session.post.return_value = ok(11)

        assert telegram.send_photo(b"\x89PNG", caption="pool") == 11

        kwargs = session.post.call_args.kwargs
        assert session.post.call_args.args[0].endswith("/sendPhoto")
        assert kwargs["files"] == {"photo": ("pool_info.png", b"\x89PNG", "image/png")}
        assert kwargs["data"] == {"chat_id": "-100123", "caption": "pool"}

    def test_send_photo_from_path(self, telegram, session, tmp_path):
        path = tmp_path / "img.png"
        path.write_bytes(b"img")
        session.post.return_value = ok()
        telegram.send_photo(path)
        assert session.post.call_args.kwargs["files"]["photo"][1] == b"img"

    def test_send_photo_by_url(self, telegram, session):
        session.post.return_value = ok(12)
        assert telegram.send_photo_by_url("https://img/x.png", "cap") == 12
        assert session.post.call_args.kwargs["data"]["photo"] == "https://img/x.png"

    def test_send_photo_by_url_requires_url(self, telegram):
        with pytest.raises(ValueError):
            telegram.send_photo_by_url("")


class TestTelegramChats:

    def test_list_chats_dedups(self, telegram, session):
        session.post.return_value = FakeResponse(200, {"ok": True, "result": [
            {"update_id": 1, "message": {"chat": {"id": 5, "type": "private", "first_name": "Ann", "last_name": "Lee"}}},
            {"update_id": 2, "message": {"chat": {"id": 5, "type": "private", "first_name": "Ann"}}},
            {"update_id": 3, "channel_post": {"chat": {"id": -100, "type": "channel", "title": "Pools"}}},
        ]})

        chats = telegram.list_chats()

        assert chats == [
            {"id": 5, "type": "private", "title": "Ann Lee"},
            {"id": -100, "type": "channel", "title": "Pools"},
        ]
        assert session.post.call_args.args[0].endswith("/getUpdates")

    def test_get_chat_info(self, telegram, session):
        session.post.return_value = FakeResponse(200, {"ok": True, "result": {"id": -100, "title": "Pools"}})
        assert telegram.get_chat_info("-100") == {"id": -100, "title": "Pools"}
        assert session.post.call_args.kwargs["data"] == {"chat_id": "-100"}

    def test_no_token_returns_empty(self, session):
        notifier = TelegramNotifier(TelegramConfig("", ""), session=session)
        assert notifier.list_chats() == []
        assert notifier.get_chat_info("1") is None


# ============================================================
# Webhooks
# ============================================================

def webhook(service, session, sleeps, **kwargs):
    return WebhookNotifier(service, retry_policy=notifier_retry(sleeps), session=session, **kwargs)


class TestWebhookNotifier:

    def test_serverchan(self, session, sleeps):
        session.post.return_value = FakeResponse(200, {"code": 0, "message": ""})
        notifier = webhook("serverchan", session, sleeps, api_key="SCT123")

        assert notifier.send_text("body", title="Title")

        assert session.post.call_args.args[0] == "https://sctapi.ftqq.com/SCT123.send"
        assert session.post.call_args.kwargs["data"] == {"title": "Title", "desp": "body"}

    def test_serverchan_error_code(self, session, sleeps):
        session.post.return_value = FakeResponse(200, {"code": 40001, "message": "bad key"})
        with pytest.raises(NotifierHTTPError, match="bad key"):
            webhook("serverchan", session, sleeps, api_key="SCT123").send_text("body")

    def test_wxpusher(self, session, sleeps):
        session.post.return_value = FakeResponse(200, {"success": True})
        webhook("wxpusher", session, sleeps, api_key="AT_x", uid="UID_1").send_text("body", title="T")

        payload = session.post.call_args.kwargs["json"]
        assert payload == {"appToken": "AT_x", "content": "body", "summary": "T", "contentType": 1, "uids": ["UID_1"]}

    def test_wxpusher_failure(self, session, sleeps):
        session.post.return_value = FakeResponse(200, {"success": False, "msg": "uid invalid"})
        with pytest.raises(NotifierHTTPError, match="uid invalid"):
            webhook("wxpusher", session, sleeps, api_key="AT_x", uid="UID_1").send_text("body")

    def test_qywx(self, session, sleeps):
        session.post.return_value = FakeResponse(200, {"errcode": 0, "errmsg": "ok"})
        url = "https://qyapi.weixin.qq.com/cgi-bin/webhook/send?key=k"
        webhook("qywx", session, sleeps, url=url).send_text("body")

        assert session.post.call_args.args[0] == url
        assert session.post.call_args.kwargs["json"] == {"msgtype": "text", "text": {"content": "body"}}

    def test_qywx_errcode(self, session, sleeps):
        session.post.return_value = FakeResponse(200, {"errcode": 93000, "errmsg": "invalid webhook url"})
        with pytest.raises(NotifierHTTPError, match="93000"):
            webhook("qywx", session, sleeps, url="https://q").send_text("body")

    def test_http_error(self, session, sleeps):
        session.post.return_value = FakeResponse(500, text="boom")
        with pytest.raises(NotifierHTTPError) as exc_info:
            webhook("qywx", session, sleeps, url="https://q").send_text("body")
        assert exc_info.value.status_code == 500
        assert session.post.call_count == 1

    def test_missing_credentials_skip(self, session, sleeps):
        assert webhook("wxpusher", session, sleeps, api_key="AT_x").send_text("body") is None
        assert webhook("qywx", session, sleeps).send_text("body") is None
        session.post.assert_not_called()

    def test_unknown_service(self, session):
        with pytest.raises(NotificationError):
            WebhookNotifier("pigeon", session=session)
