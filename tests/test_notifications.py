"""
Tests for notification handlers.
"""

import json
import logging

import httpx
import pytest

from thrive.core.settings import EmailSettings
from thrive.notifications.handlers import (
    CallbackNotifier,
    LogNotifier,
    SendGridNotifier,
    build_notifier,
)


def sendgrid(handler):
    return SendGridNotifier(
        api_key="SG.test-key",
        from_address="noreply@thrive.local",
        transport=httpx.MockTransport(handler),
    )


class TestSendGridNotifier:
    @pytest.mark.asyncio
    async def test_posts_mail_payload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(202)

        assert await sendgrid(handler).send("demo@example.com", "Subject", "Body") is True

        request = captured["request"]
        assert request.method == "POST"
        assert str(request.url) == "https://api.sendgrid.com/v3/mail/send"
        assert request.headers["Authorization"] == "Bearer SG.test-key"
        payload = json.loads(request.content)
        assert payload["personalizations"] == [{"to": [{"email": "demo@example.com"}]}]
        assert payload["from"] == {"email": "noreply@thrive.local"}
        assert payload["subject"] == "Subject"
        assert payload["content"] == [{"type": "text/plain", "value": "Body"}]

    @pytest.mark.asyncio
    async def test_error_status_returns_false(self):
        notifier = sendgrid(lambda request: httpx.Response(401, text="unauthorized"))
        assert await notifier.send("demo@example.com", "s", "b") is False

    @pytest.mark.asyncio
    async def test_transport_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert await sendgrid(handler).send("demo@example.com", "s", "b") is False


class TestLocalNotifiers:
    @pytest.mark.asyncio
    async def test_log_notifier_records(self):
        notifier = LogNotifier()
        assert await notifier.send("a@example.com", "Hi", "There") is True
        assert notifier.sent[0].to_dict()["subject"] == "Hi"

    @pytest.mark.asyncio
    async def test_log_notifier_keeps_recent_history(self, caplog):
        notifier = LogNotifier(max_history=2)
        with caplog.at_level(logging.INFO, logger="thrive.notifications.handlers"):
            for n in range(3):
                await notifier.send(f"user{n}@example.com", f"Subject {n}", "secret body text")

        assert [n.to for n in notifier.sent] == ["user1@example.com", "user2@example.com"]
        assert "secret body text" not in caplog.text
        assert "Subject 2" in caplog.text

    @pytest.mark.asyncio
    async def test_callback_sync_and_async(self):
        received = []

        async def async_callback(notification):
            received.append(notification.to)

        assert await CallbackNotifier(lambda n: received.append(n.to)).send("a@x.io", "s", "b")
        assert await CallbackNotifier(async_callback).send("b@x.io", "s", "b")
        assert received == ["a@x.io", "b@x.io"]

    @pytest.mark.asyncio
    async def test_callback_failure_returns_false(self):
        def explode(notification):
            raise RuntimeError("smtp down")

        assert await CallbackNotifier(explode).send("a@x.io", "s", "b") is False
        assert await CallbackNotifier(lambda n: False).send("a@x.io", "s", "b") is False


class TestBuildNotifier:
    def test_log_provider(self):
        assert isinstance(build_notifier(EmailSettings(provider="log")), LogNotifier)

    def test_sendgrid_provider(self):
        notifier = build_notifier(EmailSettings(provider="SendGrid", sendgrid_api_key="SG.key"))
        assert isinstance(notifier, SendGridNotifier)
        assert notifier.api_key == "SG.key"
