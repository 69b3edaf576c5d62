# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Notification Handlers

Outbound delivery for demo expiration warnings and admin alerts:
- SendGrid HTTP API (production)
- Log output (development)
- Custom callback (tests, integrations)

Every handler implements send(to, subject, body) -> bool. Delivery
failures are reported as False, never raised, so a failed send never
aborts a batch.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx

from ..core.settings import EmailSettings

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """A single outbound message."""

    to: str
    subject: str
    body: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "to": self.to,
            "subject": self.subject,
            "body": self.body,
            "timestamp": self.timestamp.isoformat(),
        }


class Notifier:
    """Base class for notification handlers."""

    async def send(self, to: str, subject: str, body: str) -> bool:
        """Send a notification. Returns True if successful."""
        raise NotImplementedError


class SendGridNotifier(Notifier):
    """Send email through the SendGrid v3 mail API."""

    def __init__(
        self,
        api_key: str,
        from_address: str,
        url: str = "https://api.sendgrid.com/v3/mail/send",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.from_address = from_address
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def _payload(self, to: str, subject: str, body: str) -> dict[str, Any]:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.from_address},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }

    async def send(self, to: str, subject: str, body: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.url,
                    json=self._payload(to, subject, body),
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                )

                if response.status_code < 300:
                    logger.info(f"Email sent via SendGrid: {subject!r}")
                    return True
                else:
                    logger.warning(
                        f"SendGrid returned {response.status_code}: {response.text[:200]}"
                    )
                    return False

        except httpx.HTTPError as e:
            logger.error(f"Failed to send email via SendGrid: {e}")
            return False


class LogNotifier(Notifier):
    """Log notifications (for development/testing)."""

    def __init__(self, log_level: int = logging.INFO, max_history: int = 100):
        self.log_level = log_level
        self.max_history = max_history
        self.sent: list[Notification] = []  # most recent max_history only

    async def send(self, to: str, subject: str, body: str) -> bool:
        notification = Notification(to=to, subject=subject, body=body)
        self.sent.append(notification)
        if len(self.sent) > self.max_history:
            del self.sent[: -self.max_history]
        logger.log(self.log_level, f"EMAIL QUEUED subject={subject!r}")
        logger.debug(body)
        return True


class CallbackNotifier(Notifier):
    """Call a custom sync or async callback for each notification."""

    def __init__(self, callback: Callable[[Notification], Any]):
        self.callback = callback

    async def send(self, to: str, subject: str, body: str) -> bool:
        try:
            result = self.callback(Notification(to=to, subject=subject, body=body))
            if asyncio.iscoroutine(result):
                result = await result
            return result is not False
        except Exception as e:
            logger.error(f"Notification callback failed: {e}")
            return False


def build_notifier(settings: EmailSettings) -> Notifier:
    """Create the notifier selected by EMAIL_PROVIDER."""
    if settings.provider == "sendgrid":
        return SendGridNotifier(
            api_key=settings.sendgrid_api_key or "",
            from_address=settings.from_address,
            url=settings.sendgrid_url,
            timeout=settings.timeout,
        )
    return LogNotifier()


__all__ = [
    "Notification",
    "Notifier",
    "SendGridNotifier",
    "LogNotifier",
    "CallbackNotifier",
    "build_notifier",
]
