"""
Notification Gateway

Provides a unified interface for delivering transactional email.
Postmark is used when POSTMARK_API_TOKEN is configured; otherwise a logging
no-op takes its place so call sites never check whether email is enabled.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.errors import UpstreamError
from ..config import settings

logger = logging.getLogger("uvicorn.error")


@dataclass
class EmailMessage:
    """A rendered email ready to be delivered"""
    to: str
    subject: str
    html_body: str
    text_body: str
    tag: Optional[str] = None  # Template name, e.g. "invite", "comment"


class Notifier(ABC):
    """Notification Gateway Abstract Base Class"""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        """
        Deliver one email.

        Raises:
        - UpstreamError: if the provider rejects the message or cannot be reached
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway name (e.g., "Postmark")"""
        pass


class PostmarkNotifier(Notifier):
    """Postmark HTTP API gateway"""

    def __init__(self, api_token: str, from_email: str, api_url: Optional[str] = None):
        self.api_token = api_token
        self.from_email = from_email
        self.api_url = api_url or settings.postmark_api_url

    @property
    def name(self) -> str:
        return "Postmark"

    async def send(self, message: EmailMessage) -> None:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-Postmark-Server-Token": self.api_token,
        }
        payload = {
            "From": self.from_email,
            "To": message.to,
            "Subject": message.subject,
            "HtmlBody": message.html_body,
            "TextBody": message.text_body,
            "MessageStream": "outbound",
        }
        if message.tag:
            payload["Tag"] = message.tag

        logger.info("[mailer] Sending %s email to %s", message.tag or "", message.to)
        try:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.post(self.api_url, headers=headers, json=payload)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to send {message.tag or 'email'} to {message.to}: {e}") from e
        logger.info("[mailer] Sent %s email to %s", message.tag or "", message.to)


class LoggingNotifier(Notifier):
    """Stand-in used when no email provider is configured"""

    @property
    def name(self) -> str:
        return "Logging (email disabled)"

    async def send(self, message: EmailMessage) -> None:
        logger.warning("[mailer] Email service disabled. Would have sent %r to %s",
                       message.subject, message.to)


# Process-wide gateway, built on first use
_notifier: Optional[Notifier] = None


def build_notifier() -> Notifier:
    if settings.postmark_api_token:
        return PostmarkNotifier(settings.postmark_api_token, settings.postmark_from_email)
    logger.warning("[mailer] POSTMARK_API_TOKEN not set. Email sending will be disabled.")
    return LoggingNotifier()


def get_notifier() -> Notifier:
    """
    Get the notification gateway

    Returns:
    - Notifier: PostmarkNotifier when configured, LoggingNotifier otherwise
    """
    global _notifier
    if _notifier is None:
        _notifier = build_notifier()
        logger.info("[mailer] Using %s", _notifier.name)
    return _notifier


def set_notifier(notifier: Optional[Notifier]) -> None:
    """Replace the gateway (None resets to lazy construction from settings)."""
    global _notifier
    _notifier = notifier
