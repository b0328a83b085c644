"""
Notification dispatcher.

WHAT: Transport for outgoing notification email, behind a provider
interface with a Resend implementation and an in-memory mock.

WHY: Bulk sends must report per-recipient success or failure instead of
aborting the batch, so providers return a DispatchResult rather than
raising on delivery errors.

HOW: ResendProvider posts to the Resend REST API with httpx. When no API
key is configured the mock provider is used, which records messages for
tests and local development.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import httpx

from backoffice.core.config import settings
from backoffice.models.base import utcnow


logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass
class NotificationMessage:
    """One rendered email for one recipient."""

    to_email: str
    subject: str
    html_content: str
    from_email: Optional[str] = None


@dataclass
class DispatchResult:
    """
    Result of a send operation.

    WHY: Feeds the per-recipient email log and the bulk send summary.
    """

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    provider: Optional[str] = None


# ============================================================================
# Provider Interface
# ============================================================================


class NotificationProvider(ABC):
    """Abstract base class for notification transports."""

    @abstractmethod
    async def send(self, message: NotificationMessage) -> DispatchResult:
        """
        Send one message.

        Returns:
            DispatchResult; delivery failures are reported, not raised
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """True if credentials are present."""


class ResendProvider(NotificationProvider):
    """Resend email provider implementation."""

    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None):
        """
        Args:
            api_key: Resend API key (defaults to settings)
            from_email: Sender (defaults to NOTIFICATION_FROM_EMAIL)
        """
        self._api_key = api_key or settings.RESEND_API_KEY
        self._default_from = from_email or settings.NOTIFICATION_FROM_EMAIL

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def send(self, message: NotificationMessage) -> DispatchResult:
        """
        Send email via Resend API.

        HOW: One POST per message; any non-2xx answer or transport error is
        returned as a failed result carrying the reason.
        """
        if not self.is_configured():
            return DispatchResult(
                success=False,
                error="Resend API key not configured",
                provider="resend",
            )

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    RESEND_API_URL,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": message.from_email or self._default_from,
                        "to": [message.to_email],
                        "subject": message.subject,
                        "html": message.html_content,
                    },
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logger.error(f"Resend send error for {message.to_email}: {e}")
            return DispatchResult(success=False, error=str(e), provider="resend")

        if response.status_code in (200, 201):
            data = response.json()
            return DispatchResult(
                success=True,
                message_id=data.get("id"),
                provider="resend",
            )

        return DispatchResult(
            success=False,
            error=f"Resend API error: {response.status_code} - {response.text}",
            provider="resend",
        )


class MockNotificationProvider(NotificationProvider):
    """
    Mock provider for testing and development.

    Logs messages instead of sending them. Addresses listed in
    failing_addresses are reported as failed deliveries.
    """

    sent_messages: List[NotificationMessage] = []
    """Class-level list to track sent messages for testing."""

    def __init__(self, failing_addresses: Optional[List[str]] = None):
        self.failing_addresses = set(failing_addresses or [])

    def is_configured(self) -> bool:
        return True

    async def send(self, message: NotificationMessage) -> DispatchResult:
        if message.to_email in self.failing_addresses:
            return DispatchResult(
                success=False,
                error="Mailbox unavailable",
                provider="mock",
            )

        logger.info(f"[MOCK EMAIL] To: {message.to_email}, Subject: {message.subject}")
        MockNotificationProvider.sent_messages.append(message)

        return DispatchResult(
            success=True,
            message_id=f"mock-{utcnow().timestamp()}",
            provider="mock",
        )

    @classmethod
    def clear_sent_messages(cls):
        """Clear sent messages list (for test cleanup)."""
        cls.sent_messages = []


def get_notification_provider() -> NotificationProvider:
    """
    Provider chosen from configuration.

    Returns:
        ResendProvider when RESEND_API_KEY is set, otherwise the mock
    """
    if settings.RESEND_API_KEY:
        return ResendProvider()
    logger.warning("No notification provider configured, using mock provider")
    return MockNotificationProvider()
