"""
Tests for notification transports.

WHY: Bulk sending relies on providers reporting failures as results, so
an unreachable or unconfigured transport never raises.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from backoffice.core.config import settings
from backoffice.services.notification_dispatcher import (
    MockNotificationProvider,
    NotificationMessage,
    ResendProvider,
    get_notification_provider,
)


MESSAGE = NotificationMessage(
    to_email="anna@example.com", subject="Visa", html_content="<p>Hi</p>"
)


class TestMockProvider:
    """Tests for the in-memory provider."""

    @pytest.mark.asyncio
    async def test_records_message(self):
        result = await MockNotificationProvider().send(MESSAGE)

        assert result.success
        assert result.provider == "mock"
        assert MockNotificationProvider.sent_messages == [MESSAGE]

    @pytest.mark.asyncio
    async def test_failing_address(self):
        provider = MockNotificationProvider(failing_addresses=["anna@example.com"])

        result = await provider.send(MESSAGE)

        assert not result.success
        assert result.error == "Mailbox unavailable"
        assert MockNotificationProvider.sent_messages == []


class TestResendProvider:
    """Tests for the Resend transport."""

    @pytest.mark.asyncio
    async def test_unconfigured_reports_failure(self, monkeypatch):
        monkeypatch.setattr(settings, "RESEND_API_KEY", None)

        result = await ResendProvider().send(MESSAGE)

        assert not result.success
        assert "not configured" in result.error

    @pytest.mark.asyncio
    async def test_success(self):
        response = MagicMock(status_code=200)
        response.json.return_value = {"id": "re_123"}
        client = AsyncMock()
        client.post.return_value = response
        client.__aenter__.return_value = client

        with patch("backoffice.services.notification_dispatcher.httpx.AsyncClient", return_value=client):
            result = await ResendProvider(api_key="re_key", from_email="hr@example.com").send(MESSAGE)

        assert result.success
        assert result.message_id == "re_123"
        sent = client.post.call_args.kwargs["json"]
        assert sent["to"] == ["anna@example.com"]
        assert sent["from"] == "hr@example.com"

    @pytest.mark.asyncio
    async def test_api_error(self):
        response = MagicMock(status_code=422, text="invalid from")
        client = AsyncMock()
        client.post.return_value = response
        client.__aenter__.return_value = client

        with patch("backoffice.services.notification_dispatcher.httpx.AsyncClient", return_value=client):
            result = await ResendProvider(api_key="re_key").send(MESSAGE)

        assert not result.success
        assert "422" in result.error

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = AsyncMock()
        client.post.side_effect = httpx.ConnectError("refused")
        client.__aenter__.return_value = client

        with patch("backoffice.services.notification_dispatcher.httpx.AsyncClient", return_value=client):
            result = await ResendProvider(api_key="re_key").send(MESSAGE)

        assert not result.success
        assert result.error == "refused"


class TestProviderSelection:
    """Tests for get_notification_provider()."""

    def test_mock_without_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "RESEND_API_KEY", None)

        assert isinstance(get_notification_provider(), MockNotificationProvider)

    def test_resend_with_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "RESEND_API_KEY", "re_key")

        assert isinstance(get_notification_provider(), ResendProvider)
