"""Tests for the Brevo email channel."""

import json

import httpx
import pytest
from unittest.mock import patch

from core.notifications.channels.email import (
    BREVO_API_URL,
    build_transactional_payload,
    is_email_configured,
    send_transactional_email,
)
from core.notifications.errors import EmailDeliveryError, EmailNotConfiguredError


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestIsEmailConfigured:
    def test_true_with_key(self):
        with patch("core.notifications.channels.email.BREVO_API_KEY", "xkeysib-123"):
            assert is_email_configured() is True

    def test_false_without_key(self):
        with patch("core.notifications.channels.email.BREVO_API_KEY", None):
            assert is_email_configured() is False


class TestBuildPayload:
    def test_payload_shape(self):
        with (
            patch("core.notifications.channels.email.FROM_EMAIL", "desk@library.test"),
            patch("core.notifications.channels.email.FROM_NAME", "Library Admin"),
        ):
            payload = build_transactional_payload(
                to_email="asha@example.com",
                to_name="Asha",
                template_id=5,
                params={"NAME": "Asha", "EXPIRY_DATE": "2024-01-11"},
            )

        assert payload == {
            "templateId": 5,
            "sender": {"email": "desk@library.test", "name": "Library Admin"},
            "to": [{"email": "asha@example.com", "name": "Asha"}],
            "params": {"NAME": "Asha", "EXPIRY_DATE": "2024-01-11"},
        }


class TestSendTransactionalEmail:
    @pytest.mark.asyncio
    async def test_posts_to_brevo_with_api_key(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["api_key"] = request.headers.get("api-key")
            captured["body"] = json.loads(request.content)
            return httpx.Response(201, json={"messageId": "<abc@brevo>"})

        with patch("core.notifications.channels.email.BREVO_API_KEY", "xkeysib-123"):
            async with _client(handler) as client:
                result = await send_transactional_email(
                    client,
                    to_email="asha@example.com",
                    to_name="Asha",
                    template_id=5,
                    params={"NAME": "Asha", "EXPIRY_DATE": "2024-01-11"},
                )

        assert result == {"messageId": "<abc@brevo>"}
        assert captured["url"] == BREVO_API_URL
        assert captured["api_key"] == "xkeysib-123"
        assert captured["body"]["templateId"] == 5
        assert captured["body"]["params"]["EXPIRY_DATE"] == "2024-01-11"

    @pytest.mark.asyncio
    async def test_raises_when_not_configured(self):
        def handler(request):
            raise AssertionError("should not send")

        with patch("core.notifications.channels.email.BREVO_API_KEY", None):
            async with _client(handler) as client:
                with pytest.raises(EmailNotConfiguredError):
                    await send_transactional_email(
                        client, "asha@example.com", "Asha", 1, {}
                    )

    @pytest.mark.asyncio
    async def test_raises_on_rejection(self):
        def handler(request):
            return httpx.Response(400, json={"code": "invalid_parameter"})

        with patch("core.notifications.channels.email.BREVO_API_KEY", "xkeysib-123"):
            async with _client(handler) as client:
                with pytest.raises(EmailDeliveryError, match="400"):
                    await send_transactional_email(
                        client, "bad-address", "Asha", 1, {}
                    )

    @pytest.mark.asyncio
    async def test_raises_on_transport_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with patch("core.notifications.channels.email.BREVO_API_KEY", "xkeysib-123"):
            async with _client(handler) as client:
                with pytest.raises(EmailDeliveryError, match="failed"):
                    await send_transactional_email(
                        client, "asha@example.com", "Asha", 1, {}
                    )
