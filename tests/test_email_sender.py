"""
Unit tests for the Brevo email sender.
"""
import asyncio
import json
import httpx
import pytest

from app.core.config import settings
from app.services.email_sender import (
    CONFIRMATION_SUBJECT,
    LIVE_NOTIFICATION_SUBJECT,
    EmailSender,
)

@pytest.fixture
def brevo_key(monkeypatch):
    monkeypatch.setattr(settings, "BREVO_API_KEY", "test-key")
    monkeypatch.setattr(settings, "SENDER_NAME", "StyleHub")

def _sender(handler):
    return EmailSender(transport=httpx.MockTransport(handler))

def test_send_posts_to_brevo(brevo_key):
    """The payload carries sender, recipient, subject and both bodies."""
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["api_key"] = request.headers["api-key"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"messageId": "<abc@brevo>"})

    result = asyncio.run(_sender(handler).send("ann@example.com", "Hi", "text body", "<p>html</p>"))

    assert result["success"] is True
    assert result["message_id"] == "<abc@brevo>"
    assert captured["url"].endswith("/smtp/email")
    assert captured["api_key"] == "test-key"
    assert captured["body"]["to"] == [{"email": "ann@example.com"}]
    assert captured["body"]["sender"]["name"] == "StyleHub"
    assert captured["body"]["textContent"] == "text body"
    assert captured["body"]["htmlContent"] == "<p>html</p>"

def test_send_http_error_is_reported_not_raised(brevo_key):
    def handler(request):
        return httpx.Response(401, json={"message": "Key not found"})

    result = asyncio.run(_sender(handler).send("ann@example.com", "Hi", "text"))
    assert result["success"] is False
    assert "HTTP error 401" in result["error"]

def test_send_transport_error_is_reported(brevo_key):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = asyncio.run(_sender(handler).send("ann@example.com", "Hi", "text"))
    assert result["success"] is False
    assert result["error"].startswith("Request error")

def test_send_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "BREVO_API_KEY", "")
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(201, json={})

    result = asyncio.run(_sender(handler).send("ann@example.com", "Hi", "text"))
    assert result["success"] is False
    assert "BREVO_API_KEY" in result["error"]
    assert calls == []

def test_confirmation_email_content(brevo_key):
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"messageId": "1"})

    asyncio.run(_sender(handler).send_confirmation("ann@example.com"))

    body = captured["body"]
    assert body["subject"] == CONFIRMATION_SUBJECT
    assert "Thank you for subscribing" in body["textContent"]
    assert f"${settings.WELCOME_CREDIT} credit" in body["textContent"]
    assert "StyleHub Team" in body["textContent"]

def test_live_notification_content(brevo_key):
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json={"messageId": "1"})

    asyncio.run(_sender(handler).send_live_notification("ann@example.com"))

    body = captured["body"]
    assert body["subject"] == LIVE_NOTIFICATION_SUBJECT
    assert "our new website is now live" in body["textContent"]
    assert settings.SUPPORT_EMAIL in body["htmlContent"]
    assert body["tags"] == ["site-live"]

if __name__ == "__main__":
    pytest.main([__file__])
