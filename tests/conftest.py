"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
import hashlib
import hmac
import sys
from pathlib import Path
from typing import Any

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import DeliveryError  # noqa: E402
from data.tenants_store import TenantConfig  # noqa: E402


class FakeReplyClient:
    """Stands in for LineReplyClient; records replies instead of calling LINE."""

    def __init__(self, access_token: str = "token", fail_tokens: set[str] | None = None):
        self.access_token = access_token
        self.fail_tokens = fail_tokens or set()
        self.attempts: list[tuple[str, str]] = []
        self.sent: list[tuple[str, str]] = []
        self.closed = False

    async def send_text(self, reply_token: str, text: str) -> None:
        self.attempts.append((reply_token, text))
        if reply_token in self.fail_tokens:
            raise DeliveryError(f"reply token {reply_token} expired", status=400)
        self.sent.append((reply_token, text))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_tenant():
    """Build a TenantConfig from CALLBACK_CONFIGS-style keys."""

    def _make(**overrides: Any) -> TenantConfig:
        data: dict[str, Any] = {
            "Type": "echo",
            "CHANNEL_SECRET": "secret",
            "CHANNEL_ACCESS_TOKEN": "access-token",
        }
        data.update(overrides)
        return TenantConfig.model_validate(data)

    return _make


@pytest.fixture
def fake_clients():
    """client_factory for build_channels/create_app; keeps each fake by token."""
    created: dict[str, FakeReplyClient] = {}

    def _factory(access_token: str) -> FakeReplyClient:
        client = FakeReplyClient(access_token)
        created[access_token] = client
        return client

    _factory.created = created  # type: ignore[attr-defined]
    return _factory


@pytest.fixture
def sign_body():
    """LINE signature: base64(HMAC-SHA256(channel_secret, body))."""

    def _sign(channel_secret: str, body: bytes) -> str:
        digest = hmac.new(channel_secret.encode(), body, hashlib.sha256).digest()
        return base64.b64encode(digest).decode()

    return _sign


def _base_event(event_type: str, reply_token: str | None) -> dict[str, Any]:
    event: dict[str, Any] = {
        "type": event_type,
        "timestamp": 1625665242211,
        "source": {"type": "user", "userId": "U4af4980629d0c1d7a0b1c2d3e4f5a6b7"},
        "mode": "active",
        "webhookEventId": "01FZ74A0TDDPYRVKNK77XKC3ZR",
        "deliveryContext": {"isRedelivery": False},
    }
    if reply_token:
        event["replyToken"] = reply_token
    return event


@pytest.fixture
def text_event():
    def _make(text: str, reply_token: str = "757913772c4646b784d4b7ce46d12671") -> dict[str, Any]:
        event = _base_event("message", reply_token)
        event["message"] = {
            "type": "text",
            "id": "14353798921116",
            "text": text,
            "quoteToken": "q3Plxr4AgKd9Q4nbMsRGj1XVbTrDXV0Go-zV_Jzg09Gm",
        }
        return event

    return _make


@pytest.fixture
def follow_event():
    def _make(reply_token: str = "85cbe770fa8b4f45bbe077b1d4be4a36") -> dict[str, Any]:
        event = _base_event("follow", reply_token)
        event["follow"] = {"isUnblocked": False}
        return event

    return _make


@pytest.fixture
def fake_reply_client():
    def _make(fail_tokens: set[str] | None = None) -> FakeReplyClient:
        return FakeReplyClient(fail_tokens=fail_tokens)

    return _make
