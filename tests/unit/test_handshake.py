"""
tests/unit/test_handshake.py — Session Opener Tests

Covers the apps.connections.open call: request shape, the ok/url/error
invariants, and the separation between transport/decode failures and
protocol-level rejections.
"""

from __future__ import annotations

import json

import httpx
import pytest

from socketbot.exceptions import (
    ConfigError,
    HandshakeDecodeError,
    HandshakeError,
    HandshakeRejectedError,
    HandshakeTransportError,
)
from socketbot.socketmode.handshake import HandshakeResult, open_connection, require_url


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _json_handler(body, status: int = 200, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        content = body if isinstance(body, (bytes, str)) else json.dumps(body)
        return httpx.Response(status, content=content, headers={"content-type": "application/json"})
    return handler


# ─────────────────────────────────────────────────────────────────────────────
# HandshakeResult invariants
# ─────────────────────────────────────────────────────────────────────────────

class TestHandshakeResult:
    def test_ok_with_url(self):
        result = HandshakeResult(ok=True, url="wss://x")
        assert result.url == "wss://x"
        assert result.error is None

    def test_ok_without_url_rejected(self):
        with pytest.raises(ValueError, match="missing wss url"):
            HandshakeResult(ok=True)

    def test_not_ok_with_url_rejected(self):
        with pytest.raises(ValueError):
            HandshakeResult(ok=False, url="wss://x", error="invalid_auth")

    def test_ok_with_error_rejected(self):
        with pytest.raises(ValueError):
            HandshakeResult(ok=True, url="wss://x", error="oops")

    def test_not_ok_without_error_is_valid(self):
        result = HandshakeResult(ok=False)
        assert result.error is None


# ─────────────────────────────────────────────────────────────────────────────
# open_connection
# ─────────────────────────────────────────────────────────────────────────────

class TestOpenConnection:
    @pytest.mark.asyncio
    async def test_success_request_shape(self):
        seen: list[httpx.Request] = []
        async with _client(_json_handler({"ok": True, "url": "wss://x"}, seen=seen)) as client:
            result = await open_connection("xapp-1", client=client)

        assert result.ok is True
        assert result.url == "wss://x"
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://slack.com/api/apps.connections.open"
        assert request.headers["authorization"] == "Bearer xapp-1"
        assert request.content == b""

    @pytest.mark.asyncio
    async def test_custom_base_url(self):
        seen: list[httpx.Request] = []
        async with _client(_json_handler({"ok": True, "url": "wss://x"}, seen=seen)) as client:
            await open_connection("xapp-1", client=client, api_base_url="http://localhost:9/api/")
        assert str(seen[0].url) == "http://localhost:9/api/apps.connections.open"

    @pytest.mark.asyncio
    async def test_rejection_is_returned_not_raised(self):
        async with _client(_json_handler({"ok": False, "error": "invalid_auth"})) as client:
            result = await open_connection("xapp-1", client=client)
        assert result.ok is False
        assert result.error == "invalid_auth"

    @pytest.mark.asyncio
    async def test_empty_token_makes_no_request(self):
        seen: list[httpx.Request] = []
        async with _client(_json_handler({"ok": True, "url": "wss://x"}, seen=seen)) as client:
            with pytest.raises(ConfigError):
                await open_connection("", client=client)
        assert seen == []

    @pytest.mark.asyncio
    async def test_ok_true_without_url_is_decode_error(self):
        async with _client(_json_handler({"ok": True})) as client:
            with pytest.raises(HandshakeDecodeError, match="missing wss url"):
                await open_connection("xapp-1", client=client)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"<html>502</html>", b"", b"[]", b'{"url": "wss://x"}'])
    async def test_bad_body_is_decode_error(self, body):
        async with _client(_json_handler(body)) as client:
            with pytest.raises(HandshakeDecodeError):
                await open_connection("xapp-1", client=client)

    @pytest.mark.asyncio
    async def test_non_2xx_is_transport_error(self):
        async with _client(_json_handler({"ok": False, "error": "ratelimited"}, status=429)) as client:
            with pytest.raises(HandshakeTransportError, match="429"):
                await open_connection("xapp-1", client=client)

    @pytest.mark.asyncio
    async def test_network_failure_is_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(HandshakeTransportError, match="ConnectError"):
                await open_connection("xapp-1", client=client)

    @pytest.mark.asyncio
    async def test_decode_and_transport_errors_are_not_rejections(self):
        async with _client(_json_handler(b"garbage")) as client:
            with pytest.raises(HandshakeError) as exc_info:
                await open_connection("xapp-1", client=client)
        assert not isinstance(exc_info.value, HandshakeRejectedError)


# ─────────────────────────────────────────────────────────────────────────────
# require_url
# ─────────────────────────────────────────────────────────────────────────────

class TestRequireUrl:
    def test_returns_url(self):
        assert require_url(HandshakeResult(ok=True, url="wss://x")) == "wss://x"

    def test_rejection_carries_error_code(self):
        with pytest.raises(HandshakeRejectedError, match="invalid_auth") as exc_info:
            require_url(HandshakeResult(ok=False, error="invalid_auth"))
        assert exc_info.value.error == "invalid_auth"

    def test_rejection_without_error_is_distinguishable(self):
        with pytest.raises(HandshakeRejectedError, match="without an error code") as exc_info:
            require_url(HandshakeResult(ok=False))
        assert exc_info.value.error is None
