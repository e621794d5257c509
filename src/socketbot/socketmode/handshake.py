"""
socketmode/handshake.py — apps.connections.open

Exchanges the app-level token for a one-time WebSocket URL.

Response body:
    {"ok": true, "url": "wss://wss-primary.slack.com/link/?ticket=…&app_id=…"}
    {"ok": false, "error": "invalid_auth"}
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from socketbot.exceptions import (
    ConfigError,
    HandshakeDecodeError,
    HandshakeRejectedError,
    HandshakeTransportError,
)
from socketbot.observability.logger import get_logger

log = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://slack.com/api"
_CONNECTIONS_OPEN = "apps.connections.open"


class HandshakeResult(BaseModel):
    """Decoded apps.connections.open response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    ok: bool
    url: Optional[str] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "HandshakeResult":
        if self.ok and not self.url:
            raise ValueError("missing wss url from server")
        if not self.ok and self.url:
            raise ValueError("url present on a rejected handshake")
        if self.ok and self.error is not None:
            raise ValueError("error present on a successful handshake")
        return self


async def open_connection(
    app_token: str,
    *,
    client: httpx.AsyncClient,
    api_base_url: str = DEFAULT_API_BASE_URL,
) -> HandshakeResult:
    """
    POST apps.connections.open with the app-level token.

    Returns the decoded result, including ok == false rejections; use
    require_url() to turn a rejection into an exception.

    Raises:
        ConfigError:             app_token is empty (no request is made).
        HandshakeTransportError: network failure or non-2xx status.
        HandshakeDecodeError:    body is not JSON or does not match the schema.
    """
    if not app_token:
        raise ConfigError("app-level token is empty")

    endpoint = f"{api_base_url.rstrip('/')}/{_CONNECTIONS_OPEN}"
    log.debug("handshake.start", endpoint=endpoint)

    try:
        response = await client.post(
            endpoint,
            headers={"Authorization": f"Bearer {app_token}"},
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise HandshakeTransportError(
            f"{_CONNECTIONS_OPEN} returned HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise HandshakeTransportError(
            f"connecting to {_CONNECTIONS_OPEN}: {type(e).__name__}: {e}"
        ) from e

    try:
        result = HandshakeResult.model_validate_json(response.content)
    except ValidationError as e:
        raise HandshakeDecodeError(
            f"unexpected {_CONNECTIONS_OPEN} response: {_summarize(e)}"
        ) from e

    log.debug("handshake.done", ok=result.ok, error=result.error)
    return result


def require_url(result: HandshakeResult) -> str:
    """Return the WebSocket URL, or raise HandshakeRejectedError when ok == false."""
    if not result.ok:
        raise HandshakeRejectedError(result.error)
    return result.url  # type: ignore[return-value]


def _summarize(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<body>'}: {err['msg']}"
        for err in exc.errors()
    )
