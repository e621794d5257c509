"""
notifier.py — Outbound Slack Web API Client

Posts replies through chat.postMessage over plain HTTPS, independent of
the Socket Mode WebSocket.
"""

from __future__ import annotations

from typing import Optional

import httpx

from socketbot.exceptions import NotifierError
from socketbot.observability.logger import get_logger

log = get_logger(__name__)

_DEFAULT_API_BASE_URL = "https://slack.com/api"


class SlackWebClient:
    """Bearer-authenticated chat.postMessage sender."""

    def __init__(
        self,
        token: str,
        *,
        client: httpx.AsyncClient,
        api_base_url: str = _DEFAULT_API_BASE_URL,
    ) -> None:
        self._token = token
        self._client = client
        self._base_url = api_base_url.rstrip("/")

    def __repr__(self) -> str:
        return f"<SlackWebClient base_url={self._base_url}>"

    async def send_message(self, channel: str, text: str) -> None:
        """
        Post `text` to `channel`.

        Raises:
            NotifierError: network failure, non-2xx status, or a body
                           reporting ok == false.
        """
        try:
            response = await self._client.post(
                f"{self._base_url}/chat.postMessage",
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
                json={"channel": channel, "text": text},
            )
        except httpx.HTTPError as e:
            raise NotifierError(
                f"Failed to send message: {type(e).__name__}: {e}"
            ) from e

        if not response.is_success:
            raise NotifierError(
                f"Failed to send message: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        error = _api_error(response)
        if error is not None:
            raise NotifierError(
                f"Failed to send message: {error}",
                status_code=response.status_code,
                error=error,
            )

        log.debug("notifier.sent", channel=channel, chars=len(text))


def _api_error(response: httpx.Response) -> Optional[str]:
    """The Web API reports most failures as HTTP 200 with {"ok": false}."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("ok") is False:
        return str(body.get("error") or "unknown_error")
    return None
