"""
socketmode/transport.py — Socket Mode WebSocket Transport

Owns one WebSocket connection: frame receive, text send, close.

Ping/pong is handled by the websockets keepalive machinery and never
reaches the caller. Binary frames are returned as bytes so the session
can log and skip them.
"""

from __future__ import annotations

from typing import Optional, Union

from websockets.asyncio.client import ClientConnection
from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from socketbot.exceptions import TransportClosedError, TransportError
from socketbot.observability.logger import get_logger

log = get_logger(__name__)

Frame = Union[str, bytes]

_DEFAULT_MAX_FRAME_BYTES = 2**20   # 1 MB
_DEFAULT_OPEN_TIMEOUT = 10.0


class Connection:
    """
    One open Socket Mode WebSocket.

    Owned by exactly one SocketModeSession; not safe for concurrent
    receive() calls.
    """

    def __init__(self, ws: ClientConnection, url: str = "") -> None:
        self._ws = ws
        self._url = url
        self._closed = False

    @property
    def url(self) -> str:
        return self._url

    async def receive(self) -> Frame:
        """
        Suspend until the next data frame arrives.

        Raises:
            TransportClosedError: the peer closed the connection.
            TransportError:       any other I/O failure.
        """
        try:
            return await self._ws.recv()
        except ConnectionClosed as e:
            self._closed = True
            raise _closed_error(e) from e
        except OSError as e:
            raise TransportError(f"websocket receive failed: {e}") from e

    async def send_text(self, text: str) -> None:
        """Send one text frame."""
        try:
            await self._ws.send(text)
        except ConnectionClosed as e:
            self._closed = True
            raise _closed_error(e) from e
        except OSError as e:
            raise TransportError(f"websocket send failed: {e}") from e

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._ws.close()
        except (ConnectionClosed, OSError) as e:
            log.debug("transport.close_failed", error=str(e), error_type=type(e).__name__)
        log.info("transport.closed")


async def connect(
    url: str,
    *,
    max_frame_bytes: int = _DEFAULT_MAX_FRAME_BYTES,
    open_timeout: Optional[float] = _DEFAULT_OPEN_TIMEOUT,
) -> Connection:
    """
    Open the WebSocket returned by the handshake.

    Raises:
        TransportError: the URL is invalid, the opening handshake failed,
                        or the connection attempt timed out.
    """
    try:
        ws = await ws_connect(
            url,
            max_size=max_frame_bytes,
            open_timeout=open_timeout,
        )
    except InvalidURI as e:
        raise TransportError(f"invalid websocket url: {e}") from e
    except InvalidHandshake as e:
        raise TransportError(f"websocket handshake failed: {e}") from e
    except TimeoutError as e:
        raise TransportError("websocket connect timed out") from e
    except OSError as e:
        raise TransportError(f"websocket connect failed: {e}") from e

    log.info("transport.connected", host=_host_of(url))
    return Connection(ws, url)


def _closed_error(exc: ConnectionClosed) -> TransportClosedError:
    close = exc.rcvd
    if close is None:
        return TransportClosedError(code=None, reason="connection lost")
    return TransportClosedError(code=close.code, reason=close.reason)


def _host_of(url: str) -> str:
    # Socket Mode URLs carry a one-time ticket in the query string; keep it out of logs.
    return url.split("?", 1)[0]
