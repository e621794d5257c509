"""
socketmode/session.py — Socket Mode Session

Drives one Socket Mode connection from handshake to close:

    CONNECTING ──handshake + connect──▶ OPEN ──disconnect / close / I/O error──▶ CLOSED

While OPEN the loop is strictly sequential: receive one frame, decode it,
acknowledge it if required, dispatch it, then receive the next. The
acknowledgment for envelope N is always sent before envelope N+1 is read,
and before application code sees envelope N.

Only an explicit `disconnect` envelope makes run() return normally. A
transport closure or I/O error closes the session and propagates, and so
does any handshake failure. Reconnecting is left to whoever calls run().
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from socketbot.config.settings import Credentials
from socketbot.exceptions import AcknowledgeError, EnvelopeDecodeError, NotifierError
from socketbot.observability.logger import bind_envelope, clear_envelope, get_logger
from socketbot.socketmode.acknowledger import acknowledge
from socketbot.socketmode.envelopes import (
    AcknowledgeableEnvelope,
    DisconnectEnvelope,
    Envelope,
    HelloEnvelope,
    decode_envelope,
)
from socketbot.socketmode.handlers import EventHandler, extract_message
from socketbot.socketmode.handshake import DEFAULT_API_BASE_URL, open_connection, require_url
from socketbot.socketmode.transport import Connection, Frame, connect

log = get_logger(__name__)

Connector = Callable[[str], Awaitable[Connection]]


class SessionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class SessionStats:
    """Per-session counters, logged when the session closes."""
    received: int = 0
    acknowledged: int = 0
    dispatched: int = 0
    decode_errors: int = 0
    ack_failures: int = 0
    reply_failures: int = 0
    ignored_frames: int = 0


class SocketModeSession:
    """
    One Socket Mode session. Single use: call run() once.

    The session exclusively owns its Connection and always closes it
    before run() returns or raises.
    """

    def __init__(
        self,
        credentials: Credentials,
        handler: EventHandler,
        *,
        http_client: httpx.AsyncClient,
        connector: Optional[Connector] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        max_frame_bytes: int = 2**20,
        open_timeout: float = 10.0,
    ) -> None:
        self._credentials = credentials
        self._handler = handler
        self._http = http_client
        self._api_base_url = api_base_url
        self._max_frame_bytes = max_frame_bytes
        self._open_timeout = open_timeout
        self._connector: Connector = connector or self._default_connector
        self._connection: Optional[Connection] = None
        self._started = False
        self.state = SessionState.CONNECTING
        self.disconnect_reason: Optional[str] = None
        self.stats = SessionStats()

    async def _default_connector(self, url: str) -> Connection:
        return await connect(
            url,
            max_frame_bytes=self._max_frame_bytes,
            open_timeout=self._open_timeout,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    async def run(self) -> None:
        """
        Handshake, connect, and process envelopes until the platform
        sends `disconnect`.

        Raises:
            ConfigError / HandshakeError: the handshake failed; no
                WebSocket connect was attempted.
            TransportError: connect failed, or the socket closed or
                failed mid-session.
        """
        if self._started:
            raise RuntimeError("SocketModeSession.run() may only be called once")
        self._started = True

        try:
            result = await open_connection(
                self._credentials.app_token,
                client=self._http,
                api_base_url=self._api_base_url,
            )
            connection = await self._connector(require_url(result))
            self._connection = connection
            self.state = SessionState.OPEN
            log.info("socketmode.open")

            while self.state is SessionState.OPEN:
                frame = await connection.receive()
                await self._handle_frame(frame)
        finally:
            self.state = SessionState.CLOSED
            if self._connection is not None:
                await self._connection.close()
                log.info(
                    "socketmode.closed",
                    disconnect_reason=self.disconnect_reason,
                    **vars(self.stats),
                )

    # ─────────────────────────────────────────────────────────────────────────
    # Frame handling
    # ─────────────────────────────────────────────────────────────────────────

    async def _handle_frame(self, frame: Frame) -> None:
        if not isinstance(frame, str):
            self.stats.ignored_frames += 1
            log.warning("socketmode.unsupported_frame", kind="binary", size=len(frame))
            return

        self.stats.received += 1
        try:
            envelope = decode_envelope(frame)
        except EnvelopeDecodeError as e:
            self.stats.decode_errors += 1
            log.warning("socketmode.decode_failed", error=str(e), frame=frame[:200])
            return

        bind_envelope(getattr(envelope, "envelope_id", None), envelope.type)
        try:
            await self._handle_envelope(envelope)
        finally:
            clear_envelope()

    async def _handle_envelope(self, envelope: Envelope) -> None:
        if isinstance(envelope, HelloEnvelope):
            log.info("socketmode.hello", num_connections=envelope.num_connections)
            return

        if isinstance(envelope, DisconnectEnvelope):
            log.info("socketmode.disconnect_requested", reason=envelope.reason)
            self.disconnect_reason = envelope.reason
            self.state = SessionState.CLOSED
            return

        if isinstance(envelope, AcknowledgeableEnvelope):
            await self._acknowledge_and_dispatch(envelope)

    async def _acknowledge_and_dispatch(self, envelope: AcknowledgeableEnvelope) -> None:
        log.debug(
            "socketmode.envelope",
            retry_attempt=envelope.retry_attempt,
            retry_reason=envelope.retry_reason or None,
        )

        try:
            await acknowledge(self._connection, envelope.envelope_id)  # type: ignore[arg-type]
        except AcknowledgeError as e:
            # Not dispatched: the platform redelivers unacknowledged envelopes.
            self.stats.ack_failures += 1
            log.error("socketmode.ack.failed", error=str(e))
            return
        self.stats.acknowledged += 1

        event = extract_message(envelope)
        if event is None:
            log.debug("socketmode.envelope_ignored")
            return

        self.stats.dispatched += 1
        try:
            await self._handler.handle_message(event)
        except NotifierError as e:
            self.stats.reply_failures += 1
            log.error(
                "socketmode.reply_failed",
                channel=event.channel,
                error=str(e),
                status_code=e.status_code,
            )
