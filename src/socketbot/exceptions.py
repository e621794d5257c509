"""
exceptions.py — socketbot Unified Error Hierarchy

All socketbot-specific exceptions live here. Every layer of the stack
raises typed subclasses of SocketBotError, never bare Exception.

Import from here, not from individual modules:
    from socketbot.exceptions import HandshakeRejectedError, TransportError

Hierarchy:
    SocketBotError
    ├── ConfigError                    (fatal at startup)
    ├── HandshakeError                 (fatal for the connection attempt)
    │   ├── HandshakeTransportError
    │   ├── HandshakeDecodeError
    │   └── HandshakeRejectedError
    ├── TransportError                 (fatal, ends the session)
    │   └── TransportClosedError
    ├── EnvelopeDecodeError            (recovered, loop continues)
    ├── AcknowledgeError               (recovered, loop continues)
    └── NotifierError                  (recovered, loop continues)
"""

from __future__ import annotations

from typing import Optional


# ─────────────────────────────────────────────────────────────────────────────
# Root
# ─────────────────────────────────────────────────────────────────────────────

class SocketBotError(Exception):
    """Base class for all socketbot exceptions."""


class ConfigError(SocketBotError):
    """Raised when required configuration is missing or invalid."""


# ─────────────────────────────────────────────────────────────────────────────
# Handshake (apps.connections.open)
# ─────────────────────────────────────────────────────────────────────────────

class HandshakeError(SocketBotError):
    """Base for errors while exchanging the app token for a WebSocket URL."""


class HandshakeTransportError(HandshakeError):
    """The handshake request could not be completed (network, non-2xx)."""


class HandshakeDecodeError(HandshakeError):
    """The handshake response body was not valid JSON or did not match the schema."""


class HandshakeRejectedError(HandshakeError):
    """
    The platform answered with ok == false.

    `error` is the platform's error code. It is None when the platform
    rejected the request without saying why.
    """

    def __init__(self, error: Optional[str]) -> None:
        self.error = error
        if error is None:
            message = "apps.connections.open rejected the request without an error code"
        else:
            message = f"apps.connections.open rejected the request: {error}"
        super().__init__(message)


# ─────────────────────────────────────────────────────────────────────────────
# Transport (WebSocket)
# ─────────────────────────────────────────────────────────────────────────────

class TransportError(SocketBotError):
    """WebSocket connect failure or mid-session I/O error."""


class TransportClosedError(TransportError):
    """The peer closed the WebSocket."""

    def __init__(self, code: Optional[int] = None, reason: str = "") -> None:
        self.code = code
        self.reason = reason
        super().__init__(f"websocket closed (code={code}, reason={reason or '-'})")


# ─────────────────────────────────────────────────────────────────────────────
# Per-envelope errors: logged, never fatal
# ─────────────────────────────────────────────────────────────────────────────

class EnvelopeDecodeError(SocketBotError):
    """An inbound frame was malformed or carried an unknown envelope type."""


class AcknowledgeError(SocketBotError):
    """An acknowledgment frame could not be sent."""

    def __init__(self, envelope_id: str, message: str = "") -> None:
        self.envelope_id = envelope_id
        super().__init__(message or f"Failed to acknowledge envelope '{envelope_id}'")


class NotifierError(SocketBotError):
    """An outbound chat.postMessage call failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        super().__init__(message)
