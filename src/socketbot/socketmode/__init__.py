"""
socketmode/ — Slack Socket Mode Client

REST handshake (apps.connections.open), WebSocket transport, envelope
decoding, acknowledgment and the receive/dispatch session loop.
"""

from socketbot.socketmode.acknowledger import acknowledge
from socketbot.socketmode.envelopes import Acknowledgment, Envelope, decode_envelope, requires_ack
from socketbot.socketmode.handlers import EventHandler, MessageEvent, extract_message
from socketbot.socketmode.handshake import HandshakeResult, open_connection, require_url
from socketbot.socketmode.session import SessionState, SocketModeSession
from socketbot.socketmode.transport import Connection, connect

__all__ = [
    "Acknowledgment",
    "Connection",
    "Envelope",
    "EventHandler",
    "HandshakeResult",
    "MessageEvent",
    "SessionState",
    "SocketModeSession",
    "acknowledge",
    "connect",
    "decode_envelope",
    "extract_message",
    "open_connection",
    "require_url",
    "requires_ack",
]
