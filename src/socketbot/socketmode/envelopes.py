"""
socketmode/envelopes.py — Socket Mode Envelope Schema

Typed models for every inbound frame and the outbound acknowledgment.
Every inbound frame is a JSON object with a `type` discriminator:

    {
      "type": "events_api",
      "envelope_id": "<unique id>",
      "payload": { ... },
      "accepts_response_payload": false
    }

hello and disconnect are control messages and carry no envelope_id.
events_api, slash_commands and interactive must be acknowledged with
{"envelope_id": "<same id>"} on the same socket.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from socketbot.exceptions import EnvelopeDecodeError

__all__ = [
    "Acknowledgment",
    "AcknowledgeableEnvelope",
    "DisconnectEnvelope",
    "Envelope",
    "EventsApiEnvelope",
    "HelloEnvelope",
    "InteractiveEnvelope",
    "SlashCommandEnvelope",
    "decode_envelope",
    "requires_ack",
]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ─────────────────────────────────────────────────────────────────────────────
# Control messages
# ─────────────────────────────────────────────────────────────────────────────

class HelloEnvelope(_Frozen):
    """Sent once after the socket opens."""
    type: Literal["hello"] = "hello"
    num_connections: Optional[int] = None
    debug_info: dict[str, Any] = Field(default_factory=dict)


class DisconnectEnvelope(_Frozen):
    """The platform is about to close this socket (refresh_requested, warning, …)."""
    type: Literal["disconnect"] = "disconnect"
    reason: str
    debug_info: dict[str, Any] = Field(default_factory=dict)


# ─────────────────────────────────────────────────────────────────────────────
# Acknowledgeable envelopes
# ─────────────────────────────────────────────────────────────────────────────

class AcknowledgeableEnvelope(_Frozen):
    envelope_id: str = Field(..., min_length=1)
    payload: dict[str, Any]
    accepts_response_payload: bool = False
    retry_attempt: int = 0
    retry_reason: str = ""


class EventsApiEnvelope(AcknowledgeableEnvelope):
    type: Literal["events_api"] = "events_api"


class SlashCommandEnvelope(AcknowledgeableEnvelope):
    type: Literal["slash_commands"] = "slash_commands"


class InteractiveEnvelope(AcknowledgeableEnvelope):
    type: Literal["interactive"] = "interactive"


Envelope = Annotated[
    Union[
        HelloEnvelope,
        DisconnectEnvelope,
        EventsApiEnvelope,
        SlashCommandEnvelope,
        InteractiveEnvelope,
    ],
    Field(discriminator="type"),
]

_ENVELOPE_ADAPTER: TypeAdapter[Envelope] = TypeAdapter(Envelope)


def decode_envelope(text: str | bytes) -> Envelope:
    """
    Parse one inbound text frame.

    Raises:
        EnvelopeDecodeError: malformed JSON, missing or unknown `type`,
                             or a required field is missing.
    """
    try:
        return _ENVELOPE_ADAPTER.validate_json(text)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first["loc"]) or "<frame>"
        raise EnvelopeDecodeError(f"{loc}: {first['msg']}") from e


def requires_ack(envelope: Envelope) -> bool:
    """True for events_api, slash_commands and interactive envelopes."""
    return isinstance(envelope, AcknowledgeableEnvelope)


# ─────────────────────────────────────────────────────────────────────────────
# Outbound
# ─────────────────────────────────────────────────────────────────────────────

class Acknowledgment(_Frozen):
    """
    Reply frame for one acknowledgeable envelope.

    payload is only meaningful when the envelope set
    accepts_response_payload; it is omitted from the wire when None.
    """
    envelope_id: str = Field(..., min_length=1)
    payload: Optional[dict[str, Any]] = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
