"""
socketmode/handlers.py — Application Handler Interface

The session hands application code a flat MessageEvent, not the raw
envelope. extract_message() defines which payload shapes the bot
understands; everything else in the platform's event catalog is
ignored without error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, ValidationError

from socketbot.socketmode.envelopes import (
    Envelope,
    EventsApiEnvelope,
    SlashCommandEnvelope,
)


@dataclass(frozen=True)
class MessageEvent:
    """A message addressed to the bot, reduced to what a reply needs."""
    channel: str
    text: str
    envelope_id: str
    source: str
    user: Optional[str] = None
    command: Optional[str] = None


@runtime_checkable
class EventHandler(Protocol):
    """Pluggable application logic invoked once per recognised message."""

    async def handle_message(self, event: MessageEvent) -> None: ...


# ─────────────────────────────────────────────────────────────────────────────
# Payload shapes
# ─────────────────────────────────────────────────────────────────────────────

class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _MessageEventBody(_Lenient):
    channel: str
    text: Optional[str] = None
    user: Optional[str] = None
    bot_id: Optional[str] = None


class _EventCallback(_Lenient):
    """events_api payload for app_mention / message events."""
    event: _MessageEventBody


class _SlashCommandPayload(_Lenient):
    channel_id: str
    text: Optional[str] = None
    command: Optional[str] = None
    user_id: Optional[str] = None


def extract_message(envelope: Envelope) -> Optional[MessageEvent]:
    """
    Interpret an envelope payload as a message for the bot.

    Returns None when the payload is not a shape this bot handles, or
    when the message was posted by a bot (including this one).
    """
    if isinstance(envelope, EventsApiEnvelope):
        try:
            body = _EventCallback.model_validate(envelope.payload).event
        except ValidationError:
            return None
        if body.bot_id:
            return None
        return MessageEvent(
            channel=body.channel,
            text=body.text or "",
            envelope_id=envelope.envelope_id,
            source=envelope.type,
            user=body.user,
        )

    if isinstance(envelope, SlashCommandEnvelope):
        try:
            cmd = _SlashCommandPayload.model_validate(envelope.payload)
        except ValidationError:
            return None
        return MessageEvent(
            channel=cmd.channel_id,
            text=cmd.text or "",
            envelope_id=envelope.envelope_id,
            source=envelope.type,
            user=cmd.user_id,
            command=cmd.command,
        )

    return None
