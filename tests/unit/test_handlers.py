"""
tests/unit/test_handlers.py — Message Extraction and Echo Handler Tests
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from socketbot.exceptions import NotifierError
from socketbot.interfaces.echo import EchoHandler
from socketbot.socketmode.envelopes import (
    EventsApiEnvelope,
    HelloEnvelope,
    InteractiveEnvelope,
    SlashCommandEnvelope,
)
from socketbot.socketmode.handlers import EventHandler, MessageEvent, extract_message


# ─────────────────────────────────────────────────────────────────────────────
# extract_message
# ─────────────────────────────────────────────────────────────────────────────

class TestExtractMessage:
    def test_app_mention(self):
        env = EventsApiEnvelope(
            envelope_id="E1",
            payload={"event": {"type": "app_mention", "channel": "C1", "text": "hi", "user": "U1"}},
        )
        event = extract_message(env)
        assert event == MessageEvent(
            channel="C1", text="hi", envelope_id="E1", source="events_api", user="U1",
        )

    def test_missing_text_becomes_empty(self):
        env = EventsApiEnvelope(envelope_id="E1", payload={"event": {"channel": "C1"}})
        assert extract_message(env).text == ""

    def test_bot_message_ignored(self):
        env = EventsApiEnvelope(
            envelope_id="E1",
            payload={"event": {"channel": "C1", "text": "You said: hi", "bot_id": "B1"}},
        )
        assert extract_message(env) is None

    @pytest.mark.parametrize("payload", [
        {},
        {"event": {}},
        {"event": {"text": "no channel"}},
        {"event": "not-a-dict"},
    ])
    def test_unrecognised_events_payload(self, payload):
        assert extract_message(EventsApiEnvelope(envelope_id="E1", payload=payload)) is None

    def test_slash_command(self):
        env = SlashCommandEnvelope(
            envelope_id="S1",
            payload={"command": "/echo", "text": "ping", "channel_id": "C2", "user_id": "U2"},
        )
        event = extract_message(env)
        assert event.channel == "C2"
        assert event.text == "ping"
        assert event.command == "/echo"
        assert event.user == "U2"
        assert event.source == "slash_commands"

    def test_slash_command_without_channel(self):
        env = SlashCommandEnvelope(envelope_id="S1", payload={"command": "/echo"})
        assert extract_message(env) is None

    def test_interactive_ignored(self):
        env = InteractiveEnvelope(envelope_id="I1", payload={"type": "block_actions"})
        assert extract_message(env) is None

    def test_control_message_ignored(self):
        assert extract_message(HelloEnvelope()) is None


# ─────────────────────────────────────────────────────────────────────────────
# EchoHandler
# ─────────────────────────────────────────────────────────────────────────────

def _event(text: str = "hi", channel: str = "C1") -> MessageEvent:
    return MessageEvent(channel=channel, text=text, envelope_id="E1", source="events_api")


class TestEchoHandler:
    def test_satisfies_handler_protocol(self):
        assert isinstance(EchoHandler(AsyncMock()), EventHandler)

    def test_default_template_quotes_text(self):
        assert EchoHandler(AsyncMock()).render("hi") == "You said: ```hi```"

    def test_custom_template(self):
        assert EchoHandler(AsyncMock(), "> {text}").render("hello") == "> hello"

    def test_braces_in_text_are_literal(self):
        assert EchoHandler(AsyncMock(), "{text}!").render("{user} {0}") == "{user} {0}!"

    @pytest.mark.asyncio
    async def test_replies_to_same_channel(self):
        sender = AsyncMock()
        await EchoHandler(sender).handle_message(_event("hi", "C7"))
        sender.send_message.assert_awaited_once_with("C7", "You said: ```hi```")

    @pytest.mark.asyncio
    async def test_sender_error_propagates(self):
        sender = AsyncMock()
        sender.send_message.side_effect = NotifierError("down", status_code=500)
        with pytest.raises(NotifierError):
            await EchoHandler(sender).handle_message(_event())
