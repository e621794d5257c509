"""
interfaces/echo.py — Echo Handler

Replies to every message addressed to the bot by quoting it back into
the same channel.
"""

from __future__ import annotations

from typing import Protocol

from socketbot.config.settings import DEFAULT_ECHO_TEMPLATE
from socketbot.observability.logger import get_logger
from socketbot.socketmode.handlers import MessageEvent

log = get_logger(__name__)


class MessageSender(Protocol):
    async def send_message(self, channel: str, text: str) -> None: ...


class EchoHandler:
    def __init__(self, sender: MessageSender, template: str = DEFAULT_ECHO_TEMPLATE) -> None:
        self._sender = sender
        self._template = template

    def render(self, text: str) -> str:
        # str.replace, not str.format: user text may contain braces.
        return self._template.replace("{text}", text)

    async def handle_message(self, event: MessageEvent) -> None:
        log.info(
            "echo.reply",
            channel=event.channel,
            source=event.source,
            command=event.command,
            text=event.text[:100],
        )
        await self._sender.send_message(event.channel, self.render(event.text))
