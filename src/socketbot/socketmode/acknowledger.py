"""
socketmode/acknowledger.py — Envelope Acknowledgment

Sends {"envelope_id": …, "payload"?: …} back over the socket. The
platform redelivers envelopes that are not acknowledged in time, so the
session calls this immediately after decode, before any application code.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from pydantic import ValidationError

from socketbot.exceptions import AcknowledgeError, TransportError
from socketbot.observability.logger import get_logger
from socketbot.socketmode.envelopes import Acknowledgment

log = get_logger(__name__)


class TextSender(Protocol):
    async def send_text(self, text: str) -> None: ...


async def acknowledge(
    connection: TextSender,
    envelope_id: str,
    payload: Optional[dict[str, Any]] = None,
) -> None:
    """
    Send exactly one acknowledgment frame for envelope_id.

    Raises:
        AcknowledgeError: the frame could not be built or sent.
    """
    try:
        frame = Acknowledgment(envelope_id=envelope_id, payload=payload).to_json()
    except ValidationError as e:
        raise AcknowledgeError(envelope_id, f"Invalid acknowledgment for '{envelope_id}': {e}") from e

    try:
        await connection.send_text(frame)
    except TransportError as e:
        raise AcknowledgeError(envelope_id, f"Failed to acknowledge '{envelope_id}': {e}") from e

    log.debug("socketmode.ack.sent", envelope_id=envelope_id, with_payload=payload is not None)
