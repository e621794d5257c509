"""
tests/unit/test_acknowledger.py — Acknowledger Tests
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from socketbot.exceptions import AcknowledgeError, TransportClosedError, TransportError
from socketbot.socketmode.acknowledger import acknowledge


class TestAcknowledge:
    @pytest.mark.asyncio
    async def test_sends_exactly_one_frame(self):
        conn = AsyncMock()
        await acknowledge(conn, "E1")
        conn.send_text.assert_awaited_once()
        (frame,), _ = conn.send_text.call_args
        assert json.loads(frame) == {"envelope_id": "E1"}

    @pytest.mark.asyncio
    async def test_payload_is_forwarded(self):
        conn = AsyncMock()
        await acknowledge(conn, "S1", payload={"text": "done"})
        (frame,), _ = conn.send_text.call_args
        assert json.loads(frame) == {"envelope_id": "S1", "payload": {"text": "done"}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc", [TransportError("broken pipe"), TransportClosedError(1006, "")])
    async def test_transport_failure_becomes_acknowledge_error(self, exc):
        conn = AsyncMock()
        conn.send_text.side_effect = exc
        with pytest.raises(AcknowledgeError) as exc_info:
            await acknowledge(conn, "E9")
        assert exc_info.value.envelope_id == "E9"
        assert exc_info.value.__cause__ is exc

    @pytest.mark.asyncio
    async def test_empty_envelope_id_is_not_sent(self):
        conn = AsyncMock()
        with pytest.raises(AcknowledgeError):
            await acknowledge(conn, "")
        conn.send_text.assert_not_awaited()
