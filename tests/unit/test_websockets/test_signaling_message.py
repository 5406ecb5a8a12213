"""
Unit tests for the relay's signaling message handler.
"""

import logging

import pytest

from signaling_relay.core import ConnectionManager, MessageKind, RelayMode
from signaling_relay.websockets.server.process_messages import SignalingMessageHandler
from tests.conftest import sent_frames

logger = logging.getLogger(__name__)


@pytest.fixture
def handler(connection_manager):
    return SignalingMessageHandler(connection_manager, logger)


class TestSignalingMessageHandler:
    """Test cases for SignalingMessageHandler."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_offer_reaches_peer_verbatim(self, handler, connection_manager, make_connection):
        a, b = make_connection(), make_connection()
        await connection_manager.register(a)
        await connection_manager.register(b)

        message = await handler.process_message(a, '{"type":"offer","sdp":"x"}')

        assert message.kind is MessageKind.OFFER
        assert sent_frames(b) == ['{"type":"offer","sdp":"x"}']
        assert sent_frames(a) == []
        assert handler.get_stats()["messages_forwarded"] == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("frame", ["{oops", "[]", '{"sdp":"x"}', b"\xff"])
    async def test_malformed_frame_is_dropped(
        self, handler, connection_manager, make_connection, frame
    ):
        a, b = make_connection(), make_connection()
        await connection_manager.register(a)
        await connection_manager.register(b)

        assert await handler.process_message(a, frame) is None

        assert sent_frames(b) == []
        assert connection_manager.is_registered(a)
        assert a.is_alive
        a.websocket.close.assert_not_awaited()
        assert handler.get_stats()["messages_dropped"] == {"malformed": 1}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_kind_is_dropped(self, handler, connection_manager, make_connection):
        a, b = make_connection(), make_connection()
        await connection_manager.register(a)
        await connection_manager.register(b)

        assert await handler.process_message(a, '{"type":"join","room":"r1"}') is None

        assert sent_frames(b) == []
        assert connection_manager.is_registered(a)
        assert handler.get_stats()["messages_dropped"] == {"unknown_kind": 1}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_recording_hints_are_forwarded(self, handler, connection_manager, make_connection):
        a, b = make_connection(), make_connection()
        await connection_manager.register(a)
        await connection_manager.register(b)

        await handler.process_message(a, '{"type":"start-recording"}')
        await handler.process_message(a, '{"type":"stop-recording"}')

        assert sent_frames(b) == ['{"type":"start-recording"}', '{"type":"stop-recording"}']

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_frames_from_dropped_connection_are_ignored(
        self, handler, connection_manager, make_connection
    ):
        a, b, c = make_connection(), make_connection(), make_connection()
        for connection in (a, b, c):
            await connection_manager.register(connection)
        b.websocket.send.side_effect = BrokenPipeError()
        await handler.process_message(a, '{"type":"ready"}')

        assert await handler.process_message(b, '{"type":"offer","sdp":"late"}') is None

        assert sent_frames(c) == ['{"type":"ready"}']
        assert sent_frames(a) == []
        assert handler.get_stats()["messages_dropped"] == {"closed": 1}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_message_without_peers(self, handler, connection_manager, make_connection):
        a = make_connection()
        await connection_manager.register(a)

        message = await handler.process_message(a, '{"type":"ready"}')

        assert message.kind is MessageKind.READY
        assert sent_frames(a) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pair_mode_forwards_to_one(self, make_connection):
        manager = ConnectionManager(capacity=2)
        handler = SignalingMessageHandler(manager, logger, RelayMode.PAIR)
        a, b = make_connection(), make_connection()
        await manager.register(a)
        await manager.register(b)

        await handler.process_message(b, '{"type":"answer","sdp":"y"}')

        assert sent_frames(a) == ['{"type":"answer","sdp":"y"}']
        assert sent_frames(b) == []
