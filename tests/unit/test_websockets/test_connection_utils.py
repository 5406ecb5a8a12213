"""
Unit tests for relay connection utilities.
"""

import asyncio
import json
import logging

import pytest
from websockets.exceptions import ConnectionClosedError

from signaling_relay.core import MessageKind, create_message
from signaling_relay.websockets.server.process_messages import ConnectionUtils
from tests.conftest import sent_frames, wait_until

logger = logging.getLogger(__name__)


class TestConnectionUtils:
    """Test cases for ConnectionUtils."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cleanup_unregisters(self, connection_manager, make_connection):
        a, b = make_connection(), make_connection()
        await connection_manager.register(a)
        await connection_manager.register(b)

        await ConnectionUtils.cleanup_connection(connection_manager, a, logger)

        assert not connection_manager.is_registered(a)
        assert sent_frames(b) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cleanup_announces_bye_once(self, connection_manager, make_connection):
        a, b = make_connection(), make_connection()
        await connection_manager.register(a)
        await connection_manager.register(b)

        await ConnectionUtils.cleanup_connection(
            connection_manager, a, logger, notify_lifecycle=True
        )
        await ConnectionUtils.cleanup_connection(
            connection_manager, a, logger, notify_lifecycle=True
        )

        assert [json.loads(f) for f in sent_frames(b)] == [{"type": "bye"}]
        assert sent_frames(a) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_announce_ready(self, connection_manager, make_connection):
        a, b, c = make_connection(), make_connection(), make_connection()
        for connection in (a, b, c):
            await connection_manager.register(connection)

        delivered = await ConnectionUtils.announce(
            connection_manager, c, MessageKind.READY, logger
        )

        assert delivered == 2
        assert json.loads(sent_frames(a)[0]) == {"type": "ready"}
        assert sent_frames(c) == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_health_monitor_drops_dead_connections(
        self, connection_manager, make_connection
    ):
        alive, dead = make_connection(), make_connection()
        await connection_manager.register(alive)
        await connection_manager.register(dead)
        dead.websocket.ping.side_effect = ConnectionClosedError(None, None)

        monitor = asyncio.create_task(
            ConnectionUtils.health_monitor(connection_manager, 0.01, logger)
        )
        try:
            await wait_until(lambda: not connection_manager.is_registered(dead))
        finally:
            monitor.cancel()
            with pytest.raises(asyncio.CancelledError):
                await monitor

        assert connection_manager.is_registered(alive)
        alive.websocket.ping.assert_awaited()
        await wait_until(lambda: dead.websocket.close.await_count == 1)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_pong_drops_and_closes(self, connection_manager, make_connection):
        alive, silent = make_connection(), make_connection()
        await connection_manager.register(alive)
        await connection_manager.register(silent)

        async def unanswered_ping(*args):
            return asyncio.get_running_loop().create_future()

        silent.websocket.ping.side_effect = unanswered_ping

        assert await ConnectionUtils.check_alive(connection_manager, silent, 0.01, logger) is False
        assert await ConnectionUtils.check_alive(connection_manager, alive, 0.01, logger) is True

        assert not connection_manager.is_registered(silent)
        assert connection_manager.is_registered(alive)
        await wait_until(lambda: silent.websocket.close.await_count == 1)
        alive.websocket.close.assert_not_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_dropped_peer_is_announced_once(self, connection_manager, make_connection):
        a, b, c = make_connection(), make_connection(), make_connection()
        for connection in (a, b, c):
            await connection_manager.register(connection)
        b.websocket.send.side_effect = BrokenPipeError()

        await connection_manager.broadcast(a, create_message(MessageKind.READY))
        assert not connection_manager.is_registered(b)

        # The receive loop of b ends once its socket closes
        await ConnectionUtils.cleanup_connection(
            connection_manager, b, logger, notify_lifecycle=True
        )
        await ConnectionUtils.cleanup_connection(
            connection_manager, b, logger, notify_lifecycle=True
        )

        assert [json.loads(f) for f in sent_frames(c)] == [{"type": "ready"}, {"type": "bye"}]
        assert [json.loads(f) for f in sent_frames(a)] == [{"type": "bye"}]
