"""
Utility functions for connection management.

This module provides cleanup, lifecycle announcements and the ping-based
health monitor used by the relay server.
"""

import asyncio
import logging
from typing import Optional

from websockets.exceptions import ConnectionClosed

from ....core import Connection, ConnectionManager, MessageKind, create_message


class ConnectionUtils:
    """Utility functions for connection management."""

    @staticmethod
    async def announce(
        connections: ConnectionManager,
        connection: Connection,
        kind: MessageKind,
        logger: logging.Logger,
    ) -> int:
        """Tell every other participant that ``connection`` joined or left."""
        delivered = await connections.broadcast(connection, create_message(kind))
        logger.debug(
            f"Announced {kind.value} for {connection.connection_id} to {delivered} peer(s)"
        )
        return delivered

    @staticmethod
    async def cleanup_connection(
        connections: ConnectionManager,
        connection: Connection,
        logger: logging.Logger,
        notify_lifecycle: bool = False,
    ) -> None:
        """
        Clean up when connection is closed.

        Peers hear one bye per departed participant, including ones the
        registry already dropped after a failed delivery or ping.
        """
        if await connections.unregister(connection):
            logger.info(f"Client disconnected: {connection.connection_id}")

        if notify_lifecycle and not connection.departure_announced:
            connection.departure_announced = True
            await ConnectionUtils.announce(
                connections, connection, MessageKind.BYE, logger
            )

    @staticmethod
    async def check_alive(
        connections: ConnectionManager,
        connection: Connection,
        pong_timeout: float,
        logger: logging.Logger,
    ) -> bool:
        """Ping one connection and drop it unless a pong arrives in time."""
        try:
            pong_waiter = await asyncio.wait_for(connection.websocket.ping(), pong_timeout)
            await asyncio.wait_for(pong_waiter, pong_timeout)
        except asyncio.TimeoutError:
            reason = f"no pong within {pong_timeout}s"
        except (ConnectionClosed, OSError) as e:
            reason = f"ping failed: {e}"
        else:
            return True

        logger.info(f"Health check of {connection.connection_id} failed ({reason})")
        await connections.drop(connection, reason)
        return False

    @staticmethod
    async def health_monitor(
        connections: ConnectionManager,
        ping_interval: float,
        logger: logging.Logger,
        pong_timeout: Optional[float] = None,
    ) -> None:
        """Ping every registered connection and drop the ones that fail."""
        if pong_timeout is None:
            pong_timeout = ping_interval

        while True:
            await asyncio.sleep(ping_interval)

            await asyncio.gather(
                *(
                    ConnectionUtils.check_alive(connections, c, pong_timeout, logger)
                    for c in connections.snapshot()
                )
            )
