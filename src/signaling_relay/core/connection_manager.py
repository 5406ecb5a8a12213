"""
Connection registry for the signaling relay.

This module owns the set of open participant connections. Membership changes
run under one asyncio.Lock. Deliveries work from a snapshot taken under the
lock and write outside it, each bounded by a send timeout, so one stalled
participant cannot hold up registration or other senders. A recipient removed
after the snapshot is skipped and never written to again.
"""

import asyncio
import logging
from typing import Dict, Optional, Set, Tuple

from ..infrastructure.exceptions import DeliveryFailure, RelayFullError
from .connection import Connection
from .messages import SignalingMessage
from .types import DEFAULT_SEND_TIMEOUT, WS_CLOSE_INTERNAL_ERROR, ConnectionState


class ConnectionManager:
    """Registry of open connections with broadcast and pairwise delivery."""

    def __init__(
        self,
        capacity: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        send_timeout: Optional[float] = DEFAULT_SEND_TIMEOUT,
    ) -> None:
        # Map connection_id -> Connection, in registration order
        self._connections: Dict[str, Connection] = {}
        self._lock = asyncio.Lock()
        # Background closes of dropped connections
        self._closing: Set[asyncio.Task] = set()
        self.capacity = capacity
        self.send_timeout = send_timeout
        self.logger = logger or logging.getLogger(__name__)

        self.messages_delivered = 0
        self.delivery_failures = 0

    async def register(self, connection: Connection) -> None:
        """
        Register a freshly accepted connection and mark it OPEN.

        Registering the same connection twice is a no-op.

        Raises:
            RelayFullError: If the registry is at capacity
            ConnectionStateError: If the connection is already closed
        """
        async with self._lock:
            if connection.connection_id in self._connections:
                self.logger.debug(f"Connection already registered: {connection.connection_id}")
                return

            if self.capacity is not None and len(self._connections) >= self.capacity:
                raise RelayFullError(
                    f"Relay is full ({self.capacity} participants)"
                )

            connection.transition(ConnectionState.OPEN)
            self._connections[connection.connection_id] = connection

        self.logger.info(
            f"Connection registered: {connection.connection_id} "
            f"({len(self._connections)} open)"
        )

    async def unregister(self, connection: Connection) -> bool:
        """
        Remove a connection and mark it CLOSED.

        Safe to call repeatedly. Returns True only for the call that
        actually removed it.
        """
        async with self._lock:
            removed = self._discard(connection)

        if removed:
            self.logger.info(
                f"Connection unregistered: {connection.connection_id} "
                f"({len(self._connections)} open)"
            )
        return removed

    async def drop(self, connection: Connection, reason: str) -> bool:
        """
        Unregister a connection the relay gave up on and close its socket.

        The close runs in the background so the caller never waits on the
        failing peer. Returns True only for the call that removed it.
        """
        async with self._lock:
            removed = self._discard(connection)

        if removed:
            self.logger.warning(
                f"Connection dropped: {connection.connection_id} ({reason}); "
                f"{len(self._connections)} open"
            )
            task = asyncio.create_task(
                connection.websocket.close(WS_CLOSE_INTERNAL_ERROR, reason[:120])
            )
            self._closing.add(task)
            task.add_done_callback(self._close_done)
        return removed

    def _close_done(self, task: asyncio.Task) -> None:
        self._closing.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.debug(f"Closing dropped connection failed: {task.exception()}")

    async def broadcast(
        self, sender: Optional[Connection], message: SignalingMessage
    ) -> int:
        """
        Deliver ``message`` to every registered connection except ``sender``.

        Recipients are written to concurrently. A failed or timed out
        delivery drops the failing connection and does not stop delivery to
        the others.

        Returns:
            Number of connections the message was delivered to
        """
        data = message.to_wire()

        async with self._lock:
            recipients = [c for c in self._connections.values() if c is not sender]

        if not recipients:
            return 0
        results = await asyncio.gather(
            *(self._deliver(connection, data) for connection in recipients)
        )
        return sum(results)

    async def forward_to_one(
        self, sender: Optional[Connection], message: SignalingMessage
    ) -> bool:
        """
        Deliver ``message`` to the other participant of a two-party session.

        With more than one candidate the earliest registered peer wins.
        No-op when the sender is alone.
        """
        async with self._lock:
            peer = next(
                (c for c in self._connections.values() if c is not sender),
                None,
            )
        if peer is None:
            return False
        return await self._deliver(peer, message.to_wire())

    async def _deliver(self, connection: Connection, data: str) -> bool:
        """Write to one connection if it is still registered."""
        if not self.is_registered(connection):
            return False

        try:
            await connection.send(data, self.send_timeout)
        except DeliveryFailure as e:
            self.delivery_failures += 1
            await self.drop(connection, f"delivery failed: {e.cause}")
            return False

        self.messages_delivered += 1
        return True

    def _discard(self, connection: Connection) -> bool:
        """Remove and close a connection. Must be called with the lock held."""
        removed = self.is_registered(connection)
        if removed:
            del self._connections[connection.connection_id]
        if connection.state is not ConnectionState.CLOSED:
            connection.transition(ConnectionState.CLOSED)
        return removed

    def get_connection(self, connection_id: str) -> Optional[Connection]:
        """Get a registered connection by id - O(1) lookup."""
        return self._connections.get(connection_id)

    def is_registered(self, connection: Connection) -> bool:
        """Check if a connection is registered."""
        return self._connections.get(connection.connection_id) is connection

    def snapshot(self) -> Tuple[Connection, ...]:
        """Point-in-time copy of the registered connections."""
        return tuple(self._connections.values())

    def __len__(self) -> int:
        return len(self._connections)

    def get_stats(self) -> Dict[str, int]:
        """Get registry statistics."""
        return {
            "total_clients": len(self._connections),
            "messages_delivered": self.messages_delivered,
            "delivery_failures": self.delivery_failures,
        }
