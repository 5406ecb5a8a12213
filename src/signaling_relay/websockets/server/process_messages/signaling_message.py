"""
Signaling message handler for the relay server.

Validates inbound frames and routes each envelope to the other
participant(s). Bad frames are logged and dropped; the connection they
arrived on stays open.
"""

import logging
from collections import Counter
from typing import Optional

from ....core import Connection, ConnectionManager, RelayMode, SignalingMessage, parse_message
from ....core.messages import Frame
from ....infrastructure.exceptions import MalformedMessage, UnknownMessageKind


class SignalingMessageHandler:
    """Handles signaling envelope validation and routing."""

    def __init__(
        self,
        connections: ConnectionManager,
        logger: logging.Logger,
        mode: RelayMode = RelayMode.BROADCAST,
    ) -> None:
        self.connections = connections
        self.logger = logger
        self.mode = RelayMode(mode)

        self.messages_forwarded = 0
        self.messages_dropped: Counter = Counter()

    async def process_message(
        self, connection: Connection, frame: Frame
    ) -> Optional[SignalingMessage]:
        """
        Process one inbound frame.

        Returns:
            The routed message, or None if the frame was dropped
        """
        if not connection.is_alive:
            # Dropped by the registry; its socket is being closed
            self.messages_dropped["closed"] += 1
            self.logger.debug(f"Ignoring frame from closed {connection.connection_id}")
            return None

        try:
            message = parse_message(frame)
        except MalformedMessage as e:
            self.messages_dropped["malformed"] += 1
            self.logger.warning(
                f"Dropping malformed message from {connection.connection_id}: {e.reason}"
            )
            return None
        except UnknownMessageKind as e:
            self.messages_dropped["unknown_kind"] += 1
            self.logger.warning(
                f"Dropping message from {connection.connection_id}: {e}"
            )
            return None

        if message.is_lifecycle:
            self.logger.info(f"{message.kind.value} from {connection.connection_id}")
        else:
            self.logger.debug(f"{message.kind.value} from {connection.connection_id}")

        delivered = await self.route(connection, message)
        self.messages_forwarded += 1
        if not delivered:
            self.logger.debug(
                f"No peer to receive {message.kind.value} from {connection.connection_id}"
            )
        return message

    async def route(self, sender: Optional[Connection], message: SignalingMessage) -> int:
        """Send a message to its recipients according to the relay mode."""
        if self.mode is RelayMode.PAIR:
            return int(await self.connections.forward_to_one(sender, message))
        return await self.connections.broadcast(sender, message)

    def get_stats(self) -> dict:
        """Get message handling statistics."""
        return {
            "messages_forwarded": self.messages_forwarded,
            "messages_dropped": dict(self.messages_dropped),
        }
