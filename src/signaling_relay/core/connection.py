"""
Participant connection and its lifecycle state machine.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed

from ..infrastructure.exceptions import ConnectionStateError, DeliveryFailure
from .types import CONNECTION_TRANSITIONS, ConnectionState


def _new_connection_id() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class Connection:
    """
    One participant's channel to the relay.

    Identity is object identity: two Connection objects wrapping the same
    socket are still different participants.
    """

    websocket: ServerConnection
    connection_id: str = field(default_factory=_new_connection_id)
    state: ConnectionState = ConnectionState.CONNECTING
    # Set once peers have been told this participant left
    departure_announced: bool = False

    @property
    def is_alive(self) -> bool:
        return self.state is ConnectionState.OPEN

    @property
    def remote_address(self) -> Optional[Any]:
        return getattr(self.websocket, "remote_address", None)

    def transition(self, new_state: ConnectionState) -> ConnectionState:
        """
        Move to ``new_state`` and return the previous state.

        Raises:
            ConnectionStateError: If the edge is not a legal lifecycle step
        """
        previous = self.state
        if new_state not in CONNECTION_TRANSITIONS[previous]:
            raise ConnectionStateError(
                f"[{self.connection_id}] Illegal transition "
                f"{previous.value} -> {new_state.value}"
            )
        self.state = new_state
        return previous

    async def send(self, data: str, timeout: Optional[float] = None) -> None:
        """
        Write one frame to the participant.

        Raises:
            DeliveryFailure: If the channel is closed or broken, or the write
                does not complete within ``timeout`` seconds
        """
        try:
            await asyncio.wait_for(self.websocket.send(data), timeout)
        except asyncio.TimeoutError as e:
            raise DeliveryFailure(self.connection_id, f"no progress in {timeout}s") from e
        except (ConnectionClosed, OSError) as e:
            raise DeliveryFailure(self.connection_id, e) from e

    def __repr__(self) -> str:
        return f"Connection({self.connection_id}, {self.state.value})"
