"""
Signaling client for relay participants.

Scripted participants (media engines, test harnesses) use this client to
reach the relay, push offers/answers/candidates and read what the other
peers send.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional, Union

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import InvalidHandshake

from signaling_relay.core import MessageKind, SignalingMessage, create_message, parse_message
from signaling_relay.core.types import DEFAULT_RELAY_URL
from signaling_relay.infrastructure.exceptions import MessageError, WebSocketError


class SignalingClient:
    """
    WebSocket client for one signaling participant.

    The client does not reconnect on its own once a session is established:
    after a disconnect the participant has to connect again and renegotiate.
    """

    def __init__(
        self,
        server_url: str = DEFAULT_RELAY_URL,
        logger: Optional[logging.Logger] = None,
        client_name: str = "participant",
    ) -> None:
        """
        Initialize the signaling client.

        Args:
            server_url: Relay URL (ws:// or wss://)
            logger: Logger instance
            client_name: Label used in log lines
        """
        if not server_url:
            raise ValueError("server_url cannot be empty")
        if not server_url.startswith(("ws://", "wss://")):
            raise ValueError("server_url must start with 'ws://' or 'wss://'")

        self.server_url: str = server_url
        self.client_name: str = client_name
        self.logger: logging.Logger = logger or logging.getLogger("signaling_client")

        self.websocket: Optional[ClientConnection] = None
        self.messages_sent: int = 0
        self.messages_received: int = 0

    @property
    def is_connected(self) -> bool:
        return self.websocket is not None

    async def connect(self, max_retries: int = 5, retry_delay: float = 1.0) -> bool:
        """
        Connect to the relay with retry logic.

        Args:
            max_retries: Maximum number of connection attempts
            retry_delay: Initial delay between retries (exponential backoff)

        Returns:
            True if connection successful, False otherwise
        """
        for attempt in range(max_retries):
            try:
                self.logger.info(
                    f"[{self.client_name}] Connecting to {self.server_url} "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                self.websocket = await connect(
                    self.server_url, compression=None, max_size=None
                )
                self.logger.info(f"[{self.client_name}] Connected")
                return True
            except (OSError, asyncio.TimeoutError, InvalidHandshake) as e:
                self.logger.warning(f"[{self.client_name}] Connection failed: {e}")

            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay * (2 ** attempt))

        self.logger.error(
            f"[{self.client_name}] Giving up after {max_retries} attempts"
        )
        return False

    def _require_connection(self) -> ClientConnection:
        if self.websocket is None:
            raise WebSocketError(f"[{self.client_name}] Not connected")
        return self.websocket

    async def send(self, kind: Union[MessageKind, str], **fields: Any) -> SignalingMessage:
        """Send an envelope of ``kind`` with the given fields."""
        message = create_message(kind, **fields)
        await self.send_message(message)
        return message

    async def send_message(self, message: SignalingMessage) -> None:
        await self._require_connection().send(message.to_wire())
        self.messages_sent += 1
        self.logger.debug(f"[{self.client_name}] Sent {message.kind.value}")

    async def send_raw(self, data: Union[str, bytes]) -> None:
        """Send a frame as-is, without building an envelope."""
        await self._require_connection().send(data)

    async def receive(self, timeout: Optional[float] = None) -> SignalingMessage:
        """
        Wait for the next envelope from the relay.

        Raises:
            asyncio.TimeoutError: If nothing arrives within ``timeout``
            MessageError: If the frame is not a routable envelope
            ConnectionClosed: If the relay closed the connection
        """
        websocket = self._require_connection()
        frame = await asyncio.wait_for(websocket.recv(), timeout)
        self.messages_received += 1
        return parse_message(frame)

    async def messages(self) -> AsyncIterator[SignalingMessage]:
        """Iterate over incoming envelopes until the connection closes."""
        websocket = self._require_connection()
        async for frame in websocket:
            self.messages_received += 1
            try:
                yield parse_message(frame)
            except MessageError as e:
                self.logger.warning(f"[{self.client_name}] Ignoring bad frame: {e}")

    async def close(self) -> None:
        """Close the connection to the relay."""
        if self.websocket is not None:
            await self.websocket.close()
            self.websocket = None
            self.logger.info(f"[{self.client_name}] Disconnected")

    async def __aenter__(self) -> "SignalingClient":
        if not await self.connect():
            raise WebSocketError(f"Could not connect to {self.server_url}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
