"""
WebSocket signaling relay server.

Each participant keeps one WebSocket open. Offers, answers, ICE candidates
and lifecycle hints received from one participant are forwarded verbatim to
the others (broadcast mode) or to the single other participant (pair mode).
"""

import argparse
import asyncio
from typing import List, Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from signaling_relay.config import RelayConfig, RelayConfigManager
from signaling_relay.core import Connection, ConnectionManager, ConnectionState, MessageKind, RelayMode
from signaling_relay.core.types import (
    DEFAULT_SEND_TIMEOUT,
    PAIR_MODE_CAPACITY,
    WS_CLOSE_TRY_AGAIN_LATER,
)
from signaling_relay.infrastructure import RelayFullError, setup_logging
from .process_messages import ConnectionUtils, SignalingMessageHandler

logger = setup_logging(component_name="relay_server")


class SignalingRelayServer:
    """WebSocket server that relays signaling envelopes between participants."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8765,
        mode: RelayMode = RelayMode.BROADCAST,
        max_connections: int = 100,
        ping_interval: int = 30,
        notify_lifecycle: bool = False,
        send_timeout: Optional[float] = DEFAULT_SEND_TIMEOUT,
    ) -> None:
        """
        Initialize the signaling relay server.

        Args:
            host: Host address to bind to
            port: Port to listen on (0 picks a free port)
            mode: broadcast to everyone, or pair two participants
            max_connections: Registry capacity in broadcast mode
            ping_interval: Seconds between health pings, 0 disables them
            notify_lifecycle: Send ready/bye on behalf of joining/leaving peers
            send_timeout: Seconds a write to one peer may take before the peer
                is dropped, None waits forever
        """
        self.host = host
        self.port = port
        self.mode = RelayMode(mode)
        self.ping_interval = ping_interval
        self.notify_lifecycle = notify_lifecycle
        self.server: Optional[Server] = None

        capacity = PAIR_MODE_CAPACITY if self.mode is RelayMode.PAIR else max_connections
        self.connections = ConnectionManager(
            capacity=capacity, logger=logger, send_timeout=send_timeout
        )
        self.message_handler = SignalingMessageHandler(self.connections, logger, self.mode)
        self._health_task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config: RelayConfig) -> "SignalingRelayServer":
        return cls(
            host=config.host,
            port=config.port,
            mode=config.mode,
            max_connections=config.max_connections,
            ping_interval=config.ping_interval,
            notify_lifecycle=config.notify_lifecycle,
            send_timeout=config.send_timeout,
        )

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually listened on, useful when started with port 0."""
        if self.server is None:
            return None
        for sock in self.server.sockets:
            return sock.getsockname()[1]
        return None

    async def start(self) -> bool:
        """Start the signaling relay server."""
        try:
            self.server = await serve(
                self._handle_connection,
                self.host,
                self.port,
                ping_interval=None,  # Manual ping handling
                max_size=None,  # The relay enforces no message size limit
                compression=None,
            )
        except OSError as e:
            logger.error(f"Failed to start signaling relay on {self.host}:{self.port}: {e}")
            return False

        logger.info(
            f"Signaling relay started on {self.host}:{self.bound_port} "
            f"({self.mode.value} mode)"
        )
        if self.ping_interval > 0:
            self._health_task = asyncio.create_task(
                ConnectionUtils.health_monitor(
                    self.connections, self.ping_interval, logger
                )
            )
        return True

    async def stop(self) -> None:
        """Stop the server, closing every participant connection."""
        if self._health_task:
            self._health_task.cancel()
            try:
                await self._health_task
            except asyncio.CancelledError:
                pass
            self._health_task = None

        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            logger.info("Signaling relay stopped")

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        """Run one participant's lifecycle: register, receive loop, unregister."""
        connection = Connection(websocket)
        logger.info(f"New connection {connection.connection_id} from {connection.remote_address}")

        try:
            await self.connections.register(connection)
        except RelayFullError as e:
            logger.warning(f"Refusing {connection.connection_id}: {e}")
            connection.transition(ConnectionState.CLOSED)
            await websocket.close(WS_CLOSE_TRY_AGAIN_LATER, "relay full")
            return

        try:
            if self.notify_lifecycle:
                await ConnectionUtils.announce(
                    self.connections, connection, MessageKind.READY, logger
                )

            async for frame in websocket:
                await self.message_handler.process_message(connection, frame)

        except ConnectionClosed as e:
            logger.info(f"Connection {connection.connection_id} closed abnormally: {e}")
        except Exception as e:
            logger.error(
                f"Error handling connection {connection.connection_id}: {e}",
                exc_info=True,
            )
        finally:
            await ConnectionUtils.cleanup_connection(
                self.connections, connection, logger, self.notify_lifecycle
            )

    def get_stats(self) -> dict:
        """Get server statistics."""
        return {
            "server_running": self.server is not None,
            "mode": self.mode.value,
            "registry_stats": self.connections.get_stats(),
            "message_stats": self.message_handler.get_stats(),
        }


async def run_server(config: RelayConfig) -> None:
    """Run the relay until cancelled."""
    server = SignalingRelayServer.from_config(config)

    if not await server.start():
        raise SystemExit(1)

    try:
        logger.info("Signaling relay running. Press Ctrl+C to stop.")
        await asyncio.Future()  # Run forever
    finally:
        await server.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signaling-relay",
        description="WebSocket relay for WebRTC offer/answer/ICE signaling.",
    )
    parser.add_argument("--host", help="Host address to bind to")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in RelayMode],
        help="broadcast to all peers, or relay between exactly two",
    )
    parser.add_argument("--env-file", default=".env", help="Environment file to load")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    return parser


def load_config(argv: Optional[List[str]] = None) -> RelayConfig:
    """Build the relay configuration from the environment and command line."""
    args = build_parser().parse_args(argv)
    config = RelayConfigManager(args.env_file).get_config()

    overrides = {
        "host": args.host,
        "port": args.port,
        "mode": args.mode,
        "log_level": args.log_level,
    }
    values = {**vars(config), **{k: v for k, v in overrides.items() if v is not None}}
    return RelayConfig(**values)


def main(argv: Optional[List[str]] = None) -> None:
    """Run the signaling relay server."""
    config = load_config(argv)
    logger.setLevel(config.log_level)

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Shutting down signaling relay...")


if __name__ == "__main__":
    main()
