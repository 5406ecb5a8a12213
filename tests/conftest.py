"""
Pytest configuration and shared fixtures for the Signaling Relay test suite.

This module provides common fixtures and configuration for all tests.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from signaling_relay.core import Connection, ConnectionManager
from signaling_relay.core.types import (
    ENV_LOG_LEVEL,
    ENV_RELAY_HOST,
    ENV_RELAY_MAX_CONNECTIONS,
    ENV_RELAY_MODE,
    ENV_RELAY_NOTIFY_LIFECYCLE,
    ENV_RELAY_PING_INTERVAL,
    ENV_RELAY_PORT,
    ENV_RELAY_SEND_TIMEOUT,
)
from signaling_relay.websockets.client import SignalingClient
from signaling_relay.websockets.server import SignalingRelayServer

RELAY_ENV_VARS = [
    ENV_RELAY_HOST,
    ENV_RELAY_PORT,
    ENV_RELAY_MODE,
    ENV_RELAY_MAX_CONNECTIONS,
    ENV_RELAY_PING_INTERVAL,
    ENV_RELAY_SEND_TIMEOUT,
    ENV_RELAY_NOTIFY_LIFECYCLE,
    ENV_LOG_LEVEL,
]


async def _answered_ping(*args):
    """Ping that the peer has already answered."""
    pong_waiter = asyncio.get_running_loop().create_future()
    pong_waiter.set_result(0.0)
    return pong_waiter


def make_mock_websocket(port: int = 12345) -> MagicMock:
    """Create a mock server-side WebSocket connection."""
    websocket = MagicMock()
    websocket.remote_address = ("127.0.0.1", port)
    websocket.send = AsyncMock()
    websocket.ping = AsyncMock(side_effect=_answered_ping)
    websocket.close = AsyncMock()
    return websocket


def sent_frames(connection: Connection) -> list:
    """Frames written to a mock-backed connection, in order."""
    return [call.args[0] for call in connection.websocket.send.await_args_list]


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Poll ``predicate`` until it is true or fail after ``timeout`` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)


@pytest.fixture
def make_connection():
    """Factory for Connection objects backed by mock websockets."""
    counter = iter(range(20000, 30000))

    def _make() -> Connection:
        return Connection(make_mock_websocket(next(counter)))

    return _make


@pytest.fixture
def connection_manager():
    """An empty, unbounded registry."""
    return ConnectionManager()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove relay settings from the environment and restore them afterwards."""
    for key in RELAY_ENV_VARS:
        # setenv first so monkeypatch remembers the original state even when
        # load_dotenv writes the variable later in the test
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


@pytest_asyncio.fixture
async def relay_factory():
    """Start relay servers on free local ports; stop them after the test."""
    servers = []

    async def _start(**kwargs) -> SignalingRelayServer:
        kwargs.setdefault("ping_interval", 0)
        server = SignalingRelayServer(host="127.0.0.1", port=0, **kwargs)
        assert await server.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        await server.stop()


@pytest_asyncio.fixture
async def client_factory():
    """Connect signaling clients to a relay; close them after the test."""
    clients = []

    async def _connect(server: SignalingRelayServer, name: str = "participant") -> SignalingClient:
        client = SignalingClient(f"ws://127.0.0.1:{server.bound_port}", client_name=name)
        assert await client.connect(max_retries=1)
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        await client.close()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
