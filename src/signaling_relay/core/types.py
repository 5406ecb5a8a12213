"""
Common types and constants for the Signaling Relay.

This module centralizes message kinds, relay modes and defaults to avoid
hardcoding throughout the codebase.
"""

from enum import Enum
from typing import Final, FrozenSet


class MessageKind(str, Enum):
    """Signaling envelope kinds routed by the relay."""

    OFFER = "offer"
    ANSWER = "answer"
    CANDIDATE = "candidate"
    READY = "ready"
    BYE = "bye"
    START = "start"
    STOP = "stop"
    START_RECORDING = "start-recording"
    STOP_RECORDING = "stop-recording"


# Session negotiation kinds
NEGOTIATION_KINDS: Final[FrozenSet[MessageKind]] = frozenset(
    {MessageKind.OFFER, MessageKind.ANSWER, MessageKind.CANDIDATE}
)

# Lifecycle hints, forwarded without interpretation
LIFECYCLE_KINDS: Final[FrozenSet[MessageKind]] = frozenset(
    {
        MessageKind.READY,
        MessageKind.BYE,
        MessageKind.START,
        MessageKind.STOP,
        MessageKind.START_RECORDING,
        MessageKind.STOP_RECORDING,
    }
)


class ConnectionState(str, Enum):
    """Lifecycle of a participant connection."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


# Legal lifecycle edges; CLOSED is terminal
CONNECTION_TRANSITIONS: Final = {
    ConnectionState.CONNECTING: frozenset({ConnectionState.OPEN, ConnectionState.CLOSED}),
    ConnectionState.OPEN: frozenset({ConnectionState.CLOSED}),
    ConnectionState.CLOSED: frozenset(),
}


class RelayMode(str, Enum):
    """How the relay picks recipients for a message."""

    BROADCAST = "broadcast"
    PAIR = "pair"


# Wire field carrying the kind discriminator
WS_FIELD_TYPE: Final[str] = "type"

# Close codes used when the relay refuses or ends a connection
WS_CLOSE_TRY_AGAIN_LATER: Final[int] = 1013
WS_CLOSE_INTERNAL_ERROR: Final[int] = 1011

# Environment Variable Names (from .env file)
ENV_RELAY_HOST: Final[str] = "RELAY_HOST"
ENV_RELAY_PORT: Final[str] = "RELAY_PORT"
ENV_RELAY_MODE: Final[str] = "RELAY_MODE"
ENV_RELAY_MAX_CONNECTIONS: Final[str] = "RELAY_MAX_CONNECTIONS"
ENV_RELAY_PING_INTERVAL: Final[str] = "RELAY_PING_INTERVAL"
ENV_RELAY_SEND_TIMEOUT: Final[str] = "RELAY_SEND_TIMEOUT"
ENV_RELAY_NOTIFY_LIFECYCLE: Final[str] = "RELAY_NOTIFY_LIFECYCLE"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"

# Default Values
DEFAULT_HOST: Final[str] = "localhost"
DEFAULT_PORT: Final[int] = 8765
DEFAULT_MAX_CONNECTIONS: Final[int] = 100
DEFAULT_PING_INTERVAL: Final[int] = 30
DEFAULT_SEND_TIMEOUT: Final[float] = 10.0
PAIR_MODE_CAPACITY: Final[int] = 2
DEFAULT_RELAY_URL: Final[str] = "ws://localhost:8765"
