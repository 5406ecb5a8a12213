"""
Signaling Relay - WebSocket relay for WebRTC connection negotiation.

Browser tabs and media engines each keep one WebSocket open to the relay,
which forwards their offers, answers and ICE candidates to the other
participant(s) verbatim. The media itself never passes through the relay.

Architecture:
- Core: Connection registry, lifecycle state machine, signaling envelopes
- WebSockets: Relay server and participant client
- Config: Environment-backed configuration
- Infrastructure: Logging, exceptions
"""

__version__ = "1.0.0"

# Infrastructure
from .infrastructure.logging import setup_logging
from .infrastructure.exceptions import (
    SignalingRelayError,
    ConfigurationError,
    NetworkError,
    MalformedMessage,
    UnknownMessageKind,
)

# Core components
from .core import (
    Connection,
    ConnectionManager,
    ConnectionState,
    MessageKind,
    RelayMode,
    SignalingMessage,
    create_message,
    parse_message,
)

# Configuration
from .config import RelayConfig, RelayConfigManager

# Networking components
from .websockets.server import SignalingRelayServer
from .websockets.client import SignalingClient

__all__ = [
    # Version info
    "__version__",
    # Core components
    "Connection",
    "ConnectionManager",
    "ConnectionState",
    "MessageKind",
    "RelayMode",
    "SignalingMessage",
    "create_message",
    "parse_message",
    # Networking components
    "SignalingRelayServer",
    "SignalingClient",
    # Configuration
    "RelayConfig",
    "RelayConfigManager",
    # Infrastructure
    "setup_logging",
    "SignalingRelayError",
    "ConfigurationError",
    "NetworkError",
    "MalformedMessage",
    "UnknownMessageKind",
]
