"""
Core components of the Signaling Relay.

This package contains the connection registry, the connection lifecycle
state machine and the signaling envelope model.
"""

from .connection import Connection
from .connection_manager import ConnectionManager
from .messages import SignalingMessage, create_message, parse_message
from .types import ConnectionState, MessageKind, RelayMode

__all__ = [
    "Connection",
    "ConnectionManager",
    "ConnectionState",
    "MessageKind",
    "RelayMode",
    "SignalingMessage",
    "create_message",
    "parse_message",
]
