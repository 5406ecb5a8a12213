"""
Infrastructure components for the Signaling Relay.

This package contains infrastructure concerns including:
- Logging configuration and utilities with production controls
- Custom exception definitions
"""

from .logging import setup_logging
from .logging_manager import LoggingManager
from .exceptions import (
    SignalingRelayError,
    ConfigurationError,
    ValidationError,
    NetworkError,
    WebSocketError,
    DeliveryFailure,
    ConnectionStateError,
    RelayFullError,
    MessageError,
    MalformedMessage,
    UnknownMessageKind,
)

__all__ = [
    # Logging
    "setup_logging",
    "LoggingManager",
    # Exceptions
    "SignalingRelayError",
    "ConfigurationError",
    "ValidationError",
    "NetworkError",
    "WebSocketError",
    "DeliveryFailure",
    "ConnectionStateError",
    "RelayFullError",
    "MessageError",
    "MalformedMessage",
    "UnknownMessageKind",
]
