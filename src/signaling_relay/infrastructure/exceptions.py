"""
Custom exceptions for the Signaling Relay.

This module defines all custom exceptions used throughout the relay,
providing clear error categorization and handling.
"""

from typing import Any


class SignalingRelayError(Exception):
    """Base exception for all Signaling Relay related errors."""

    pass


class ConfigurationError(SignalingRelayError):
    """Raised when there are configuration-related errors."""

    pass


class ValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    pass


class NetworkError(SignalingRelayError):
    """Raised when there are network communication errors."""

    pass


class WebSocketError(NetworkError):
    """Raised when there are WebSocket communication errors."""

    pass


class DeliveryFailure(NetworkError):
    """Raised when writing to a peer's channel fails or stalls."""

    def __init__(self, connection_id: str, cause: Any = None) -> None:
        super().__init__(f"Delivery to {connection_id} failed: {cause}")
        self.connection_id = connection_id
        self.cause = cause


class ConnectionStateError(SignalingRelayError):
    """Raised when a connection is moved along an illegal lifecycle edge."""

    pass


class RelayFullError(SignalingRelayError):
    """Raised when the registry has no room for another participant."""

    pass


class MessageError(SignalingRelayError):
    """Base class for inbound envelope errors."""

    pass


class MalformedMessage(MessageError):
    """Raised when an inbound frame is not a valid signaling envelope."""

    def __init__(self, reason: str, raw: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw


class UnknownMessageKind(MessageError):
    """Raised when an envelope carries a ``type`` the relay does not route."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Unknown message type: {kind}")
        self.kind = kind
