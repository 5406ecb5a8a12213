"""
WebSocket server implementation for the signaling relay.

This module contains the main SignalingRelayServer class and related components.
"""

from .relay_server import SignalingRelayServer

__all__ = [
    "SignalingRelayServer",
]
