"""
WebSocket client for signaling relay participants.
"""

from .signaling_client import SignalingClient

__all__ = [
    "SignalingClient",
]
