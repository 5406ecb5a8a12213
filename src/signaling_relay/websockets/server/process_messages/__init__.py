"""
Message processing modules for the signaling relay server.
"""

from .signaling_message import SignalingMessageHandler
from .utils import ConnectionUtils

__all__ = [
    "SignalingMessageHandler",
    "ConnectionUtils",
]
