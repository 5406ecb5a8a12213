"""
Configuration management for the Signaling Relay.

This package provides the relay configuration dataclass and the
environment-backed manager that loads it.
"""

from .settings import RelayConfig, RelayConfigManager

__all__ = [
    "RelayConfig",
    "RelayConfigManager",
]
