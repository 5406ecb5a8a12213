"""
Test suite for the Signaling Relay.

This package contains tests organized by type:
- Unit tests for individual components
- Integration tests running the relay over real WebSocket connections
"""
