"""
WebSocket transport for the Signaling Relay: the relay server and the
participant client.
"""
