#!/usr/bin/env python3
"""
Run the signaling relay server.

This script starts the WebSocket relay that forwards WebRTC signaling
messages between connected participants.
"""

import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from signaling_relay.websockets.server.relay_server import main

if __name__ == "__main__":
    main()
