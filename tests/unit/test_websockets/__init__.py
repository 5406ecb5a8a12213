"""websockets tests."""
