"""
Configuration management for the Signaling Relay.

Settings come from environment variables, optionally loaded from a .env
file first. Command-line options in run_relay.py override them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from ..core.types import (
    DEFAULT_HOST,
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PORT,
    DEFAULT_SEND_TIMEOUT,
    ENV_LOG_LEVEL,
    ENV_RELAY_HOST,
    ENV_RELAY_MAX_CONNECTIONS,
    ENV_RELAY_MODE,
    ENV_RELAY_NOTIFY_LIFECYCLE,
    ENV_RELAY_PING_INTERVAL,
    ENV_RELAY_PORT,
    ENV_RELAY_SEND_TIMEOUT,
    RelayMode,
)
from ..infrastructure.exceptions import ValidationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RelayConfig:
    """Runtime configuration of the signaling relay."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    mode: RelayMode = RelayMode.BROADCAST
    max_connections: int = DEFAULT_MAX_CONNECTIONS
    ping_interval: int = DEFAULT_PING_INTERVAL
    send_timeout: float = DEFAULT_SEND_TIMEOUT
    notify_lifecycle: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        """Normalize and validate field values."""
        try:
            self.mode = RelayMode(self.mode)
        except ValueError:
            raise ValidationError(
                f"Invalid relay mode: {self.mode!r} "
                f"(expected one of {[m.value for m in RelayMode]})"
            ) from None

        if not 0 <= self.port <= 65535:
            raise ValidationError(f"Port out of range: {self.port}")
        if self.max_connections < 1:
            raise ValidationError("max_connections must be at least 1")
        if self.ping_interval < 0:
            raise ValidationError("ping_interval cannot be negative")
        if self.send_timeout <= 0:
            raise ValidationError("send_timeout must be positive")

        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValidationError(f"Invalid log level: {self.log_level}")


class RelayConfigManager:
    """Loads RelayConfig from the environment."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to environment file
        """
        self.env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from file."""
        if os.path.exists(self.env_file_path):
            load_dotenv(dotenv_path=self.env_file_path)
            logger.info(f"Loaded environment from {self.env_file_path}")
        else:
            logger.debug(f"Environment file {self.env_file_path} not found")

    def _get_optional_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get optional environment variable."""
        return os.getenv(key, default)

    def _get_int_env(self, key: str, default: int) -> int:
        """
        Get an integer environment variable.

        Raises:
            ValidationError: If the value is not an integer
        """
        value = self._get_optional_env(key)
        if value is None or value.strip() == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ValidationError(f"{key} must be an integer, got {value!r}") from None

    def _get_float_env(self, key: str, default: float) -> float:
        """
        Get a numeric environment variable.

        Raises:
            ValidationError: If the value is not a number
        """
        value = self._get_optional_env(key)
        if value is None or value.strip() == "":
            return default
        try:
            return float(value)
        except ValueError:
            raise ValidationError(f"{key} must be a number, got {value!r}") from None

    def _get_bool_env(self, key: str, default: bool) -> bool:
        """Get a boolean environment variable (true/false, yes/no, 1/0)."""
        value = self._get_optional_env(key)
        if value is None:
            return default
        return value.strip().lower() in ("1", "true", "yes", "on")

    def get_config(self) -> RelayConfig:
        """
        Get the relay configuration.

        Returns:
            RelayConfig: Relay configuration

        Raises:
            ValidationError: If a configured value is invalid
        """
        try:
            config = RelayConfig(
                host=self._get_optional_env(ENV_RELAY_HOST, DEFAULT_HOST),
                port=self._get_int_env(ENV_RELAY_PORT, DEFAULT_PORT),
                mode=self._get_optional_env(ENV_RELAY_MODE, RelayMode.BROADCAST.value).lower(),
                max_connections=self._get_int_env(
                    ENV_RELAY_MAX_CONNECTIONS, DEFAULT_MAX_CONNECTIONS
                ),
                ping_interval=self._get_int_env(
                    ENV_RELAY_PING_INTERVAL, DEFAULT_PING_INTERVAL
                ),
                send_timeout=self._get_float_env(
                    ENV_RELAY_SEND_TIMEOUT, DEFAULT_SEND_TIMEOUT
                ),
                notify_lifecycle=self._get_bool_env(ENV_RELAY_NOTIFY_LIFECYCLE, False),
                log_level=self._get_optional_env(ENV_LOG_LEVEL, "INFO"),
            )
        except ValidationError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

        logger.debug(f"Configuration loaded: {config}")
        return config
