"""
Centralized logging configuration for the Signaling Relay.

This module provides consistent logging setup across all relay components
using YAML configuration with environment-based levels.
"""

import logging
from typing import Optional

from .logging_manager import setup_logging as _setup_logging


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging for a relay component.

    Args:
        component_name: Name of the component (e.g., 'relay_server', 'signaling_client')
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). If None, uses
                  environment-appropriate level: Development=DEBUG, Staging=INFO,
                  Production=WARNING
        log_file: Optional log file path (if None, uses YAML config)

    Returns:
        logging.Logger: Configured logger instance
    """
    return _setup_logging(component_name, log_level, log_file)
