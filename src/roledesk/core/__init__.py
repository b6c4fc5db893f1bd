"""Core RoleDesk utilities.

This module exports core utilities for use throughout the application.
"""

from roledesk.core.config import Settings, get_settings
from roledesk.core.logging import (
    LoggingContext,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggingContext",
    "bind_correlation_id",
    "clear_context",
]
