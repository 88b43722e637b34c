"""Unified configuration module.

Single source of truth for all configuration and settings.
"""

from .settings import (
    Settings,
    get_settings,
    ACCEPTED_BLOCK_STATUSES,
    DEFAULT_PROBE_USER_AGENT,
)

__all__ = [
    "Settings",
    "get_settings",
    "ACCEPTED_BLOCK_STATUSES",
    "DEFAULT_PROBE_USER_AGENT",
]
