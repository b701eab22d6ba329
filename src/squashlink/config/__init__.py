"""SquashLink Configuration Module

This module provides unified access to configuration models and settings
management for SquashLink.
"""

from __future__ import annotations

from .loader import get_config, load_settings, reload_config, reset_config
from .models import (
    CircuitSettings,
    LoggingSettings,
    RetrySettings,
    Settings,
    SquashSettings,
)

__all__ = [
    "CircuitSettings",
    "LoggingSettings",
    "RetrySettings",
    "Settings",
    "SquashSettings",
    "get_config",
    "load_settings",
    "reload_config",
    "reset_config",
]
