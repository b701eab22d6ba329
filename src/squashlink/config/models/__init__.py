"""Configuration domain models."""

from __future__ import annotations

from .api_settings import CircuitSettings, RetrySettings, SquashSettings
from .app_settings import LoggingSettings
from .settings import Settings

__all__ = [
    "CircuitSettings",
    "LoggingSettings",
    "RetrySettings",
    "Settings",
    "SquashSettings",
]
