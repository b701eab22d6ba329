"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Mapping of the conventional SQUASH_API_TOKEN / SQUASH_API_URL variables
- Thread-safe singleton pattern for the Settings instance
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from squashlink.config.models.settings import Settings
from squashlink.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "SQUASH_API_TOKEN"  # noqa: S105  # nosec B105 - variable name, not a secret
BASE_URL_ENV_VAR = "SQUASH_API_URL"

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/squashlink.toml"),
    Path("squashlink.toml"),
    Path.home() / ".squashlink" / "config.toml",
)


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking pattern to ensure thread-safety
    while minimizing lock overhead.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it if necessary."""
        # First check (without lock)
        if self._instance is None:
            # Second check (with lock)
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self, config_path: str | Path | None = None) -> Settings:
        """Reload the global settings instance from configuration sources."""
        with self._lock:
            self._instance = load_settings(config_path)

        return self._instance

    def reset(self) -> None:
        """Drop the cached instance so the next get_config() reloads."""
        with self._lock:
            self._instance = None


def _load_env_file(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file when one exists.

    Variables already present in the process environment win over the file.

    Returns:
        True if a file was loaded.
    """
    env_file = env_file or Path(".env")
    if not env_file.exists():
        return False

    loaded = load_dotenv(env_file, override=False)
    logger.debug("Loaded environment file %s", env_file.name)
    return loaded


def _apply_conventional_env(settings: Settings) -> Settings:
    """Fill token and base URL from SQUASH_API_* when not set otherwise."""
    updates: dict[str, str] = {}

    token = os.getenv(TOKEN_ENV_VAR, "").strip()
    if token and not settings.squash.token:
        updates["token"] = token

    base_url = os.getenv(BASE_URL_ENV_VAR, "").strip()
    if base_url and "base_url" not in settings.squash.model_fields_set:
        updates["base_url"] = base_url.rstrip("/")

    if not updates:
        return settings

    squash = settings.squash.model_copy(update=updates)
    return settings.model_copy(update={"squash": squash})


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from TOML configuration file or environment.

    Args:
        config_path: Optional path to a TOML configuration file. If None, the
            default locations are tried before falling back to the environment.

    Returns:
        Settings instance loaded from the specified source

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ApplicationError: If the configuration does not validate
    """
    _load_env_file()

    if config_path is None:
        config_path = next((path for path in DEFAULT_CONFIG_PATHS if path.exists()), None)

    try:
        settings = Settings.from_toml_file(config_path) if config_path else Settings()
    except ValidationError as e:
        raise ApplicationError(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Invalid configuration: {e.error_count()} validation error(s)",
            context=ErrorContext(
                operation="load_settings",
                additional_data={"config_path": str(config_path or "")},
            ),
            original_error=e,
        ) from e

    return _apply_conventional_env(settings)


# Global loader instance
_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config(config_path: str | Path | None = None) -> Settings:
    """Reload the global settings instance from configuration sources."""
    return _loader.reload_config(config_path)


def reset_config() -> None:
    """Forget the cached settings instance."""
    _loader.reset()


__all__ = [
    "SettingsLoader",
    "get_config",
    "load_settings",
    "reload_config",
    "reset_config",
]
