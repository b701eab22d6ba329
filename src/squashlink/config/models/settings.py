"""SquashLink Settings Configuration Model.

Root Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from squashlink.config.models.api_settings import SquashSettings
from squashlink.config.models.app_settings import LoggingSettings


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Every field can be overridden from the environment, e.g.
    ``SQUASHLINK_SQUASH__BASE_URL`` or ``SQUASHLINK_SQUASH__RETRY__MAX_ATTEMPTS``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SQUASHLINK_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    squash: SquashSettings = Field(default_factory=SquashSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""

        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file.

        The bearer token is written as well; config files are not logs.
        """

        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json", exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)


__all__ = ["Settings"]
