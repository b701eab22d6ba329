"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration.

    This class manages log level, console rendering and the optional
    JSON-lines log file.
    """

    level: str = Field(default="INFO", description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON-lines log file path")
    rich_console: bool = Field(
        default=True,
        description="Render console logs with Rich (False emits JSON lines)",
    )

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            msg = f"Invalid log level {value!r}; expected one of {', '.join(_LEVELS)}"
            raise ValueError(msg)
        return level


__all__ = ["LoggingSettings"]
