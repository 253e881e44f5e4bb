"""
Client configuration.

Values come from environment variables prefixed with ROOMSUB_ (or a .env
file), optionally layered on top of a YAML file:

    # roomsub.yaml
    gateway_url: http://backend:7512
    redis_url: redis://redis:6379
    headers:
      volatile: {sdk: python}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RoomSettings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ROOMSUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Backend
    GATEWAY_URL: str = "http://localhost:7512"
    REQUEST_TIMEOUT: float = 30.0

    # Notifications
    REDIS_URL: str = "redis://localhost:6379"

    # Default headers merged into every room request
    HEADERS: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "RoomSettings":
        """
        Load settings from a YAML file. Environment variables win over file values.

        Args:
            path: Path to YAML file with lowercase or uppercase keys

        Returns:
            RoomSettings instance
        """
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")

        values = {str(key).upper(): value for key, value in data.items()}

        from_env = cls()
        for name in from_env.model_fields_set:
            values[name] = getattr(from_env, name)

        return cls(**values)
