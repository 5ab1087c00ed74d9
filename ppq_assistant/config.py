"""Configuration management for ppq-assistant."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .constants import (
    CONFIG_FILE,
    DEFAULT_API_URL,
    DEFAULT_MODEL,
    ENV_API_TOKEN,
    ENV_API_URL,
    ENV_MODEL,
)
from .exceptions import ConfigError

_CONFIG_HINT = f'Create {CONFIG_FILE} with {{"api_token": "..."}} or set {ENV_API_TOKEN}.'


@dataclass
class Config:
    """Configuration container for ppq-assistant."""

    api_token: str = ""
    api_url: str = DEFAULT_API_URL
    default_model: str = DEFAULT_MODEL

    _path: Path | None = field(default=None, repr=False)

    @property
    def path(self) -> Path:
        """Get the config file path."""
        return self._path or CONFIG_FILE

    @classmethod
    def load(cls, path: Path | None = None, environ: dict[str, str] | None = None) -> "Config":
        """Load config from file, then apply environment overrides."""
        config_path = path or CONFIG_FILE
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid config file {config_path}: {e}")
            except OSError as e:
                raise ConfigError(f"Could not open config file at {config_path}: {e.strerror}")
            if not isinstance(data, dict):
                raise ConfigError(f"Invalid config file {config_path}: expected a JSON object")

        return cls(
            api_token=env.get(ENV_API_TOKEN) or data.get("api_token") or "",
            api_url=env.get(ENV_API_URL) or data.get("api_url") or DEFAULT_API_URL,
            default_model=env.get(ENV_MODEL) or data.get("default_model") or DEFAULT_MODEL,
            _path=config_path,
        )

    def validate(self) -> None:
        """Raise ConfigError if the configuration cannot be used to call the API."""
        if not self.api_token:
            if not self.path.exists():
                raise ConfigError(f"Config file not found at {self.path}", hint=_CONFIG_HINT)
            raise ConfigError(f"'api_token' missing from {self.path}", hint=_CONFIG_HINT)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        config_path = path or self._path or CONFIG_FILE
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "api_token": self.api_token,
            "api_url": self.api_url,
            "default_model": self.default_model,
        }


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file and environment."""
    return Config.load(path)
