"""Configuration management for cronpilot."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from cronpilot.errors import ConfigError

CONFIG_FILE = Path.home() / ".cronpilot" / "config.yaml"
ENV_PREFIX = "CRONPILOT"
# High enough that a slow job never misses a tick; set 1 to serialise runs
DEFAULT_MAX_INSTANCES = 100


class ConfigStore(Protocol):
    """Key-value lookup used to resolve indirect schedule expressions."""

    def get_string(self, key: str) -> str:
        """Return the value for ``key``, or an empty string if absent."""
        ...


class Settings(BaseModel):
    """Scheduler options read from the ``scheduler`` section of the config file."""

    timezone: str = Field(default="local", description="Timezone for cron triggers")
    coalesce: bool = Field(default=True, description="Combine missed runs into one")
    max_instances: int = Field(
        default=DEFAULT_MAX_INSTANCES, ge=1, description="Concurrent runs per job"
    )
    misfire_grace_time: int = Field(default=60, ge=1, description="Allowed lateness in seconds")
    dirs: list[str] = Field(default_factory=list, description="Directories to scan")
    exclude: list[str] = Field(
        default_factory=list, description="Glob patterns of directory names to skip"
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone name is known."""
        if v == "local":
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            msg = f"Unknown timezone: {v}"
            raise ValueError(msg) from e
        return v

    def job_defaults(self) -> dict[str, Any]:
        """APScheduler ``job_defaults`` built from these settings."""
        return {
            "coalesce": self.coalesce,
            "max_instances": self.max_instances,
            "misfire_grace_time": self.misfire_grace_time,
        }


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping from ``path``.

    Raises:
        ConfigError: If the file cannot be read or is not a mapping.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


class YamlConfigStore:
    """Configuration store backed by a YAML mapping.

    Keys are dotted paths (``cron.nightly``) matched case-insensitively.
    An environment variable ``CRONPILOT_<KEY>`` with dots replaced by
    underscores takes precedence over the file.
    """

    def __init__(self, data: dict[str, Any] | None = None, env_prefix: str = ENV_PREFIX) -> None:
        self._data = data or {}
        self._env_prefix = env_prefix

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> YamlConfigStore:
        """Load a store from a YAML file, empty if the file doesn't exist."""
        path = Path(path) if path else CONFIG_FILE
        if not path.exists():
            return cls()
        return cls(_read_yaml(path))

    def _env_name(self, key: str) -> str:
        name = key.replace(".", "_").replace("-", "_").upper()
        return f"{self._env_prefix}_{name}" if self._env_prefix else name

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict):
                return None
            if part in node:
                node = node[part]
                continue
            lowered = part.lower()
            for candidate, value in node.items():
                if str(candidate).lower() == lowered:
                    node = value
                    break
            else:
                return None
        return node

    def get_string(self, key: str) -> str:
        """Return the value for ``key`` as a string, or "" if absent."""
        if not key:
            return ""

        if (value := os.environ.get(self._env_name(key))) is not None:
            return value

        value = self._lookup(key)
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, str | int | float):
            return str(value)
        return ""

    def get_section(self, key: str) -> dict[str, Any]:
        """Return the mapping stored under ``key``, empty if missing."""
        value = self._lookup(key)
        return value if isinstance(value, dict) else {}


def load_settings(path: Path | str | None = None) -> Settings:
    """Load scheduler settings from the config file.

    Args:
        path: Config file path (defaults to ~/.cronpilot/config.yaml).

    Returns:
        Settings, with defaults if the file doesn't exist.

    Raises:
        ConfigError: If the file is malformed or holds invalid values.
    """
    store = YamlConfigStore.from_file(path)
    try:
        return Settings.model_validate(store.get_section("scheduler"))
    except ValidationError as e:
        raise ConfigError(f"Invalid scheduler settings: {e}") from e
