"""Configuration loader for the codemod CLI.

Settings are read from an optional JSON file and validated at load time. Each
key is optional:

- ``versionSource``: ``"installed"`` (ask local binaries, default) or
  ``"registry"`` (ask the npm registry for the latest release)
- ``registryUrl``: registry base URL used by the ``registry`` source
- ``logLevel``: name of a ``logging`` level, default ``WARNING``
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .versions import DEFAULT_REGISTRY_URL

CONFIG_PATH_ENV_VAR = "NPM_CODEMOD_CONFIG"
VERSION_SOURCES = ("installed", "registry")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings container."""

    version_source: str = "installed"
    registry_url: str = DEFAULT_REGISTRY_URL
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from a dictionary, validating each field."""
        version_source = data.get("versionSource", "installed")
        if version_source not in VERSION_SOURCES:
            allowed = ", ".join(VERSION_SOURCES)
            raise ConfigError(f"Invalid 'versionSource' {version_source!r} (expected one of: {allowed})")

        registry_url = data.get("registryUrl", DEFAULT_REGISTRY_URL)
        if not isinstance(registry_url, str) or not registry_url.startswith(("http://", "https://")):
            raise ConfigError("'registryUrl' must be an http(s) URL")

        log_level = data.get("logLevel", "WARNING")
        if not isinstance(log_level, str) or not isinstance(
            logging.getLevelName(log_level.upper()), int
        ):
            raise ConfigError(f"Invalid 'logLevel' {log_level!r}")

        return cls(
            version_source=version_source,
            registry_url=registry_url,
            log_level=log_level.upper(),
        )


def _resolve_config_path(path: Path | str | None = None) -> Path | None:
    """Resolve the configuration file path.

    Priority:
    1. Explicit path argument
    2. NPM_CODEMOD_CONFIG environment variable
    3. None (built-in defaults)
    """
    if path is not None:
        return Path(path)

    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)

    return None


def load_settings(path: Path | str | None = None) -> Settings:
    """Load and validate settings.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    config_path = _resolve_config_path(path)
    if config_path is None:
        return Settings()

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in configuration file: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    return Settings.from_dict(data)
