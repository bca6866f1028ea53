"""Runtime settings for identifier generation and validation.

Settings come from an optional YAML file and a few environment overrides:

    # game-content-manifest.yaml
    manifest:
      schema_version: 1
      allow_legacy_ids: false
      max_release_version_digits: 9
    logging:
      level: INFO

The active settings are held in a module-level slot that is only replaced
wholesale through configure(); readers never mutate it.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "game-content-manifest.yaml"
CONFIG_ENV_VAR = "GAME_CONTENT_MANIFEST_CONFIG"
ALLOW_LEGACY_ENV_VAR = "GAME_CONTENT_MANIFEST_ALLOW_LEGACY_IDS"
LOG_LEVEL_ENV_VAR = "GAME_CONTENT_MANIFEST_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ManifestSettings:
    """Settings consumed by the grammar, the generator and the CLI."""

    schema_version: int = 1
    allow_legacy_ids: bool = False
    max_release_version_digits: int = 9
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.schema_version < 0:
            raise ValueError(f"schema_version must be non-negative: {self.schema_version}")
        if not 1 <= self.max_release_version_digits <= 9:
            raise ValueError(
                "max_release_version_digits must be between 1 and 9: "
                f"{self.max_release_version_digits}"
            )


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _settings_from_mapping(data: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(ManifestSettings)}
    section = dict(data.get("manifest") or {})
    values = {key: value for key, value in section.items() if key in known}

    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning("Ignoring unknown manifest settings: %s", ", ".join(unknown))

    log_section = data.get("logging") or {}
    if "level" in log_section:
        values["log_level"] = str(log_section["level"]).upper()
    return values


def load_settings(path: Path | None = None) -> ManifestSettings:
    """Load settings from YAML and the environment.

    Args:
        path: Explicit config file. Defaults to $GAME_CONTENT_MANIFEST_CONFIG,
              then ./game-content-manifest.yaml. A missing file yields defaults.

    Returns:
        ManifestSettings instance

    Raises:
        yaml.YAMLError: If the config file is not valid YAML
        ValueError: If a setting is out of range
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else Path.cwd() / CONFIG_FILENAME

    values = _settings_from_mapping(_load_yaml(path))

    if ALLOW_LEGACY_ENV_VAR in os.environ:
        values["allow_legacy_ids"] = os.environ[ALLOW_LEGACY_ENV_VAR].strip().lower() in _TRUTHY
    if LOG_LEVEL_ENV_VAR in os.environ:
        values["log_level"] = os.environ[LOG_LEVEL_ENV_VAR].strip().upper()

    settings = ManifestSettings(**values)
    logger.debug("Loaded manifest settings from %s: %s", path, settings)
    return settings


_active_settings = ManifestSettings()


def get_settings() -> ManifestSettings:
    """Return the active settings."""
    return _active_settings


def configure(settings: ManifestSettings | None = None, **overrides: Any) -> ManifestSettings:
    """Replace the active settings.

    Args:
        settings: New settings. Defaults to the currently active ones.
        **overrides: Individual fields to change on top of settings

    Returns:
        The settings now in effect
    """
    global _active_settings
    base = settings if settings is not None else _active_settings
    _active_settings = replace(base, **overrides) if overrides else base
    return _active_settings
