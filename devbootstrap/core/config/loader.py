"""
Configuration loader — reads bootstrap.yml into BootstrapSettings.

The file is optional. Lookup order:
    --config PATH  >  DEVBOOT_CONFIG env var  >  ~/.config/devbootstrap/bootstrap.yml
When none of them exists the built-in defaults are used.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from devbootstrap.core.models.settings import BootstrapSettings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DEVBOOT_CONFIG"
DEFAULT_CONFIG_FILE = "~/.config/devbootstrap/bootstrap.yml"


class ConfigError(Exception):
    """Raised when bootstrap configuration is invalid or unreadable."""


def find_config_file() -> Path | None:
    """Return the config file to use, or None to fall back on defaults.

    An explicitly named file (env var) that does not exist is an error
    at load time; the per-user default is silently optional.
    """
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()

    candidate = Path(DEFAULT_CONFIG_FILE).expanduser()
    if candidate.is_file():
        return candidate
    return None


def load_settings(path: Path | None = None) -> BootstrapSettings:
    """Load and validate bootstrap settings.

    Args:
        path: Explicit path to bootstrap.yml. If None, uses
            :func:`find_config_file`.

    Returns:
        Validated BootstrapSettings (defaults when no file applies).

    Raises:
        ConfigError: If a named file is missing, unreadable or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No bootstrap config file, using defaults")
        return BootstrapSettings()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading bootstrap config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return BootstrapSettings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "bootstrap" key or be flat
    section = data.get("bootstrap", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'bootstrap' in {path} must be a mapping")

    try:
        settings = BootstrapSettings.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid bootstrap configuration: {e}") from e

    logger.info("Loaded bootstrap config for %s from %s", settings.repo_slug, path)
    return settings
