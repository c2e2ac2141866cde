"""
Configuration loader for Rolecall.

Loads and merges configuration from multiple sources:
1. Default values
2. Global config (~/.rolecall/config.yaml)
3. Profile config (~/.rolecall/profiles/<name>.yaml)
4. Project config (./.rolecall/project.yaml)
5. Environment variables (ROLECALL_*)
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from rolecall.config.merger import deep_merge, get_nested_value, set_nested_value
from rolecall.config.schema import Config
from rolecall.storage.paths import (
    find_project_config,
    get_global_config_path,
    get_profile_path,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "ROLECALL_"

# Variables that steer loading itself rather than a config key
_RESERVED_ENV = {"ROLECALL_HOME", "ROLECALL_PROFILE"}


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed configuration dictionary (empty if the file is missing or blank).

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {path}")
    return content


def apply_env_overrides(
    config: dict[str, Any],
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern ROLECALL_<SECTION>_<KEY>=<value>.
    The first segment names the section and the rest is the key, so
    ROLECALL_REMOTE_BASE_URL sets remote.base_url.

    Args:
        config: Configuration dictionary to modify.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Configuration with environment overrides applied.
    """
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV:
            continue

        section, _, field = key[len(ENV_PREFIX) :].lower().partition("_")
        if not section or not field:
            continue

        logger.debug(f"Config override from environment: {section}.{field}")
        config = set_nested_value(config, f"{section}.{field}", _parse_env_value(value))

    return config


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to the appropriate type.

    Args:
        value: String value from environment.

    Returns:
        Parsed value (bool, int, float, list, or string).
    """
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False

    if re.match(r"^-?\d+$", value):
        return int(value)

    if re.match(r"^-?\d+\.\d+$", value):
        return float(value)

    # Comma-separated list, but not prose with commas in it
    if "," in value and " " not in value:
        return [item.strip() for item in value.split(",") if item.strip()]

    return value


def load_config(
    profile: str | None = None,
    project_path: Path | None = None,
    skip_project: bool = False,
    skip_env: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Args:
        profile: Profile name to load. Can also be set via ROLECALL_PROFILE.
        project_path: Starting path to search for project config. Defaults to cwd.
        skip_project: Skip loading project configuration.
        skip_env: Skip environment variable overrides.

    Returns:
        Merged and validated Config object.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    config_dict = Config().model_dump()

    global_path = get_global_config_path()
    if global_path.exists():
        config_dict = deep_merge(config_dict, load_yaml_file(global_path))

    profile_name = (
        profile
        or os.environ.get("ROLECALL_PROFILE")
        or get_nested_value(config_dict, "general.default_profile")
    )
    if profile_name:
        profile_path = get_profile_path(profile_name)
        if profile_path.exists():
            config_dict = deep_merge(config_dict, load_yaml_file(profile_path))
        else:
            logger.warning(f"Profile '{profile_name}' not found at {profile_path}")

    if not skip_project:
        project_config_path = find_project_config(project_path)
        if project_config_path:
            config_dict = deep_merge(config_dict, load_yaml_file(project_config_path))

    if not skip_env:
        config_dict = apply_env_overrides(config_dict)

    try:
        return Config.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


# Singleton for cached config
_cached_config: Config | None = None


def get_config(reload: bool = False) -> Config:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from disk.

    Returns:
        Config instance.
    """
    global _cached_config

    if _cached_config is None or reload:
        _cached_config = load_config()

    return _cached_config


def set_config(config: Config) -> None:
    """Install an explicit configuration as the cached instance."""
    global _cached_config
    _cached_config = config


def clear_config_cache() -> None:
    """Clear the cached configuration."""
    global _cached_config
    _cached_config = None
