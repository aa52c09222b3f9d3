"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path

from pydantic import ValidationError

from fileseek.config.defaults import (
    DEFAULT_CONFIG_TOML,
    ENV_CASE_SENSITIVE,
    ENV_LOG_LEVEL,
    ENV_NO_CACHE,
    ENV_NO_FUZZY,
    TRUTHY,
    get_config_path,
)
from fileseek.config.schema import FileSeekConfig
from fileseek.exceptions import ConfigError, ConfigValidationError


def load_config(
    config_path: Path | None = None,
    *,
    create_if_missing: bool = False,
) -> FileSeekConfig:
    """Load configuration from a TOML file and environment variables.

    Args:
        config_path: Path to config file. If None, uses default.
        create_if_missing: Write the default config if the file doesn't exist.

    Returns:
        Loaded and validated configuration.

    Raises:
        ConfigError: If configuration cannot be read.
        ConfigValidationError: If configuration is invalid.
    """
    path = config_path or get_config_path()

    if not path.exists():
        if not create_if_missing:
            return apply_env_overrides(FileSeekConfig())
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(DEFAULT_CONFIG_TOML)
        except OSError as e:
            raise ConfigError(f"Failed to create config at {path}: {e}") from e

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    try:
        config = FileSeekConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}") from e

    return apply_env_overrides(config)


def apply_env_overrides(config: FileSeekConfig) -> FileSeekConfig:
    """Apply environment variable overrides to configuration."""
    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        config.logging.level = log_level.upper()

    if _env_flag(ENV_NO_CACHE):
        config.cache.enabled = False

    if _env_flag(ENV_CASE_SENSITIVE):
        config.search.case_sensitive = True

    if _env_flag(ENV_NO_FUZZY):
        config.search.fuzzy_enabled = False
        config.search.fuzzy_near_enabled = False

    return config


def _env_flag(name: str) -> bool:
    value = os.environ.get(name)
    return bool(value) and value.strip().lower() in TRUTHY
