"""
Configuration loading for the ACV mix service.

Configuration comes from, in priority order: an explicit file path, the
``ACV_MIX_*`` environment variables, ``config.json`` in the working
directory (or its ``config/`` subdirectory), and finally built-in defaults.
"""

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .models import MixConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "ACV_MIX_CONFIG_FILE"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def _parse_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


# env var -> (config section, field, parser)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "ACV_MIX_DATA_DIR": ("paths", "data_dir", str),
    "ACV_MIX_HOST": ("server", "host", str),
    "ACV_MIX_PORT": ("server", "port", int),
    "ALLOWED_ORIGINS": ("server", "allowed_origins", _parse_origins),
    "ACV_MIX_PARALLEL": ("processing", "parallel", _parse_bool),
    "ACV_MIX_MAX_WORKERS": ("processing", "max_workers", int),
    "ACV_MIX_LOG_LEVEL": ("logging", "level", str),
}


def default_config_paths(config_name: str = "config.json") -> list[Path]:
    cwd = Path.cwd()
    return [cwd / config_name, cwd / "config" / config_name]


def load_config(
    config_path: str | Path | None = None, config_name: str = "config.json"
) -> MixConfig:
    """
    Load configuration from a file.

    Args:
        config_path: Config file, or a directory holding ``config_name``.
            When omitted the default locations are searched.
        config_name: File name to look for in directories

    Raises:
        FileNotFoundError: If no configuration file is found
        ValueError: If the file is not valid JSON or fails validation
    """
    if config_path is None:
        candidates = default_config_paths(config_name)
        path = next((p for p in candidates if p.exists()), None)
        if path is None:
            raise FileNotFoundError(
                f"No {config_name} in {', '.join(str(p) for p in candidates)}"
            )
    else:
        path = Path(config_path)
        if path.is_dir():
            path = path / config_name

    return MixConfig.from_file(path)


def create_default_config(output_path: str | Path) -> MixConfig:
    """Write the built-in defaults to ``output_path`` and return them."""
    config = MixConfig()
    config.to_file(output_path)
    return config


def get_config_from_env() -> MixConfig | None:
    """
    Build configuration from environment variables.

    ``ACV_MIX_CONFIG_FILE`` names a config file and wins over the individual
    variables. Otherwise each variable in ``ENV_OVERRIDES`` replaces one
    default.

    Returns:
        MixConfig, or None when none of the variables are set

    Raises:
        ValueError: If a variable cannot be parsed or fails validation
    """
    config_file = os.getenv(CONFIG_FILE_ENV)
    if config_file:
        return load_config(config_file)

    overrides = {name: os.getenv(name) for name in ENV_OVERRIDES}
    if not any(overrides.values()):
        return None

    data = MixConfig().model_dump(by_alias=True)
    try:
        for name, raw in overrides.items():
            if raw:
                section, field, parse = ENV_OVERRIDES[name]
                data[section][field] = parse(raw)
        return MixConfig.model_validate(data)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid environment variable configuration: {e}") from e


def load_config_with_fallback(config_path: str | Path | None = None) -> MixConfig:
    """
    Load configuration, falling back through the sources in priority order.

    An explicit path that does not exist, and environment variables that
    do not validate, are logged and skipped rather than raised.
    """
    if config_path:
        try:
            return load_config(config_path)
        except FileNotFoundError:
            logger.warning(f"Configuration file not found: {config_path}")

    try:
        env_config = get_config_from_env()
    except (ValueError, FileNotFoundError) as e:
        logger.warning(f"Ignoring environment configuration: {e}")
    else:
        if env_config is not None:
            return env_config

    try:
        return load_config()
    except FileNotFoundError:
        logger.info("No configuration file found, using defaults")
        return MixConfig()
