"""Configuration loading and saving for vmsnap."""

from vmsnap.configs.config import (
    ConfigError,
    ConfigParseError,
    VmsnapConfig,
    config_to_dict,
    load_config,
    save_config,
)

__all__ = [
    "ConfigError",
    "ConfigParseError",
    "VmsnapConfig",
    "config_to_dict",
    "load_config",
    "save_config",
]
