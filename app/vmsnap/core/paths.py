"""XDG-compliant path management for vmsnap.

This module provides standardized paths for the configuration file and the
process lock file.

XDG defaults:
- Config: ~/.config/vmsnap/
"""

import os
import tempfile
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "vmsnap"

LOCK_FILE_NAME = "vmsnap.lock"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/vmsnap/ (or XDG_CONFIG_HOME/vmsnap/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/vmsnap/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_lock_path() -> Path:
    """Get the process lock file path.

    The lock lives in the system temporary directory so that every user
    invoking vmsnap on the host contends for the same file.

    Returns:
        Path to <tmpdir>/vmsnap.lock.
    """
    return Path(tempfile.gettempdir()) / LOCK_FILE_NAME
