"""vmsnap configuration and settings.

This module provides the configuration model and I/O functions for the
defaults every command falls back to when a flag is not given on the
command line.

Configuration is stored in ~/.config/vmsnap/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vmsnap.core.lock import DEFAULT_RETRIES, DEFAULT_RETRY_WAIT
from vmsnap.core.paths import get_config_path
from vmsnap.models.frequency import Frequency

logger = logging.getLogger(__name__)


class VmsnapConfig(BaseModel):
    """Defaults for backup, status and scrub commands.

    Attributes:
        output_dir: Root directory for backups.
        group_by: Frequency used to group backups into period buckets.
        prune: Prune the previous period after a backup.
        raw: Include raw disks in backups.
        lock_retries: Attempts to acquire the process lock after the first.
        lock_retry_wait: Seconds between lock attempts.
        lock_path: Lock file path (None = <tmpdir>/vmsnap.lock).
    """

    model_config = ConfigDict(extra="forbid")

    output_dir: Annotated[
        Path | None,
        Field(description="Root directory for backups"),
    ] = None
    group_by: Annotated[
        Frequency,
        Field(description="Backup grouping frequency"),
    ] = Frequency.MONTH
    prune: Annotated[
        bool,
        Field(description="Prune the previous period after backing up"),
    ] = False
    raw: Annotated[
        bool,
        Field(description="Include raw disks in backups"),
    ] = False
    lock_retries: Annotated[
        int,
        Field(ge=0, le=1000, description="Lock acquisition retries"),
    ] = DEFAULT_RETRIES
    lock_retry_wait: Annotated[
        float,
        Field(ge=0, le=3600, description="Seconds between lock retries"),
    ] = DEFAULT_RETRY_WAIT
    lock_path: Annotated[
        Path | None,
        Field(description="Lock file path (None = system temp dir)"),
    ] = None

    @field_validator("group_by", mode="before")
    @classmethod
    def parse_group_by(cls, v: object) -> object:
        """Accept frequency strings case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> VmsnapConfig:
    """Load configuration from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Path to the config file. If None, uses default config path.

    Returns:
        Validated VmsnapConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return VmsnapConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return VmsnapConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: VmsnapConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The VmsnapConfig object to save.
        path: Path to save the config. If None, uses default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: VmsnapConfig) -> dict[str, object]:
    """Convert VmsnapConfig to a dictionary for TOML serialization.

    TOML has no null, so unset paths are left out.

    Args:
        config: The VmsnapConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {
        "group_by": config.group_by.value,
        "prune": config.prune,
        "raw": config.raw,
        "lock_retries": config.lock_retries,
        "lock_retry_wait": config.lock_retry_wait,
    }

    if config.output_dir is not None:
        result["output_dir"] = str(config.output_dir)

    if config.lock_path is not None:
        result["lock_path"] = str(config.lock_path)

    return result
