"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeVar

import typer

from vmsnap.adapters import LocalFilesystem, QemuImgAdapter, VirshAdapter, VirtnbdbackupRunner
from vmsnap.adapters.base import BackupRunner, DiskImageTool, FilesystemProbe, Hypervisor
from vmsnap.configs.config import ConfigError, VmsnapConfig, load_config
from vmsnap.core.dependencies import check_dependencies
from vmsnap.core.errors import AdapterError, ExitCode, VmsnapError
from vmsnap.core.lock import ProcessLock
from vmsnap.models.frequency import InvalidFrequencyError
from vmsnap.utils.domains import parse_domains
from vmsnap.utils.formatting import print_error

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output format options for status."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


@dataclass(frozen=True, slots=True)
class Toolset:
    """The adapters a command works through."""

    hypervisor: Hypervisor
    disk_image: DiskImageTool
    runner: BackupRunner
    filesystem: FilesystemProbe


def get_toolset() -> Toolset:
    """Create the production adapters.

    Returns:
        Toolset backed by virsh, qemu-img, virtnbdbackup and the local filesystem.
    """
    return Toolset(
        hypervisor=VirshAdapter(),
        disk_image=QemuImgAdapter(),
        runner=VirtnbdbackupRunner(),
        filesystem=LocalFilesystem(),
    )


def get_config(ctx: typer.Context) -> VmsnapConfig:
    """Load the configuration selected by the global --config option.

    Args:
        ctx: Typer context carrying the main callback's options.

    Returns:
        Loaded configuration (defaults when no file exists).

    Raises:
        ConfigError: If the config file is invalid.
    """
    obj = ctx.find_root().obj or {}
    path: Path | None = obj.get("config_path")
    return load_config(path)


def resolve_domains(param: str | None, hypervisor: Hypervisor) -> list[str]:
    """Expand a --domains value against the domains defined on the host.

    Raises:
        DomainError: If nothing was specified or nothing matched.
    """
    return parse_domains(param, hypervisor.list_domains)


def run_locked(config: VmsnapConfig, action: Callable[[], T]) -> T:
    """Run an action after the dependency check, under the process lock.

    The lock is released exactly once, whether the action succeeds or not.

    Args:
        config: Configuration providing the lock settings.
        action: Work to run while holding the lock.

    Returns:
        Whatever the action returns.

    Raises:
        DependencyError: If a required program is missing.
        LockAcquireError: If the lock could not be acquired.
        LockReleaseError: If the lock could not be released.
    """
    check_dependencies()

    lock = ProcessLock(config.lock_path, config.lock_retries, config.lock_retry_wait)
    lock.acquire()
    try:
        return action()
    finally:
        lock.release()


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Translate vmsnap errors into a printed message and an exit code.

    VmsnapError subclasses exit with their own code; everything else a
    command can reasonably hit exits with the generic failure code.
    """
    try:
        yield
    except VmsnapError as e:
        print_error(str(e))
        raise typer.Exit(code=int(e.exit_code)) from e
    except (AdapterError, ConfigError, InvalidFrequencyError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=int(ExitCode.MAIN)) from e
