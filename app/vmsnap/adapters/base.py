"""Abstract interfaces for the external systems vmsnap drives.

The lifecycle and consistency logic only talks to these interfaces, so
tests can substitute fakes and the concrete adapters stay thin: command
construction and output parsing.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from vmsnap.utils.shell import command_exists


@dataclass(frozen=True, slots=True)
class EntryStat:
    """Minimal stat information for a filesystem entry.

    Attributes:
        size: Size in bytes.
        is_directory: True if the entry is a directory.
    """

    size: int
    is_directory: bool


@dataclass(frozen=True, slots=True)
class DiskInfo:
    """Image information reported by the disk-image tool.

    Attributes:
        path: Image file path.
        format: Image format (e.g. 'qcow2', 'raw').
        virtual_size: Virtual size in bytes.
        actual_size: Allocated size on the host in bytes.
        bitmaps: Names of the persistent bitmaps stored in the image.
    """

    path: str
    format: str
    virtual_size: int | None = None
    actual_size: int | None = None
    bitmaps: tuple[str, ...] = field(default_factory=tuple)


class FilesystemProbe(ABC):
    """Filesystem operations needed by the lifecycle and stats logic."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if the path exists."""

    @abstractmethod
    def remove_tree(self, path: str) -> None:
        """Recursively remove a directory tree."""

    @abstractmethod
    def list_dir(self, path: str) -> list[str]:
        """Return the entry names of a directory, sorted."""

    @abstractmethod
    def stat(self, path: str) -> EntryStat:
        """Return size and directory flag for a path (following symlinks)."""


class Hypervisor(ABC):
    """Hypervisor management tool (virsh).

    Example:
        >>> hypervisor = VirshAdapter()
        >>> if hypervisor.is_available():
        ...     for checkpoint in hypervisor.list_checkpoints("vm1"):
        ...         print(checkpoint)
    """

    @property
    @abstractmethod
    def command(self) -> str:
        """Return the executable name of the tool."""

    def is_available(self) -> bool:
        """Check if the tool is installed."""
        return command_exists(self.command)

    @abstractmethod
    def domain_exists(self, domain: str) -> bool:
        """Check if a domain is defined on the host."""

    @abstractmethod
    def is_running(self, domain: str) -> bool:
        """Check if a domain is currently running."""

    @abstractmethod
    def list_domains(self) -> list[str]:
        """List all domains defined on the host."""

    @abstractmethod
    def list_checkpoints(self, domain: str) -> list[str]:
        """List checkpoint names of a domain."""

    @abstractmethod
    def delete_checkpoint(self, domain: str, checkpoint: str) -> None:
        """Delete a checkpoint's metadata from a domain."""

    @abstractmethod
    def list_disks(self, domain: str) -> dict[str, str]:
        """Return a mapping of disk alias to image path."""


class DiskImageTool(ABC):
    """Disk-image utility (qemu-img)."""

    @property
    @abstractmethod
    def command(self) -> str:
        """Return the executable name of the tool."""

    def is_available(self) -> bool:
        """Check if the tool is installed."""
        return command_exists(self.command)

    @abstractmethod
    def disk_info(self, disk_path: str) -> DiskInfo:
        """Return image information, including bitmap names."""

    def list_bitmaps(self, disk_path: str) -> list[str]:
        """List bitmap names stored in an image."""
        return list(self.disk_info(disk_path).bitmaps)

    @abstractmethod
    def remove_bitmap(self, disk_path: str, bitmap: str) -> None:
        """Remove a bitmap from an image."""


class BackupRunner(ABC):
    """Backup-execution tool (virtnbdbackup)."""

    @property
    @abstractmethod
    def command(self) -> str:
        """Return the executable name of the tool."""

    def is_available(self) -> bool:
        """Check if the tool is installed."""
        return command_exists(self.command)

    @abstractmethod
    def run(
        self, domain: str, output_path: str, *, raw: bool = False, offline: bool = False
    ) -> int:
        """Run a backup of a domain into output_path.

        Returns:
            Exit status of the backup tool. Non-zero exits are reported,
            never raised.
        """
