"""Status models for domain consistency reporting.

This module defines the data structures produced by a status query:
per-disk bitmap listings, on-disk backup directory statistics, and the
per-domain status record that aggregates them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OverallStatus(str, Enum):
    """Overall backup health of a domain.

    Attributes:
        OK: Checkpoint, bitmap and marker file counts agree.
        INCONSISTENT: At least one count disagrees with the checkpoint count.
    """

    OK = "OK"
    INCONSISTENT = "INCONSISTENT"


@dataclass(frozen=True, slots=True)
class BackupDirectoryStats:
    """Snapshot of one domain's current-period backup directory.

    Attributes:
        path: Directory that was inspected.
        total_files: Number of regular files found (markers included).
        total_size: Total size of those files in bytes.
        marker_files: Number of checkpoint marker files in the marker subdirectory.
    """

    path: str
    total_files: int = 0
    total_size: int = 0
    marker_files: int = 0

    @classmethod
    def empty(cls, path: str) -> "BackupDirectoryStats":
        """Create a zeroed record for a directory that holds no backups yet."""
        return cls(path=path)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/YAML serialization."""
        return {
            "path": self.path,
            "total_files": self.total_files,
            "total_size": self.total_size,
            "marker_files": self.marker_files,
        }


@dataclass(frozen=True, slots=True)
class DiskStatus:
    """Bitmap listing for one disk of a domain.

    Attributes:
        disk: Disk alias as reported by the hypervisor (e.g. 'vda').
        bitmaps: Names of the change-tracking bitmaps on the disk.
        path: Image file backing the disk (if known).
        virtual_size: Virtual size in bytes (if known).
        actual_size: Allocated size on the host in bytes (if known).
    """

    disk: str
    bitmaps: tuple[str, ...] = ()
    path: str | None = None
    virtual_size: int | None = None
    actual_size: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/YAML serialization."""
        return {
            "disk": self.disk,
            "path": self.path,
            "virtual_size": self.virtual_size,
            "actual_size": self.actual_size,
            "bitmaps": list(self.bitmaps),
        }


@dataclass(frozen=True, slots=True)
class CountMismatch:
    """First count disagreement found while evaluating a domain.

    Attributes:
        checkpoints: Number of checkpoints on the domain.
        found: Number of bitmaps (or marker files) that was compared against it.
        disk: Disk alias whose bitmaps disagreed, or None for the marker file check.
    """

    checkpoints: int
    found: int
    disk: str | None = None

    @property
    def source(self) -> str:
        """Return what was compared against the checkpoint count."""
        return "bitmaps" if self.disk is not None else "marker_files"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/YAML serialization."""
        return {
            "source": self.source,
            "disk": self.disk,
            "checkpoints": self.checkpoints,
            "found": self.found,
        }


@dataclass(frozen=True, slots=True)
class StatusRecord:
    """Consistency verdict for a single domain.

    Attributes:
        checkpoints: Checkpoint names currently defined on the domain.
        disks: Bitmap listing per disk.
        overall_status: OK or INCONSISTENT.
        backup_directory_stats: On-disk statistics, when a backup root was given.
        mismatch: The first disagreement that made the domain inconsistent.
    """

    checkpoints: tuple[str, ...]
    disks: tuple[DiskStatus, ...] = field(default_factory=tuple)
    overall_status: OverallStatus = OverallStatus.OK
    backup_directory_stats: BackupDirectoryStats | None = None
    mismatch: CountMismatch | None = None

    @property
    def is_ok(self) -> bool:
        """Check if the domain is in a consistent backup state."""
        return self.overall_status == OverallStatus.OK

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/YAML serialization."""
        result: dict[str, Any] = {
            "checkpoints": list(self.checkpoints),
            "disks": [disk.to_dict() for disk in self.disks],
            "overall_status": self.overall_status.value,
        }
        if self.backup_directory_stats is not None:
            result["backup_directory_stats"] = self.backup_directory_stats.to_dict()
        if self.mismatch is not None:
            result["mismatch"] = self.mismatch.to_dict()
        return result


def statuses_to_dict(statuses: dict[str, StatusRecord]) -> dict[str, dict[str, Any]]:
    """Convert a domain -> StatusRecord map into plain serializable data.

    Args:
        statuses: Status records keyed by domain name.

    Returns:
        Dictionary keyed by domain with each record's dictionary form.
    """
    return {domain: record.to_dict() for domain, record in statuses.items()}
