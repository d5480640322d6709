"""Consistency evaluation of a domain's backup state.

A domain is consistent when its checkpoint count equals the bitmap count
on every disk and, when a backup root is known, the number of marker files
in the current period's backup directory. Any disagreement is reported as
INCONSISTENT; it is a health signal, not an error.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from pathlib import Path

from vmsnap.adapters.base import DiskImageTool, FilesystemProbe, Hypervisor
from vmsnap.adapters.filesystem import LocalFilesystem
from vmsnap.core.dirstats import MARKER_SUBDIR, collect
from vmsnap.core.errors import AdapterError
from vmsnap.core.lifecycle import bucket_path
from vmsnap.core.period import resolve_bucket
from vmsnap.models.frequency import Frequency, InvalidFrequencyError
from vmsnap.models.status import (
    BackupDirectoryStats,
    CountMismatch,
    DiskStatus,
    OverallStatus,
    StatusRecord,
)

_module_logger = logging.getLogger(__name__)


def evaluate(
    checkpoints: Sequence[str],
    disks: Iterable[DiskStatus],
    directory_stats: BackupDirectoryStats | None = None,
) -> StatusRecord:
    """Compute the status record for one domain.

    Disks are compared in order and the first bitmap count that differs
    from the checkpoint count decides the verdict; later disks are not
    examined. When directory statistics are given and all disks agree,
    the marker file count is checked as well.

    Args:
        checkpoints: Checkpoint names defined on the domain.
        disks: Bitmap listing per disk.
        directory_stats: Statistics of the current period's backup directory.

    Returns:
        StatusRecord with the verdict and the first mismatch (if any).
    """
    disk_list = tuple(disks)
    expected = len(checkpoints)
    mismatch: CountMismatch | None = None

    for disk in disk_list:
        if len(disk.bitmaps) != expected:
            mismatch = CountMismatch(checkpoints=expected, found=len(disk.bitmaps), disk=disk.disk)
            break

    if (
        mismatch is None
        and directory_stats is not None
        and directory_stats.marker_files != expected
    ):
        mismatch = CountMismatch(checkpoints=expected, found=directory_stats.marker_files)

    return StatusRecord(
        checkpoints=tuple(checkpoints),
        disks=disk_list,
        overall_status=OverallStatus.OK if mismatch is None else OverallStatus.INCONSISTENT,
        backup_directory_stats=directory_stats,
        mismatch=mismatch,
    )


class StatusCollector:
    """Gathers checkpoint, bitmap and directory facts and evaluates them.

    Performs no writes, so it is safe to run at any time.

    Args:
        hypervisor: Source of checkpoints and disks.
        disk_image: Source of per-disk bitmaps and sizes.
        filesystem: Probe for backup directory statistics.
        logger: Logger for skipped disks. Defaults to the module logger.
        clock: Returns today's date when no reference date is passed.
    """

    def __init__(
        self,
        hypervisor: Hypervisor,
        disk_image: DiskImageTool,
        filesystem: FilesystemProbe | None = None,
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._hypervisor = hypervisor
        self._disk_image = disk_image
        self._fs = filesystem or LocalFilesystem()
        self._logger = logger or _module_logger
        self._clock = clock

    def disk_statuses(self, domain: str) -> list[DiskStatus]:
        """List bitmaps for every disk of a domain.

        Disks whose image cannot be inspected are skipped with a warning.

        Raises:
            AdapterError: If the domain's disks cannot be listed at all.
        """
        statuses: list[DiskStatus] = []

        for alias, path in self._hypervisor.list_disks(domain).items():
            try:
                info = self._disk_image.disk_info(path)
            except AdapterError as e:
                self._logger.warning("Skipping disk %s of %s: %s", alias, domain, e)
                continue

            statuses.append(
                DiskStatus(
                    disk=alias,
                    bitmaps=info.bitmaps,
                    path=path,
                    virtual_size=info.virtual_size,
                    actual_size=info.actual_size,
                )
            )

        return statuses

    def domain_status(
        self,
        domain: str,
        backup_root: str | Path | None = None,
        frequency: Frequency | str = Frequency.MONTH,
        reference: date | None = None,
    ) -> StatusRecord:
        """Evaluate one domain.

        Args:
            domain: Domain to evaluate.
            backup_root: Root of all backups; enables the marker file check.
            frequency: Grouping frequency used to locate the current bucket.
                An unknown frequency falls back to month with a warning.
            reference: Date whose bucket is inspected. Defaults to the clock.

        Raises:
            AdapterError: If checkpoints or disks cannot be listed.
            RecursionLimitError: If the backup directory is nested too deeply.
        """
        checkpoints = self._hypervisor.list_checkpoints(domain)
        disks = self.disk_statuses(domain)

        stats: BackupDirectoryStats | None = None
        if backup_root:
            ref = reference if reference is not None else self._clock()
            bucket = resolve_bucket(self._frequency(frequency), ref)
            directory = bucket_path(backup_root, domain, bucket)
            stats = collect(directory, MARKER_SUBDIR, self._fs)

        return evaluate(checkpoints, disks, stats)

    def collect_statuses(
        self,
        domains: Iterable[str],
        backup_root: str | Path | None = None,
        frequency: Frequency | str = Frequency.MONTH,
        reference: date | None = None,
    ) -> dict[str, StatusRecord]:
        """Evaluate domains one at a time, in the given order.

        Returns:
            Status records keyed by domain, in evaluation order.
        """
        if backup_root:
            frequency = self._frequency(frequency)
        return {
            domain: self.domain_status(domain, backup_root, frequency, reference)
            for domain in domains
        }

    def _frequency(self, frequency: Frequency | str) -> Frequency:
        try:
            return Frequency.parse(frequency)
        except InvalidFrequencyError:
            self._logger.warning("Invalid frequency: %s. Grouping by month", frequency)
            return Frequency.MONTH
