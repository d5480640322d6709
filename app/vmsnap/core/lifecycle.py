"""Backup lifecycle decisions for a single domain.

Decides, around each backup run, whether stale change-tracking state must
be purged first (a new period began) and whether the previous period's
backup directory can be pruned afterwards.

Backups are filed under ``<backup_root>/<domain>/<bucket name>``.
"""

import logging
import os
from collections.abc import Callable
from datetime import date
from pathlib import Path

from vmsnap.adapters.base import FilesystemProbe
from vmsnap.adapters.filesystem import LocalFilesystem
from vmsnap.core.period import elapsed_days, resolve_bucket
from vmsnap.models.frequency import Frequency, InvalidFrequencyError, PeriodBucket

_module_logger = logging.getLogger(__name__)


def bucket_path(backup_root: str | Path, domain: str, bucket: PeriodBucket) -> str:
    """Return the directory a bucket's backups for a domain live in."""
    return os.path.join(str(backup_root), domain, bucket.name)


class LifecycleEngine:
    """Per-domain cleanup and pruning decisions.

    The logger and the clock are injected so date-dependent behavior can
    be tested deterministically; every decision also accepts an explicit
    reference date which takes precedence over the clock.

    Args:
        filesystem: Probe used for existence checks and removal.
        logger: Logger to report decisions to. Defaults to the module logger.
        clock: Returns today's date when no reference date is passed.

    Example:
        >>> engine = LifecycleEngine(LocalFilesystem())
        >>> if engine.needs_pruning("vm1", "month", True, "/backups"):
        ...     engine.prune("vm1", "month", "/backups")
    """

    def __init__(
        self,
        filesystem: FilesystemProbe | None = None,
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._fs = filesystem or LocalFilesystem()
        self._logger = logger or _module_logger
        self._clock = clock

    def current_bucket_path(
        self,
        domain: str,
        frequency: Frequency | str,
        backup_root: str | Path,
        reference: date | None = None,
    ) -> str:
        """Return the current period's backup directory for a domain.

        Raises:
            InvalidFrequencyError: If the frequency is unknown.
        """
        bucket = resolve_bucket(frequency, self._reference(reference))
        return bucket_path(backup_root, domain, bucket)

    def previous_bucket_path(
        self,
        domain: str,
        frequency: Frequency | str,
        backup_root: str | Path,
        reference: date | None = None,
    ) -> str:
        """Return the previous period's backup directory for a domain.

        Raises:
            InvalidFrequencyError: If the frequency is unknown.
        """
        bucket = resolve_bucket(frequency, self._reference(reference), previous=True)
        return bucket_path(backup_root, domain, bucket)

    def needs_pre_backup_cleanup(
        self,
        domain: str,
        frequency: Frequency | str,
        backup_root: str | Path,
        reference: date | None = None,
    ) -> bool:
        """Decide whether checkpoints and bitmaps must be purged before backing up.

        A missing current-period directory means a period boundary was
        crossed since the last run, so the existing incremental chain
        belongs to the previous period. Once the backup tool creates the
        directory, later runs in the same period skip the cleanup.

        Args:
            domain: Domain about to be backed up.
            frequency: Grouping frequency.
            backup_root: Root of all backups.
            reference: Date to decide for. Defaults to the clock.

        Returns:
            True if the current period's directory does not exist yet.
            False when the frequency is invalid (a warning is logged).
        """
        try:
            current = self.current_bucket_path(domain, frequency, backup_root, reference)
        except InvalidFrequencyError:
            self._logger.warning("Invalid frequency: %s. Period cleanup disabled", frequency)
            return False

        if self._fs.exists(current):
            return False

        self._logger.info("Creating a new backup directory, running bitmap cleanup")
        return True

    def needs_pruning(
        self,
        domain: str,
        frequency: Frequency | str,
        prune_enabled: bool,
        backup_root: str | Path,
        reference: date | None = None,
    ) -> bool:
        """Decide whether the previous period's backups should be removed.

        Pruning only happens once the current period is established: the
        number of days elapsed since it started must reach the frequency's
        threshold (month 15, quarter 45, bi-annual 90, year 180).

        Args:
            domain: Domain that was just backed up.
            frequency: Grouping frequency.
            prune_enabled: Whether pruning was requested at all.
            backup_root: Root of all backups.
            reference: Date to decide for. Defaults to the clock.

        Returns:
            True if the previous period's directory exists and the
            threshold is reached. False when pruning is disabled or the
            frequency is invalid (a warning is logged).
        """
        if not prune_enabled:
            return False

        try:
            parsed = Frequency.parse(frequency)
        except InvalidFrequencyError:
            self._logger.warning("Invalid frequency: %s. Pruning disabled", frequency)
            return False

        ref = self._reference(reference)
        previous = self.previous_bucket_path(domain, parsed, backup_root, ref)

        if not self._fs.exists(previous):
            return False

        elapsed = elapsed_days(parsed, ref)
        if elapsed < parsed.prune_threshold_days:
            self._logger.debug(
                "%s: %d of %d days into the current period, keeping %s",
                domain,
                elapsed,
                parsed.prune_threshold_days,
                previous,
            )
            return False

        return True

    def prune(
        self,
        domain: str,
        frequency: Frequency | str,
        backup_root: str | Path,
        reference: date | None = None,
    ) -> str:
        """Remove the previous period's backup directory for a domain.

        Only call this after needs_pruning() returned True; the deletion
        is irreversible.

        Returns:
            The directory that was removed.

        Raises:
            InvalidFrequencyError: If the frequency is unknown.
            OSError: If the directory cannot be removed.
        """
        previous = self.previous_bucket_path(domain, frequency, backup_root, reference)

        self._logger.info("Middle of the current backup window, removing %s", previous)
        self._fs.remove_tree(previous)
        return previous

    def _reference(self, reference: date | None) -> date:
        return reference if reference is not None else self._clock()
