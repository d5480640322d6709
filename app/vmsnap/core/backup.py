"""Backup orchestration across domains.

Runs the per-domain lifecycle in order: purge stale change-tracking state
when a new period began, back up into the current period bucket, then
prune the previous period once the current one is established.

Domains are processed one at a time. A failure in one domain is recorded
in its outcome and never stops the next domain.
"""

import logging
import os
from collections.abc import Callable
from datetime import date
from pathlib import Path

from vmsnap.adapters.base import BackupRunner, Hypervisor
from vmsnap.core.errors import AdapterError, DomainError, OutputDirError, VmsnapError
from vmsnap.core.lifecycle import LifecycleEngine
from vmsnap.core.scrub import Scrubber
from vmsnap.models.frequency import Frequency, InvalidFrequencyError
from vmsnap.models.result import DomainOutcome, ItemResult

logger = logging.getLogger(__name__)


class BackupOrchestrator:
    """Drives backups for a list of domains.

    Args:
        hypervisor: Hypervisor adapter.
        runner: Backup tool runner.
        lifecycle: Cleanup and pruning decisions.
        scrubber: Removes checkpoints and bitmaps when a period rolls over.
        clock: Returns today's date when no reference date is passed.
    """

    def __init__(
        self,
        hypervisor: Hypervisor,
        runner: BackupRunner,
        lifecycle: LifecycleEngine,
        scrubber: Scrubber,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._hypervisor = hypervisor
        self._runner = runner
        self._lifecycle = lifecycle
        self._scrubber = scrubber
        self._clock = clock

    def run(
        self,
        domains: list[str],
        output_dir: str | Path | None,
        frequency: Frequency | str = Frequency.MONTH,
        *,
        prune: bool = False,
        raw: bool = False,
        reference: date | None = None,
    ) -> list[DomainOutcome]:
        """Back up every domain in order.

        Args:
            domains: Domains to back up.
            output_dir: Root of all backups.
            frequency: Grouping frequency for period buckets.
            prune: Remove the previous period once the threshold is reached.
            raw: Include raw disks in the backup.
            reference: Date deciding the period. Defaults to the clock,
                read once so every domain lands in the same bucket.

        An unknown frequency is not fatal: a warning is logged, backups go
        into monthly buckets and neither period cleanup nor pruning runs.

        Returns:
            One DomainOutcome per domain that exists on the host.

        Raises:
            OutputDirError: If no output directory was given.
            DomainError: If the domain list is empty.
        """
        if not output_dir:
            msg = "No output directory specified"
            raise OutputDirError(msg)
        if not domains:
            msg = "No domains specified"
            raise DomainError(msg)

        cleanup = True
        try:
            parsed = Frequency.parse(frequency)
        except InvalidFrequencyError:
            logger.warning("Invalid frequency: %s. Pruning disabled, grouping by month", frequency)
            parsed = Frequency.MONTH
            cleanup = prune = False

        ref = reference if reference is not None else self._clock()
        backup_root = str(output_dir)

        outcomes: list[DomainOutcome] = []
        for domain in domains:
            if not self._hypervisor.domain_exists(domain):
                logger.warning("%s does not exist", domain)
                continue
            outcome = self.backup_domain(
                domain, backup_root, parsed, ref, prune=prune, raw=raw, cleanup=cleanup
            )
            outcomes.append(outcome)

        return outcomes

    def backup_domain(
        self,
        domain: str,
        backup_root: str,
        frequency: Frequency,
        reference: date,
        *,
        prune: bool = False,
        raw: bool = False,
        cleanup: bool = True,
    ) -> DomainOutcome:
        """Run the full lifecycle for one domain.

        Args:
            cleanup: Purge checkpoints and bitmaps when a new period begins.

        Returns:
            DomainOutcome describing what happened. Errors are captured
            in the outcome rather than raised.
        """
        cleaned: list[ItemResult] = []
        exit_code: int | None = None
        pruned: str | None = None

        try:
            if cleanup and self._lifecycle.needs_pre_backup_cleanup(
                domain, frequency, backup_root, reference
            ):
                cleaned.extend(self._scrubber.scrub(domain, "*"))

            output_path = self._lifecycle.current_bucket_path(
                domain, frequency, backup_root, reference
            )
            offline = not self._hypervisor.is_running(domain)
            if offline:
                logger.info("%s is not running, backing up offline", domain)

            exit_code = self._runner.run(domain, output_path, raw=raw, offline=offline)
            if exit_code != 0:
                return DomainOutcome(
                    domain=domain,
                    cleaned=tuple(cleaned),
                    exit_code=exit_code,
                    error=f"Backup exited with code {exit_code}",
                )

            if self._lifecycle.needs_pruning(domain, frequency, prune, backup_root, reference):
                pruned = self._lifecycle.prune(domain, frequency, backup_root, reference)
        except (VmsnapError, AdapterError, InvalidFrequencyError, OSError) as e:
            logger.error("Backup of %s failed: %s", domain, e)
            return DomainOutcome(
                domain=domain,
                backed_up=exit_code == 0,
                cleaned=tuple(cleaned),
                pruned=pruned,
                exit_code=exit_code,
                error=str(e),
            )

        logger.info("Backup of %s finished in %s", domain, os.path.join(backup_root, domain))
        return DomainOutcome(
            domain=domain,
            backed_up=True,
            cleaned=tuple(cleaned),
            pruned=pruned,
            exit_code=exit_code,
        )
