"""virtnbdbackup backup runner.

Spawns the backup tool for one domain and streams its output to the
logger. A failing backup is logged and its exit status returned; it is
never raised, so the caller can move on to the next domain.
"""

import logging

from vmsnap.adapters.base import BackupRunner
from vmsnap.utils.shell import run_streaming

logger = logging.getLogger(__name__)

BACKUP = "virtnbdbackup"


class VirtnbdbackupRunner(BackupRunner):
    """Backup runner using virtnbdbackup in automatic (full/incremental) mode."""

    @property
    def command(self) -> str:
        """Return the virtnbdbackup executable name."""
        return BACKUP

    def build_args(
        self,
        domain: str,
        output_path: str,
        *,
        raw: bool = False,
        offline: bool = False,
    ) -> list[str]:
        """Build the virtnbdbackup command line.

        Args:
            domain: Domain to back up.
            output_path: Target directory (the current period bucket).
            raw: Back up raw disks as well.
            offline: Start an offline domain paused so a checkpoint can be taken.

        Returns:
            Full argument list including the executable.
        """
        args = [BACKUP]
        if offline:
            args.append("-S")
        args.extend(["--noprogress", "-d", domain, "-l", "auto", "-o", output_path])
        if raw:
            args.append("--raw")
        return args

    def run(
        self, domain: str, output_path: str, *, raw: bool = False, offline: bool = False
    ) -> int:
        """Run a backup of a domain and wait for it to finish.

        Returns:
            Exit status of virtnbdbackup, or 127 if it could not be started.
        """
        args = self.build_args(domain, output_path, raw=raw, offline=offline)

        logger.info("Starting backup of %s into %s", domain, output_path)
        logger.debug("Executing: %s", " ".join(args))

        try:
            code = run_streaming(args, lambda line: logger.info("%s", line))
        except (FileNotFoundError, OSError) as e:
            logger.error("Cannot execute %s for %s: %s", BACKUP, domain, e)
            return 127

        if code != 0:
            logger.error("Backup for %s failed with code %d", domain, code)
        return code
