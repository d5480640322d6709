"""virsh hypervisor adapter.

Queries domains, checkpoints and disks through the libvirt command line
client and removes checkpoint metadata.
"""

import logging
import re

from vmsnap.adapters.base import Hypervisor
from vmsnap.core.errors import AdapterError
from vmsnap.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

VIRSH = "virsh"

# Checkpoints created by virtnbdbackup; nothing else is ever removed
CHECKPOINT_REGEX = re.compile(r"^virtnbdbackup\.[0-9]*$")

# Characters libvirt accepts in domain names
_DOMAIN_NAME_REGEX = re.compile(r"^[A-Za-z0-9_.+\-&:/]*$")


class VirshAdapter(Hypervisor):
    """Hypervisor adapter using virsh.

    Every query raises AdapterError when virsh exits non-zero so callers
    can decide whether to skip the affected item or abort.
    """

    _VIRSH_TIMEOUT: float = 60.0

    @property
    def command(self) -> str:
        """Return the virsh executable name."""
        return VIRSH

    def domain_exists(self, domain: str) -> bool:
        """Check if a domain is defined on the host.

        Domain names with characters libvirt does not allow are rejected
        without calling virsh.
        """
        if not _DOMAIN_NAME_REGEX.match(domain):
            logger.error("Domain %s contains invalid characters", domain)
            return False

        try:
            result = run_command([VIRSH, "domstate", domain], timeout=self._VIRSH_TIMEOUT)
        except (FileNotFoundError, OSError):
            return False
        return result.success

    def is_running(self, domain: str) -> bool:
        """Check if a domain is currently running."""
        result = self._run(["domstate", domain])
        return result.stdout.strip().lower() == "running"

    def list_domains(self) -> list[str]:
        """List all domains defined on the host, running or not."""
        result = self._run(["list", "--all", "--name"])
        return _non_empty_lines(result.stdout)

    def list_checkpoints(self, domain: str) -> list[str]:
        """List checkpoint names of a domain."""
        result = self._run(["checkpoint-list", domain, "--name"])
        return _non_empty_lines(result.stdout)

    def delete_checkpoint(self, domain: str, checkpoint: str) -> None:
        """Delete a checkpoint's metadata from a domain."""
        logger.info("Removing checkpoint %s from %s", checkpoint, domain)
        self._run(["checkpoint-delete", domain, checkpoint, "--metadata"])

    def list_disks(self, domain: str) -> dict[str, str]:
        """Return a mapping of disk alias to image path.

        Parses ``virsh domblklist --details`` and keeps only rows whose
        device type is ``disk`` (cdroms and floppies are skipped).
        """
        result = self._run(["domblklist", domain, "--details"])
        return parse_domblklist(result.stdout)

    def _run(self, args: list[str]) -> CommandResult:
        """Run a virsh subcommand, raising AdapterError on failure."""
        command = [VIRSH, *args]
        try:
            result = run_command(command, timeout=self._VIRSH_TIMEOUT)
        except (FileNotFoundError, OSError) as e:
            msg = f"Cannot execute {VIRSH}: {e}"
            raise AdapterError(msg, command) from e

        if not result.success:
            stderr = result.stderr.strip()
            msg = f"virsh {args[0]} failed: {stderr or 'unknown error'}"
            raise AdapterError(msg, command, stderr)
        return result


def parse_domblklist(output: str) -> dict[str, str]:
    """Parse ``virsh domblklist --details`` output.

    Args:
        output: Raw command output including the header line.

    Returns:
        Mapping of target (e.g. 'vda') to source path, for disk devices only.
    """
    disks: dict[str, str] = {}

    for line in output.splitlines()[1:]:
        words = line.split()
        # Type, Device, Target, Source
        if len(words) >= 4 and words[1] == "disk" and words[3] != "-":
            disks[words[2]] = words[3]

    return disks


def _non_empty_lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]
