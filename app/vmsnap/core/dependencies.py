"""External program dependency check."""

import logging

from vmsnap.adapters.qemu_img import QEMU_IMG
from vmsnap.adapters.virsh import VIRSH
from vmsnap.adapters.virtnbdbackup import BACKUP
from vmsnap.core.errors import DependencyError
from vmsnap.utils.shell import missing_commands

logger = logging.getLogger(__name__)

REQUIRED_COMMANDS = [VIRSH, QEMU_IMG, BACKUP]


def check_dependencies(commands: list[str] | None = None) -> None:
    """Verify that the external programs vmsnap drives are installed.

    Args:
        commands: Executables to look for. Defaults to virsh, qemu-img
            and virtnbdbackup.

    Raises:
        DependencyError: If any of them is missing from PATH.
    """
    missing = missing_commands(commands if commands is not None else REQUIRED_COMMANDS)
    if missing:
        raise DependencyError(missing)
    logger.debug("All dependencies found")
