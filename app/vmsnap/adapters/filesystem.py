"""Local filesystem probe.

Thin pathlib/shutil implementation of the FilesystemProbe interface.
"""

import logging
import shutil
from pathlib import Path

from vmsnap.adapters.base import EntryStat, FilesystemProbe

logger = logging.getLogger(__name__)


class LocalFilesystem(FilesystemProbe):
    """Filesystem probe backed by the local filesystem."""

    def exists(self, path: str) -> bool:
        """Return True if the path exists."""
        return Path(path).exists()

    def remove_tree(self, path: str) -> None:
        """Recursively remove a directory tree.

        Raises:
            OSError: If the tree cannot be removed.
        """
        logger.debug("Removing directory tree %s", path)
        shutil.rmtree(path)

    def list_dir(self, path: str) -> list[str]:
        """Return the entry names of a directory, sorted."""
        return sorted(entry.name for entry in Path(path).iterdir())

    def stat(self, path: str) -> EntryStat:
        """Return size and directory flag for a path (following symlinks).

        Raises:
            FileNotFoundError: If the path or a symlink target does not exist.
        """
        target = Path(path)
        st = target.stat()
        return EntryStat(size=st.st_size, is_directory=target.is_dir())
