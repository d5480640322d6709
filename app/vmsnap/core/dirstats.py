"""Directory statistics for backup period buckets.

Collects file count, total size and the number of checkpoint marker files
for one domain's backup directory. A directory that does not exist yet is
a normal state and yields a zeroed record.
"""

import logging
import os

from vmsnap.adapters.base import EntryStat, FilesystemProbe
from vmsnap.adapters.filesystem import LocalFilesystem
from vmsnap.core.errors import RecursionLimitError
from vmsnap.models.status import BackupDirectoryStats

logger = logging.getLogger(__name__)

# virtnbdbackup keeps one file per checkpoint in this subdirectory
MARKER_SUBDIR = "checkpoints"

# Backup trees are shallow; anything deeper is a loop or a misconfiguration
MAX_RECURSION_DEPTH = 5


def collect(
    path: str,
    marker_subdir: str = MARKER_SUBDIR,
    filesystem: FilesystemProbe | None = None,
) -> BackupDirectoryStats:
    """Collect statistics for a backup directory.

    The marker subdirectory (if present) seeds the marker count together
    with a baseline file count and size; the rest of the tree is then
    walked to add every other regular file.

    Args:
        path: Backup directory to inspect.
        marker_subdir: Name of the subdirectory holding marker files.
        filesystem: Filesystem probe. Defaults to the local filesystem.

    Returns:
        BackupDirectoryStats for the directory (zeroed if it doesn't exist).

    Raises:
        RecursionLimitError: If the tree is nested deeper than MAX_RECURSION_DEPTH.
    """
    fs = filesystem or LocalFilesystem()

    if not fs.exists(path):
        logger.debug("Backup directory %s does not exist yet", path)
        return BackupDirectoryStats.empty(path)

    marker_files = 0
    total_files = 0
    total_size = 0

    marker_path = os.path.join(path, marker_subdir)
    if fs.exists(marker_path):
        for name in fs.list_dir(marker_path):
            entry = _stat(fs, os.path.join(marker_path, name))
            if entry is None:
                continue
            marker_files += 1
            total_files += 1
            total_size += entry.size

    files, size = _walk(fs, path, depth=0, skip=marker_subdir)

    return BackupDirectoryStats(
        path=path,
        total_files=total_files + files,
        total_size=total_size + size,
        marker_files=marker_files,
    )


def _walk(fs: FilesystemProbe, path: str, depth: int, skip: str | None = None) -> tuple[int, int]:
    """Sum regular file count and size below path.

    Args:
        fs: Filesystem probe.
        path: Directory to walk.
        depth: Nesting level of path relative to the backup directory.
        skip: Entry name to ignore at this level (already counted).

    Returns:
        Tuple of (file_count, total_size).
    """
    if depth >= MAX_RECURSION_DEPTH:
        msg = f"Recursion limit reached for {path}"
        raise RecursionLimitError(msg)

    files = 0
    size = 0

    for name in fs.list_dir(path):
        if name == skip:
            continue
        current = os.path.join(path, name)
        entry = _stat(fs, current)
        if entry is None:
            continue
        if entry.is_directory:
            sub_files, sub_size = _walk(fs, current, depth + 1)
            files += sub_files
            size += sub_size
        else:
            files += 1
            size += entry.size

    return files, size


def _stat(fs: FilesystemProbe, path: str) -> EntryStat | None:
    """Stat an entry, returning None for dangling symlinks and vanished files."""
    try:
        return fs.stat(path)
    except FileNotFoundError:
        logger.debug("Skipping %s: target does not exist", path)
        return None
