"""Adapters for the external tools vmsnap drives.

This module exports the abstract interfaces and their concrete
implementations for virsh, qemu-img, virtnbdbackup and the local filesystem.
"""

from vmsnap.adapters.base import (
    BackupRunner,
    DiskImageTool,
    DiskInfo,
    EntryStat,
    FilesystemProbe,
    Hypervisor,
)
from vmsnap.adapters.filesystem import LocalFilesystem
from vmsnap.adapters.qemu_img import QemuImgAdapter
from vmsnap.adapters.virsh import VirshAdapter
from vmsnap.adapters.virtnbdbackup import VirtnbdbackupRunner

__all__ = [
    "BackupRunner",
    "DiskImageTool",
    "DiskInfo",
    "EntryStat",
    "FilesystemProbe",
    "Hypervisor",
    "LocalFilesystem",
    "QemuImgAdapter",
    "VirshAdapter",
    "VirtnbdbackupRunner",
]
