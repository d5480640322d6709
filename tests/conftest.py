"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from vmsnap.adapters.base import DiskImageTool, DiskInfo, Hypervisor


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real ~/.config/vmsnap."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))


@pytest.fixture
def mock_domblklist_output() -> str:
    """Sample virsh domblklist --details output."""
    return """ Type   Device   Target   Source
------------------------------------------------------------------------
 file   disk     vda      /var/lib/libvirt/images/vm1.qcow2
 file   disk     vdb      /var/lib/libvirt/images/vm1-data.qcow2
 file   cdrom    sda      /var/lib/libvirt/images/install.iso
 file   cdrom    sdb      -
"""


@pytest.fixture
def mock_checkpoint_list_output() -> str:
    """Sample virsh checkpoint-list --name output."""
    return "virtnbdbackup.0\nvirtnbdbackup.1\nvirtnbdbackup.2\n\n"


@pytest.fixture
def mock_qemu_info() -> dict[str, object]:
    """Sample qemu-img info --output=json data for a qcow2 image with bitmaps."""
    return {
        "virtual-size": 53687091200,
        "filename": "/var/lib/libvirt/images/vm1.qcow2",
        "cluster-size": 65536,
        "format": "qcow2",
        "actual-size": 2147483648,
        "format-specific": {
            "type": "qcow2",
            "data": {
                "compat": "1.1",
                "bitmaps": [
                    {"flags": ["auto"], "name": "virtnbdbackup.0", "granularity": 65536},
                    {"flags": ["auto"], "name": "virtnbdbackup.1", "granularity": 65536},
                ],
            },
        },
    }


@pytest.fixture
def mock_qemu_info_json(mock_qemu_info: dict[str, object]) -> str:
    """Sample qemu-img info output as JSON text."""
    return json.dumps(mock_qemu_info)


@pytest.fixture
def hypervisor() -> MagicMock:
    """Hypervisor double with one running domain and two disks."""
    mock = MagicMock(spec=Hypervisor)
    mock.domain_exists.return_value = True
    mock.is_running.return_value = True
    mock.list_domains.return_value = ["vm1"]
    mock.list_checkpoints.return_value = ["virtnbdbackup.0", "virtnbdbackup.1"]
    mock.list_disks.return_value = {
        "vda": "/images/vm1.qcow2",
        "vdb": "/images/vm1-data.qcow2",
    }
    return mock


@pytest.fixture
def disk_image() -> MagicMock:
    """Disk image double reporting two bitmaps on every disk."""
    mock = MagicMock(spec=DiskImageTool)
    bitmaps = ("virtnbdbackup.0", "virtnbdbackup.1")
    mock.disk_info.side_effect = lambda path: DiskInfo(
        path=path, format="qcow2", virtual_size=1024, actual_size=512, bitmaps=bitmaps
    )
    mock.list_bitmaps.side_effect = lambda path: list(bitmaps)
    return mock


@pytest.fixture
def test_logger() -> logging.Logger:
    """Dedicated logger for engines under test."""
    return logging.getLogger("vmsnap.tests")


@pytest.fixture
def make_backup_dir() -> Callable[..., Path]:
    """Factory creating a backup directory with marker files and data files.

    Call with the directory to create, the number of marker files and an
    optional mapping of relative path to size in bytes for extra files.
    """

    def _make(root: Path, markers: int = 0, files: dict[str, int] | None = None) -> Path:
        (root / "checkpoints").mkdir(parents=True, exist_ok=True)
        for i in range(markers):
            (root / "checkpoints" / f"virtnbdbackup.{i}.xml").write_bytes(b"x" * 10)
        for rel, size in (files or {}).items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"\0" * size)
        return root

    return _make
