"""Fixtures shared by CLI command tests."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from vmsnap.adapters.base import BackupRunner
from vmsnap.adapters.filesystem import LocalFilesystem
from vmsnap.cli.types import Toolset
from vmsnap.configs.config import VmsnapConfig, save_config
from vmsnap.core.paths import get_config_path


@pytest.fixture
def cli_config(_isolate_config: None, tmp_path: Path) -> VmsnapConfig:
    """Write a default config whose lock lives in tmp_path and never waits."""
    config = VmsnapConfig(lock_path=tmp_path / "vmsnap.lock", lock_retries=0, lock_retry_wait=0)
    save_config(config, get_config_path())
    return config


@pytest.fixture
def toolset(hypervisor: MagicMock, disk_image: MagicMock) -> Toolset:
    """Toolset of mocked tools over the real filesystem."""
    runner = MagicMock(spec=BackupRunner)
    runner.run.return_value = 0
    return Toolset(
        hypervisor=hypervisor,
        disk_image=disk_image,
        runner=runner,
        filesystem=LocalFilesystem(),
    )


@pytest.fixture
def no_dependency_check():
    """Skip the PATH check for virsh, qemu-img and virtnbdbackup."""
    with patch("vmsnap.cli.types.check_dependencies") as mock_check:
        yield mock_check
