"""Unit tests for VirtnbdbackupRunner."""

from unittest.mock import patch

import pytest
from vmsnap.adapters.virtnbdbackup import VirtnbdbackupRunner


class TestBuildArgs:
    """Tests for command line construction."""

    @pytest.fixture
    def runner(self) -> VirtnbdbackupRunner:
        """Create VirtnbdbackupRunner instance."""
        return VirtnbdbackupRunner()

    def test_running_domain(self, runner: VirtnbdbackupRunner) -> None:
        """A running domain is backed up in automatic mode."""
        args = runner.build_args("vm1", "/backups/vm1/vm1_202403")

        assert args == [
            "virtnbdbackup",
            "--noprogress",
            "-d",
            "vm1",
            "-l",
            "auto",
            "-o",
            "/backups/vm1/vm1_202403",
        ]

    def test_offline_domain(self, runner: VirtnbdbackupRunner) -> None:
        """An offline domain is started paused with -S."""
        args = runner.build_args("vm1", "/out", offline=True)

        assert args[:2] == ["virtnbdbackup", "-S"]

    def test_raw(self, runner: VirtnbdbackupRunner) -> None:
        """Raw disks are included with --raw."""
        args = runner.build_args("vm1", "/out", raw=True)

        assert args[-1] == "--raw"
        assert "-S" not in args


class TestRun:
    """Tests for running a backup."""

    @pytest.fixture
    def runner(self) -> VirtnbdbackupRunner:
        """Create VirtnbdbackupRunner instance."""
        return VirtnbdbackupRunner()

    def test_success(self, runner: VirtnbdbackupRunner) -> None:
        """A successful backup returns 0 and streams output lines."""
        with patch("vmsnap.adapters.virtnbdbackup.run_streaming", return_value=0) as mock_stream:
            code = runner.run("vm1", "/out", raw=True)

        assert code == 0
        args, on_line = mock_stream.call_args.args
        assert args == runner.build_args("vm1", "/out", raw=True)
        assert callable(on_line)

    def test_failure_returns_code(self, runner: VirtnbdbackupRunner) -> None:
        """A failing backup returns its exit status instead of raising."""
        with patch("vmsnap.adapters.virtnbdbackup.run_streaming", return_value=2):
            assert runner.run("vm1", "/out") == 2

    def test_missing_binary(self, runner: VirtnbdbackupRunner) -> None:
        """A backup tool that cannot be started returns 127."""
        with patch(
            "vmsnap.adapters.virtnbdbackup.run_streaming",
            side_effect=FileNotFoundError("virtnbdbackup"),
        ):
            assert runner.run("vm1", "/out") == 127
