"""Unit tests for scrub command."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner
from vmsnap.cli.main import app
from vmsnap.cli.types import Toolset
from vmsnap.core.errors import AdapterError

runner = CliRunner()

pytestmark = pytest.mark.usefixtures("cli_config", "no_dependency_check")


@pytest.fixture(autouse=True)
def _tools(toolset: Toolset):
    """Use mocked tools for every scrub invocation."""
    with patch("vmsnap.cli.commands.scrub.get_toolset", return_value=toolset):
        yield


class TestScrubCommand:
    """Tests for vmsnap scrub command."""

    def test_scrub_both(self, hypervisor: MagicMock, disk_image: MagicMock) -> None:
        """The default removes checkpoints and bitmaps."""
        result = runner.invoke(app, ["scrub", "-d", "vm1"])

        assert result.exit_code == 0
        assert "Scrub Results" in result.output
        assert "Removed 6 item(s)" in result.output
        assert hypervisor.delete_checkpoint.call_count == 2
        assert disk_image.remove_bitmap.call_count == 4

    def test_scrub_checkpoint_by_name(
        self, hypervisor: MagicMock, disk_image: MagicMock
    ) -> None:
        """--type checkpoint --name removes one checkpoint only."""
        result = runner.invoke(
            app, ["scrub", "-d", "vm1", "-t", "checkpoint", "-n", "virtnbdbackup.1"]
        )

        assert result.exit_code == 0
        hypervisor.delete_checkpoint.assert_called_once_with("vm1", "virtnbdbackup.1")
        disk_image.remove_bitmap.assert_not_called()

    def test_scrub_bitmap_by_name(self, hypervisor: MagicMock, disk_image: MagicMock) -> None:
        """--type bitmap --name removes that bitmap from every disk."""
        result = runner.invoke(
            app, ["scrub", "-d", "vm1", "-t", "bitmap", "-n", "virtnbdbackup.0"]
        )

        assert result.exit_code == 0
        hypervisor.delete_checkpoint.assert_not_called()
        assert disk_image.remove_bitmap.call_count == 2

    def test_scrub_all_ignores_name(self, hypervisor: MagicMock) -> None:
        """--type '*' removes everything regardless of --name."""
        result = runner.invoke(app, ["scrub", "-d", "vm1", "-t", "*", "-n", "virtnbdbackup.1"])

        assert result.exit_code == 0
        assert hypervisor.delete_checkpoint.call_count == 2

    def test_nothing_to_scrub(self, hypervisor: MagicMock, disk_image: MagicMock) -> None:
        """A domain without checkpoints or bitmaps reports nothing to do."""
        hypervisor.list_checkpoints.return_value = []
        disk_image.list_bitmaps.side_effect = lambda path: []

        result = runner.invoke(app, ["scrub", "-d", "vm1"])

        assert result.exit_code == 0
        assert "Nothing to scrub" in result.output

    def test_partial_failure(self, hypervisor: MagicMock) -> None:
        """Items that cannot be removed are reported without failing the run."""
        hypervisor.delete_checkpoint.side_effect = [AdapterError("busy"), None]

        result = runner.invoke(app, ["scrub", "-d", "vm1", "-t", "checkpoint"])

        assert result.exit_code == 0
        assert "FAIL" in result.output
        assert "1 item(s) could not be removed" in result.output

    def test_invalid_type(self, hypervisor: MagicMock) -> None:
        """An unknown scrub type exits with code 8."""
        result = runner.invoke(app, ["scrub", "-d", "vm1", "-t", "snapshot"])

        assert result.exit_code == 8
        assert "Invalid scrub type: snapshot" in result.output
        hypervisor.delete_checkpoint.assert_not_called()

    def test_listing_failure(self, hypervisor: MagicMock) -> None:
        """A domain whose checkpoints cannot be listed exits with code 5."""
        hypervisor.list_checkpoints.side_effect = AdapterError("virsh checkpoint-list failed")

        result = runner.invoke(app, ["scrub", "-d", "vm1"])

        assert result.exit_code == 5
        assert "Scrubbing vm1 failed" in result.output
