"""Unit tests for status and result display helpers."""

import json

import yaml
from rich.console import Console
from vmsnap.cli.display import (
    SCREEN_SIZE,
    create_results_table,
    create_status_table,
    frame,
    serialize_statuses,
    status_data,
)
from vmsnap.core.theme import get_theme
from vmsnap.models.result import ItemKind, ItemResult
from vmsnap.models.status import (
    BackupDirectoryStats,
    CountMismatch,
    DiskStatus,
    OverallStatus,
    StatusRecord,
)


def _statuses() -> dict[str, StatusRecord]:
    return {
        "vm1": StatusRecord(
            checkpoints=("virtnbdbackup.0",),
            disks=(
                DiskStatus(
                    disk="vda",
                    bitmaps=("virtnbdbackup.0",),
                    path="/images/vm1.qcow2",
                    virtual_size=1073741824,
                    actual_size=2048,
                ),
            ),
            backup_directory_stats=BackupDirectoryStats(
                path="/backups/vm1", total_files=2, total_size=1536, marker_files=1
            ),
        ),
        "vm2": StatusRecord(
            checkpoints=(),
            disks=(DiskStatus(disk="vda", bitmaps=("virtnbdbackup.0",)),),
            overall_status=OverallStatus.INCONSISTENT,
            mismatch=CountMismatch(checkpoints=0, found=1, disk="vda"),
        ),
    }


def _render(table) -> str:
    console = Console(theme=get_theme(), width=200, record=True)
    console.print(table)
    return console.export_text()


class TestSerializeStatuses:
    """Tests for JSON/YAML status output."""

    def test_machine_json_is_compact(self) -> None:
        """Machine JSON has no whitespace and no frame."""
        text = serialize_statuses(_statuses(), "json", machine=True)

        assert "\n" not in text
        assert ": " not in text
        assert json.loads(text)["vm2"]["overall_status"] == "INCONSISTENT"

    def test_framed_json(self) -> None:
        """Human JSON is indented and framed."""
        text = serialize_statuses(_statuses(), "json")

        assert text.startswith("JSON:\n" + "-" * SCREEN_SIZE + "\n{\n  ")
        assert text.endswith("}\n" + "-" * SCREEN_SIZE)

    def test_yaml_keeps_order(self) -> None:
        """YAML output keeps domain and key order."""
        text = serialize_statuses(_statuses(), "yaml", machine=True)

        data = yaml.safe_load(text)
        assert list(data) == ["vm1", "vm2"]
        assert list(data["vm1"])[:3] == ["checkpoints", "disks", "overall_status"]

    def test_framed_yaml(self) -> None:
        """Human YAML is framed under a YAML prefix."""
        assert serialize_statuses(_statuses(), "yaml").startswith("YAML:\n")

    def test_pretty_sizes(self) -> None:
        """Pretty output humanizes sizes, including directory totals."""
        data = status_data(_statuses(), pretty=True)

        assert data["vm1"]["disks"][0]["virtual_size"] == "1.0 GB"
        assert data["vm1"]["disks"][0]["actual_size"] == "2.0 KB"
        assert data["vm1"]["backup_directory_stats"]["total_size"] == "1.5 KB"
        assert data["vm1"]["backup_directory_stats"]["total_files"] == 2
        assert data["vm2"]["disks"][0]["virtual_size"] is None

    def test_raw_sizes(self) -> None:
        """Without pretty sizes stay in bytes."""
        data = status_data(_statuses())

        assert data["vm1"]["disks"][0]["virtual_size"] == 1073741824


class TestFrame:
    """Tests for frame."""

    def test_frame(self) -> None:
        """Text is framed between two rules under a prefix."""
        rule = "-" * SCREEN_SIZE
        assert frame("JSON", "{}") == f"JSON:\n{rule}\n{{}}\n{rule}"


class TestTables:
    """Tests for Rich tables."""

    def test_status_table(self) -> None:
        """The status table shows one row per domain."""
        text = _render(create_status_table(_statuses(), pretty=True))

        assert "vm1" in text
        assert "INCONSISTENT" in text
        assert "vda (1)" in text
        assert "1.5 KB" in text

    def test_results_table(self) -> None:
        """The results table shows failures with their reason."""
        results = [
            ItemResult(ItemKind.CHECKPOINT, "vm1", "virtnbdbackup.0", success=True),
            ItemResult(
                ItemKind.BITMAP,
                "vm1",
                "virtnbdbackup.0",
                success=False,
                target="/images/vm1.qcow2",
                error="Permission denied",
            ),
        ]

        text = _render(create_results_table(results, title="Scrub Results"))

        assert "Scrub Results" in text
        assert "FAIL" in text
        assert "Permission denied" in text
        assert "checkpoint" in text
