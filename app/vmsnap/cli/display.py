"""Shared Rich display functions for status and results.

Provides the status table, the serialized (JSON/YAML) status output and
the per-item result table used by the backup and scrub commands.
"""

import json
from typing import Any

import yaml
from rich.table import Table

from vmsnap.models.result import DomainOutcome, ItemResult
from vmsnap.models.status import StatusRecord, statuses_to_dict
from vmsnap.utils.formatting import console, format_size, print_success

# Width of the hyphen rule framing serialized output
SCREEN_SIZE = 80

_SIZE_KEYS = ("virtual_size", "actual_size", "total_size")


def create_status_table(statuses: dict[str, StatusRecord], pretty: bool = False) -> Table:
    """Create a Rich table summarizing domain statuses.

    Args:
        statuses: Status records keyed by domain.
        pretty: Show sizes in human-readable units.

    Returns:
        Rich Table with one row per domain.
    """
    table = Table(
        title="Backup Status",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Domain", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Checkpoints", justify="right")
    table.add_column("Disks (bitmaps)")
    table.add_column("Backup files", justify="right")
    table.add_column("Backup size", style="size", justify="right")

    for domain, record in statuses.items():
        if record.is_ok:
            status = f"[status.ok]{record.overall_status.value}[/]"
        else:
            status = f"[status.inconsistent]{record.overall_status.value}[/]"

        disks = ", ".join(f"{d.disk} ({len(d.bitmaps)})" for d in record.disks) or "-"

        stats = record.backup_directory_stats
        files = str(stats.total_files) if stats is not None else "-"
        size = _size(stats.total_size, pretty) if stats is not None else "-"

        checkpoints = str(len(record.checkpoints))
        table.add_row(f"[domain]{domain}[/]", status, checkpoints, disks, files, size)

    return table


def print_status_details(statuses: dict[str, StatusRecord], pretty: bool = False) -> None:
    """Print checkpoints, bitmaps and mismatch detail per domain."""
    for domain, record in statuses.items():
        console.print(f"\n[domain]{domain}[/]")

        if record.checkpoints:
            console.print(f"  Checkpoints: [muted]{', '.join(record.checkpoints)}[/]")
        else:
            console.print(f"  [muted]No checkpoints found for {domain}[/]")

        if not record.disks:
            console.print(f"  [muted]No eligible disks found for {domain}[/]")
        for disk in record.disks:
            console.print(
                f"  {disk.disk}: virtual {_size(disk.virtual_size, pretty)}, "
                f"actual {_size(disk.actual_size, pretty)}"
            )
            if disk.bitmaps:
                console.print(f"    Bitmaps: [muted]{', '.join(disk.bitmaps)}[/]")

        if record.mismatch is not None:
            where = record.mismatch.disk or "backup directory"
            console.print(
                f"  [warning]{record.mismatch.checkpoints} checkpoint(s) but "
                f"{record.mismatch.found} {record.mismatch.source} on {where}[/]"
            )


def status_data(statuses: dict[str, StatusRecord], pretty: bool = False) -> dict[str, Any]:
    """Convert statuses to plain data, optionally with human-readable sizes."""
    data = statuses_to_dict(statuses)
    if pretty:
        _humanize_sizes(data)
    return data


def serialize_statuses(
    statuses: dict[str, StatusRecord],
    output_format: str,
    *,
    machine: bool = False,
    pretty: bool = False,
) -> str:
    """Serialize statuses to JSON or YAML text.

    Args:
        statuses: Status records keyed by domain.
        output_format: "json" or "yaml".
        machine: Emit compact JSON without the surrounding frame.
        pretty: Show sizes in human-readable units.

    Returns:
        Serialized text, framed unless machine is set.
    """
    data = status_data(statuses, pretty)

    if output_format == "yaml":
        label = "YAML"
        text = yaml.safe_dump(data, sort_keys=False, default_flow_style=False).rstrip("\n")
    else:
        label = "JSON"
        if machine:
            text = json.dumps(data, separators=(",", ":"))
        else:
            text = json.dumps(data, indent=2)

    return text if machine else frame(label, text)


def frame(prefix: str, text: str) -> str:
    """Frame text between two hyphen rules under a prefix line."""
    line = "-" * SCREEN_SIZE
    return f"{prefix}:\n{line}\n{text}\n{line}"


def create_results_table(results: list[ItemResult], title: str = "Results") -> Table:
    """Create a Rich table of checkpoint and bitmap removals.

    Args:
        results: Per-item results.
        title: Table title.

    Returns:
        Rich Table with one row per item.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Domain", no_wrap=True)
    table.add_column("Kind", width=10)
    table.add_column("Name", no_wrap=True)
    table.add_column("Message")

    for result in results:
        if result.success:
            status = "[success]OK[/success]"
            message = result.target or ""
        else:
            status = "[error]FAIL[/error]"
            message = result.error or "Unknown error"

        table.add_row(
            status,
            result.domain,
            result.kind.value,
            result.name,
            f"[muted]{message}[/muted]",
        )

    return table


def print_outcomes_summary(outcomes: list[DomainOutcome]) -> None:
    """Print a summary of backup outcomes.

    Shows a success message when all domains were backed up, or a count
    of succeeded/failed domains when there are failures.
    """
    for outcome in outcomes:
        if outcome.pruned:
            console.print(f"[muted]{outcome.domain}: pruned {outcome.pruned}[/muted]")

    success_count = sum(1 for o in outcomes if not o.failed)
    fail_count = sum(1 for o in outcomes if o.failed)

    if fail_count == 0:
        print_success(f"All {success_count} domain(s) backed up successfully.")
    else:
        console.print(
            f"\n[success]{success_count} succeeded[/success], [error]{fail_count} failed[/error]"
        )
        for outcome in outcomes:
            if outcome.failed:
                console.print(f"  [error]{outcome.domain}[/error]: {outcome.error}")


def _size(value: int | None, pretty: bool) -> str:
    if pretty:
        return format_size(value)
    return "-" if value is None else str(value)


def _humanize_sizes(node: Any) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key in _SIZE_KEYS and isinstance(value, int):
                node[key] = format_size(value)
            else:
                _humanize_sizes(value)
    elif isinstance(node, list):
        for item in node:
            _humanize_sizes(item)
