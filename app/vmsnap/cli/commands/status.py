"""Status command implementation.

Reports, per domain, whether checkpoints, disk bitmaps and backup marker
files agree. Performs no writes.
"""

from pathlib import Path
from typing import Annotated

import typer

from vmsnap.cli.display import create_status_table, print_status_details, serialize_statuses
from vmsnap.cli.types import (
    OutputFormat,
    exit_on_error,
    get_config,
    get_toolset,
    resolve_domains,
    run_locked,
)
from vmsnap.core.consistency import StatusCollector
from vmsnap.models.status import StatusRecord
from vmsnap.utils.formatting import console, print_info, print_warning

app = typer.Typer(
    help="Show backup consistency for domains.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def status(
    ctx: typer.Context,
    domains: Annotated[
        str,
        typer.Option(
            "--domains",
            "-d",
            help="Domains to check: comma-separated names, wildcards or '*'.",
        ),
    ] = "*",
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Backup root; enables backup directory statistics.",
        ),
    ] = None,
    group_by: Annotated[
        str | None,
        typer.Option(
            "--group-by",
            "-g",
            help="Grouping frequency: month, quarter, bi-annual or year.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table, json or yaml.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Shortcut for --format json."),
    ] = False,
    as_yaml: Annotated[
        bool,
        typer.Option("--yaml", "--yml", help="Shortcut for --format yaml."),
    ] = False,
    machine: Annotated[
        bool,
        typer.Option("--machine", "-m", help="Compact serialized output without framing."),
    ] = False,
    pretty: Annotated[
        bool,
        typer.Option("--pretty", "-p", help="Show sizes in human-readable units."),
    ] = False,
) -> None:
    """Check that checkpoints, bitmaps and backup files agree.

    Examples:
        vmsnap status                          # All domains, table output
        vmsnap status -d vm1 -o /backups       # Include backup directory stats
        vmsnap status --json --machine         # Compact JSON for scripts
        vmsnap status --yaml --pretty          # YAML with human-readable sizes
    """
    if ctx.invoked_subcommand is not None:
        return

    if as_yaml:
        output_format = OutputFormat.YAML
    elif as_json:
        output_format = OutputFormat.JSON

    with exit_on_error():
        config = get_config(ctx)
        backup_root = output or config.output_dir
        frequency = group_by or config.group_by
        tools = get_toolset()

        def _collect() -> dict[str, StatusRecord]:
            names = resolve_domains(domains, tools.hypervisor)
            collector = StatusCollector(tools.hypervisor, tools.disk_image, tools.filesystem)
            return collector.collect_statuses(names, backup_root, frequency)

        statuses = run_locked(config, _collect)

    if output_format == OutputFormat.TABLE:
        _print_table(statuses, pretty)
        return

    typer.echo(
        serialize_statuses(statuses, output_format.value, machine=machine, pretty=pretty)
    )


def _print_table(statuses: dict[str, StatusRecord], pretty: bool) -> None:
    """Display statuses as a table followed by per-domain detail."""
    if not statuses:
        print_info("No domains to report.")
        return

    console.print(create_status_table(statuses, pretty))
    print_status_details(statuses, pretty)

    inconsistent = [domain for domain, record in statuses.items() if not record.is_ok]
    if inconsistent:
        print_warning(f"Inconsistent: {', '.join(inconsistent)}")
