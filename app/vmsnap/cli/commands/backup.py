"""Backup command implementation.

Backs up domains into period buckets, purging stale checkpoints when a
new period begins and pruning the previous period when requested.
"""

from pathlib import Path
from typing import Annotated

import typer

from vmsnap.cli.display import create_results_table, print_outcomes_summary
from vmsnap.cli.types import exit_on_error, get_config, get_toolset, resolve_domains, run_locked
from vmsnap.core.backup import BackupOrchestrator
from vmsnap.core.errors import ExitCode
from vmsnap.core.lifecycle import LifecycleEngine
from vmsnap.core.scrub import Scrubber
from vmsnap.models.result import DomainOutcome
from vmsnap.utils.formatting import console, print_info

app = typer.Typer(
    help="Back up domains into period buckets.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def backup(
    ctx: typer.Context,
    domains: Annotated[
        str | None,
        typer.Option(
            "--domains",
            "-d",
            help="Domains to back up: comma-separated names, wildcards or '*'.",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Backup root directory."),
    ] = None,
    group_by: Annotated[
        str | None,
        typer.Option(
            "--group-by",
            "-g",
            help="Grouping frequency: month, quarter, bi-annual or year.",
        ),
    ] = None,
    prune: Annotated[
        bool | None,
        typer.Option(
            "--prune/--no-prune",
            help="Remove the previous period once the current one is established.",
        ),
    ] = None,
    raw: Annotated[
        bool | None,
        typer.Option("--raw/--no-raw", help="Include raw disks in the backup."),
    ] = None,
) -> None:
    """Back up domains with virtnbdbackup.

    Examples:
        vmsnap backup -d vm1 -o /backups                 # Monthly buckets
        vmsnap backup -d 'web*,db1' -o /backups -g quarter --prune
    """
    if ctx.invoked_subcommand is not None:
        return

    with exit_on_error():
        config = get_config(ctx)
        backup_root = output or config.output_dir
        frequency = group_by or config.group_by
        do_prune = config.prune if prune is None else prune
        do_raw = config.raw if raw is None else raw
        tools = get_toolset()

        def _backup() -> list[DomainOutcome]:
            names = resolve_domains(domains, tools.hypervisor)
            scrubber = Scrubber(tools.hypervisor, tools.disk_image)
            orchestrator = BackupOrchestrator(
                tools.hypervisor,
                tools.runner,
                LifecycleEngine(tools.filesystem),
                scrubber,
            )
            return orchestrator.run(names, backup_root, frequency, prune=do_prune, raw=do_raw)

        outcomes = run_locked(config, _backup)

    if not outcomes:
        print_info("No existing domains to back up.")
        raise typer.Exit(code=int(ExitCode.DOMAINS))

    cleaned = [item for outcome in outcomes for item in outcome.cleaned]
    if cleaned:
        console.print(create_results_table(cleaned, title="Period Cleanup"))

    print_outcomes_summary(outcomes)

    if any(outcome.failed for outcome in outcomes):
        raise typer.Exit(code=int(ExitCode.MAIN))
