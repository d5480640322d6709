"""Scrub command implementation.

Removes virtnbdbackup checkpoints and bitmaps from domains, for example
to recover from an inconsistent state reported by ``vmsnap status``.
"""

from typing import Annotated

import typer

from vmsnap.cli.display import create_results_table
from vmsnap.cli.types import exit_on_error, get_config, get_toolset, resolve_domains, run_locked
from vmsnap.core.scrub import Scrubber, ScrubType
from vmsnap.models.result import ItemResult
from vmsnap.utils.formatting import console, print_info, print_success, print_warning

app = typer.Typer(
    help="Remove backup checkpoints and bitmaps from domains.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scrub(
    ctx: typer.Context,
    domains: Annotated[
        str | None,
        typer.Option(
            "--domains",
            "-d",
            help="Domains to scrub: comma-separated names, wildcards or '*'.",
        ),
    ] = None,
    scrub_type: Annotated[
        str,
        typer.Option(
            "--type",
            "-t",
            help="What to remove: checkpoint, bitmap, both or '*' (everything).",
        ),
    ] = ScrubType.BOTH.value,
    name: Annotated[
        str | None,
        typer.Option(
            "--name",
            "-n",
            help="Only remove this checkpoint/bitmap (ignored for '*').",
        ),
    ] = None,
) -> None:
    """Scrub checkpoints and bitmaps.

    Examples:
        vmsnap scrub -d vm1                              # All checkpoints and bitmaps
        vmsnap scrub -d vm1 -t bitmap -n virtnbdbackup.3
    """
    if ctx.invoked_subcommand is not None:
        return

    with exit_on_error():
        kind = ScrubType.parse(scrub_type)
        config = get_config(ctx)
        tools = get_toolset()

        def _scrub() -> list[ItemResult]:
            names = resolve_domains(domains, tools.hypervisor)
            scrubber = Scrubber(tools.hypervisor, tools.disk_image)
            results: list[ItemResult] = []
            for domain in names:
                results.extend(scrubber.scrub(domain, kind, name))
            return results

        results = run_locked(config, _scrub)

    if not results:
        print_info("Nothing to scrub.")
        return

    console.print(create_results_table(results, title="Scrub Results"))

    failed = sum(1 for r in results if r.skipped)
    if failed:
        print_warning(f"{failed} item(s) could not be removed")
    else:
        print_success(f"Removed {len(results)} item(s).")
