"""Configuration commands.

Shows the effective configuration and writes a config file with the
default settings.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer
from rich.table import Table

from vmsnap.cli.types import exit_on_error, get_config
from vmsnap.configs.config import VmsnapConfig, config_to_dict, save_config
from vmsnap.core.paths import get_config_path, get_lock_path
from vmsnap.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Show or create the vmsnap configuration file.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
    ctx: typer.Context,
    as_toml: Annotated[
        bool,
        typer.Option("--toml", help="Print the configuration as TOML."),
    ] = False,
) -> None:
    """Show the effective configuration."""
    with exit_on_error():
        config = get_config(ctx)

    if as_toml:
        typer.echo(tomli_w.dumps(config_to_dict(config)), nl=False)
        return

    table = Table(title="Configuration", show_header=True, header_style="bold_header")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("output_dir", str(config.output_dir) if config.output_dir else "-")
    table.add_row("group_by", config.group_by.value)
    table.add_row("prune", str(config.prune))
    table.add_row("raw", str(config.raw))
    table.add_row("lock_retries", str(config.lock_retries))
    table.add_row("lock_retry_wait", f"{config.lock_retry_wait}s")
    table.add_row("lock_path", str(config.lock_path or get_lock_path()))

    console.print(table)


@app.command()
def init(
    ctx: typer.Context,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Default backup root to record."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    obj = ctx.find_root().obj or {}
    path: Path = obj.get("config_path") or get_config_path()

    if path.exists() and not force:
        print_info(f"Config already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=0)

    with exit_on_error():
        saved = save_config(VmsnapConfig(output_dir=output), path)

    print_success(f"Config written to {saved}")
