"""CLI package for vmsnap.

This package contains the Typer application and all subcommands.
"""

from vmsnap.cli.main import app

__all__ = ["app"]
