"""CLI commands for vmsnap.

This package contains all subcommand implementations.
"""

from vmsnap.cli.commands import backup, config, scrub, status

__all__ = ["backup", "config", "scrub", "status"]
