"""Utility modules for vmsnap.

This module exports commonly used utility functions.
"""

from vmsnap.utils.domains import parse_domains
from vmsnap.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from vmsnap.utils.shell import CommandResult, command_exists, missing_commands, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_size",
    "missing_commands",
    "parse_domains",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
