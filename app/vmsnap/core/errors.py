"""Exception hierarchy and process exit codes.

Every error a command can surface maps to a distinct exit code so that
callers can script around specific failure categories.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes, one per error class."""

    OK = 0
    DOMAINS = 1
    OUTPUT_DIR = 2
    MAIN = 3
    DEPENDENCIES = 4
    SCRUB = 5
    LOCK_RELEASE = 6
    INVALID_SCRUB_TYPE = 8
    LOCK_ACQUIRE = 9


class VmsnapError(Exception):
    """Base exception for vmsnap errors."""

    exit_code: ExitCode = ExitCode.MAIN


class DomainError(VmsnapError):
    """Raised when no domains were specified or none matched."""

    exit_code = ExitCode.DOMAINS


class OutputDirError(VmsnapError):
    """Raised when a backup is requested without an output directory."""

    exit_code = ExitCode.OUTPUT_DIR


class DependencyError(VmsnapError):
    """Raised when required external programs are missing."""

    exit_code = ExitCode.DEPENDENCIES

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing dependencies ({', '.join(missing)})")


class ScrubError(VmsnapError):
    """Raised when scrubbing checkpoints and bitmaps fails."""

    exit_code = ExitCode.SCRUB


class InvalidScrubTypeError(VmsnapError):
    """Raised for an unknown scrub type."""

    exit_code = ExitCode.INVALID_SCRUB_TYPE


class LockAcquireError(VmsnapError):
    """Raised when the process lock could not be acquired in time."""

    exit_code = ExitCode.LOCK_ACQUIRE


class LockReleaseError(VmsnapError):
    """Raised when the process lock could not be released."""

    exit_code = ExitCode.LOCK_RELEASE


class RecursionLimitError(VmsnapError):
    """Raised when a directory walk exceeds the maximum depth."""


class AdapterError(RuntimeError):
    """Raised when an external tool fails or returns unexpected output.

    Attributes:
        command: The command that was executed.
        stderr: Error output from the tool, if any.
    """

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = "") -> None:
        self.command = command or []
        self.stderr = stderr
        super().__init__(message)
