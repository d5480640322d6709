"""Per-item result models for best-effort operations.

Cleanup of checkpoints and bitmaps continues past individual failures;
each attempt is reported as an ItemResult so callers can show partial
failure detail instead of losing it.
"""

from dataclasses import dataclass
from enum import Enum


class ItemKind(Enum):
    """Kind of object a best-effort operation acted on."""

    CHECKPOINT = "checkpoint"
    BITMAP = "bitmap"


@dataclass(frozen=True, slots=True)
class ItemResult:
    """Outcome of removing a single checkpoint or bitmap.

    Attributes:
        kind: Whether a checkpoint or a bitmap was targeted.
        domain: Domain the item belongs to.
        name: Checkpoint or bitmap name.
        success: Whether the removal succeeded.
        target: Disk image path for bitmaps, None for checkpoints.
        error: Reason the item was skipped, None on success.
    """

    kind: ItemKind
    domain: str
    name: str
    success: bool
    target: str | None = None
    error: str | None = None

    @property
    def skipped(self) -> bool:
        """Check if the item was skipped because of a failure."""
        return not self.success


@dataclass(frozen=True, slots=True)
class DomainOutcome:
    """Outcome of one domain's backup lifecycle pass.

    Attributes:
        domain: Domain that was processed.
        backed_up: Whether the backup tool exited successfully.
        cleaned: Results of the pre-backup cleanup (empty if not required).
        pruned: Previous-period directory that was removed, if any.
        exit_code: Exit status of the backup tool (None if not run).
        error: Error that stopped this domain's pass, if any.
    """

    domain: str
    backed_up: bool = False
    cleaned: tuple[ItemResult, ...] = ()
    pruned: str | None = None
    exit_code: int | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if this domain's pass did not complete successfully."""
        return self.error is not None or not self.backed_up
