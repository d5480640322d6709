"""Data models for vmsnap.

This module exports the core data structures used throughout the application.
"""

from vmsnap.models.frequency import (
    BUCKET_PREFIX,
    Frequency,
    InvalidFrequencyError,
    PeriodBucket,
)
from vmsnap.models.result import DomainOutcome, ItemKind, ItemResult
from vmsnap.models.status import (
    BackupDirectoryStats,
    CountMismatch,
    DiskStatus,
    OverallStatus,
    StatusRecord,
    statuses_to_dict,
)

__all__ = [
    "BUCKET_PREFIX",
    "BackupDirectoryStats",
    "CountMismatch",
    "DiskStatus",
    "DomainOutcome",
    "Frequency",
    "InvalidFrequencyError",
    "ItemKind",
    "ItemResult",
    "OverallStatus",
    "PeriodBucket",
    "StatusRecord",
    "statuses_to_dict",
]
