"""Backup frequency and period bucket models.

This module defines the closed set of grouping frequencies a backup chain
can be filed under, and the value type naming one period of a frequency.
"""

from dataclasses import dataclass
from enum import Enum

# Every bucket directory name starts with this prefix
BUCKET_PREFIX = "vmsnap-backup"


class InvalidFrequencyError(ValueError):
    """Raised when a frequency string does not name a known frequency."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid frequency: {value}")


class Frequency(str, Enum):
    """Grouping frequency for backup period buckets.

    Attributes:
        MONTH: One bucket per calendar month.
        QUARTER: One bucket per calendar quarter.
        BI_ANNUAL: Two buckets per year, split at day-of-year 180.
        YEAR: One bucket per calendar year.
    """

    MONTH = "month"
    QUARTER = "quarter"
    BI_ANNUAL = "bi-annual"
    YEAR = "year"

    @property
    def label(self) -> str:
        """Return the adjective used in bucket directory names."""
        return _LABELS[self]

    @property
    def prune_threshold_days(self) -> int:
        """Return the days into a period after which the previous one may be pruned."""
        return _PRUNE_THRESHOLDS[self]

    @classmethod
    def parse(cls, value: "Frequency | str") -> "Frequency":
        """Convert a string (or Frequency) to a Frequency.

        Args:
            value: Frequency instance or its string value (e.g. "quarter").

        Returns:
            The matching Frequency.

        Raises:
            InvalidFrequencyError: If the value is not a known frequency.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidFrequencyError(value) from None


_LABELS: dict[Frequency, str] = {
    Frequency.MONTH: "monthly",
    Frequency.QUARTER: "quarterly",
    Frequency.BI_ANNUAL: "bi-annually",
    Frequency.YEAR: "yearly",
}

_PRUNE_THRESHOLDS: dict[Frequency, int] = {
    Frequency.MONTH: 15,
    Frequency.QUARTER: 45,
    Frequency.BI_ANNUAL: 90,
    Frequency.YEAR: 180,
}


@dataclass(frozen=True, slots=True)
class PeriodBucket:
    """One period of a given frequency.

    The display name is only produced at the boundary via :attr:`name`;
    everything else compares the structured fields.

    Attributes:
        frequency: Frequency this bucket belongs to.
        year: Calendar year of the period.
        index: Sub-period index: month (1-12), quarter (1-4),
            half (1-2), or 0 for yearly buckets.
    """

    frequency: Frequency
    year: int
    index: int = 0

    def __post_init__(self) -> None:
        """Validate the sub-period index against the frequency."""
        limits = {
            Frequency.MONTH: (1, 12),
            Frequency.QUARTER: (1, 4),
            Frequency.BI_ANNUAL: (1, 2),
            Frequency.YEAR: (0, 0),
        }
        low, high = limits[self.frequency]
        if not (low <= self.index <= high):
            msg = f"Index {self.index} out of range for {self.frequency.value} bucket"
            raise ValueError(msg)

    @property
    def token(self) -> str:
        """Return the period token, e.g. '2024-03', '2024-Q1', '2024-p2', '2024'."""
        if self.frequency == Frequency.MONTH:
            return f"{self.year:04d}-{self.index:02d}"
        if self.frequency == Frequency.QUARTER:
            return f"{self.year:04d}-Q{self.index}"
        if self.frequency == Frequency.BI_ANNUAL:
            return f"{self.year:04d}-p{self.index}"
        return f"{self.year:04d}"

    @property
    def name(self) -> str:
        """Return the bucket directory name."""
        return f"{BUCKET_PREFIX}-{self.frequency.label}-{self.token}"

    def __str__(self) -> str:
        return self.name
