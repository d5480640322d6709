"""Period resolution for backup buckets.

Maps a reference date to the backup period bucket it falls in, or to the
period immediately before it, for each supported frequency. All functions
are pure: the reference date is always passed in.

Bi-annual periods are split by day of year rather than calendar month:
days 1-179 form the first half and day 180 onwards the second half, in
leap and common years alike.
"""

from datetime import date, timedelta

from vmsnap.models.frequency import Frequency, PeriodBucket

# First day-of-year belonging to the second bi-annual half
BI_ANNUAL_SPLIT_DAY = 180


def _day_of_year(reference: date) -> int:
    return reference.timetuple().tm_yday


def _current_bucket(frequency: Frequency, reference: date) -> PeriodBucket:
    year = reference.year

    if frequency == Frequency.MONTH:
        return PeriodBucket(frequency, year, reference.month)
    if frequency == Frequency.QUARTER:
        return PeriodBucket(frequency, year, (reference.month - 1) // 3 + 1)
    if frequency == Frequency.BI_ANNUAL:
        half = 1 if _day_of_year(reference) < BI_ANNUAL_SPLIT_DAY else 2
        return PeriodBucket(frequency, year, half)
    return PeriodBucket(frequency, year)


def previous_bucket(bucket: PeriodBucket) -> PeriodBucket:
    """Return the period immediately preceding a bucket.

    Args:
        bucket: Bucket to step back from.

    Returns:
        The preceding bucket of the same frequency, rolling over the year
        where needed (January -> December, Q1 -> Q4, half 1 -> half 2).
    """
    frequency = bucket.frequency
    year = bucket.year

    if frequency == Frequency.MONTH:
        if bucket.index == 1:
            return PeriodBucket(frequency, year - 1, 12)
        return PeriodBucket(frequency, year, bucket.index - 1)
    if frequency == Frequency.QUARTER:
        if bucket.index == 1:
            return PeriodBucket(frequency, year - 1, 4)
        return PeriodBucket(frequency, year, bucket.index - 1)
    if frequency == Frequency.BI_ANNUAL:
        if bucket.index == 1:
            return PeriodBucket(frequency, year - 1, 2)
        return PeriodBucket(frequency, year, 1)
    return PeriodBucket(frequency, year - 1)


def resolve_bucket(
    frequency: Frequency | str,
    reference: date,
    previous: bool = False,
) -> PeriodBucket:
    """Resolve the backup bucket for a reference date.

    Args:
        frequency: Grouping frequency (enum or its string value).
        reference: Date to resolve the bucket for.
        previous: If True, return the period before the current one.

    Returns:
        PeriodBucket for the requested period.

    Raises:
        InvalidFrequencyError: If the frequency is unknown.

    Example:
        >>> resolve_bucket("month", date(2024, 1, 15), previous=True).name
        'vmsnap-backup-monthly-2023-12'
    """
    bucket = _current_bucket(Frequency.parse(frequency), reference)
    return previous_bucket(bucket) if previous else bucket


def period_start(bucket: PeriodBucket) -> date:
    """Return the first day of a bucket's period."""
    frequency = bucket.frequency

    if frequency == Frequency.MONTH:
        return date(bucket.year, bucket.index, 1)
    if frequency == Frequency.QUARTER:
        return date(bucket.year, 3 * (bucket.index - 1) + 1, 1)
    if frequency == Frequency.BI_ANNUAL and bucket.index == 2:
        return date(bucket.year, 1, 1) + timedelta(days=BI_ANNUAL_SPLIT_DAY - 1)
    return date(bucket.year, 1, 1)


def elapsed_days(frequency: Frequency | str, reference: date) -> int:
    """Count whole days elapsed since the start of the current period.

    The first day of a period counts as 0 elapsed days.

    Raises:
        InvalidFrequencyError: If the frequency is unknown.
    """
    return (reference - period_start(resolve_bucket(frequency, reference))).days
