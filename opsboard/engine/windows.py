"""
Time window selection for trend charts, tables and timeline views.

select_window() slices a chronological series to a trailing window. Trend
charts drop the in-progress month first (exclude_current=True) so a
partial or projected month never bends a historical trend line; KPI and
projection views want that latest month and pass exclude_current=False.

The input must already be sorted oldest to newest; nothing here re-sorts.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from typing import TypeVar, Union

from opsboard.models.enums import TimeRange
from opsboard.models.performance import PerformanceRecord, PeriodKey

T = TypeVar("T")


def months_for(time_range: Union[TimeRange, str, int]) -> int:
    """
    Number of months in a range token ("3m", "12m", ...) or an int.

    Raises:
        ValueError: For an unknown range token
    """
    if isinstance(time_range, int):
        return time_range
    return TimeRange(time_range).months


def select_window(
    series: Sequence[T],
    months_back: Union[TimeRange, str, int],
    exclude_current: bool,
) -> list[T]:
    """
    Trailing window of a chronological series.

    Args:
        series: Periods sorted oldest to newest
        months_back: How many periods to keep
        exclude_current: Drop the most recent period before counting back

    Returns:
        At most ``months_back`` periods, oldest to newest. Empty when
        ``months_back`` <= 0 or nothing is left after exclusion.
    """
    count = months_for(months_back)
    history = list(series[:-1]) if exclude_current else list(series)
    if count <= 0 or not history:
        return []
    return history[-count:]


def trailing_period_keys(
    reference_date: date,
    months: Union[TimeRange, str, int],
) -> list[PeriodKey]:
    """
    Closed months for a timeline view, oldest first.

    The window ends with the month before ``reference_date``'s month, so an
    in-progress month is never part of a multi-month total.
    """
    count = months_for(months)
    keys = []
    key = PeriodKey.from_date(reference_date).previous()
    for _ in range(max(count, 0)):
        keys.append(key)
        key = key.previous()
    return keys[::-1]


def latest_period_keys(
    records: Iterable[PerformanceRecord],
    months: Union[TimeRange, str, int],
) -> list[PeriodKey]:
    """
    The most recent ``months`` distinct months present in the data,
    oldest first. Unlike trailing_period_keys, this includes the latest
    (possibly in-progress) month.
    """
    count = months_for(months)
    if count <= 0:
        return []
    present = sorted({r.period for r in records})
    return present[-count:]


def filter_records(
    records: Iterable[PerformanceRecord],
    periods: Iterable[PeriodKey],
) -> list[PerformanceRecord]:
    """Records whose month is one of ``periods``, input order preserved."""
    wanted = set(periods)
    return [r for r in records if r.period in wanted]
