"""
Comparator — period-over-period deltas with metric polarity.

    percent_change = (current - reference) / reference * 100

A zero, missing or non-finite reference makes relative change undefined;
the change is then reported as "N/A", never 0.

Whether a change is good news depends on the metric. METRIC_POLARITY maps
each metric to ``higher_is_better``: revenue up is favorable, ad spend up
is not. Exactly zero change is never favorable.

Two comparisons are made for the latest period of a series:
1. Month over month: against the immediately preceding calendar month
2. Year over year: against exactly (year - 1, month)

Both are located by exact period match. A missing month makes that
comparison "N/A"; no neighbouring month is substituted.

Version: comparator_v2
"""

import math
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional, Union

import structlog

from opsboard.engine.projector import Projector
from opsboard.models.enums import ChangeDirection, MetricKey
from opsboard.models.performance import PeriodKey
from opsboard.models.periods import (
    NOT_AVAILABLE,
    AggregatedPeriod,
    ChangeResult,
    PeriodComparison,
)

logger = structlog.get_logger()

METRIC_POLARITY: dict[str, bool] = {
    MetricKey.REVENUE.value: True,
    MetricKey.PROFIT.value: True,
    MetricKey.ORDERS.value: True,
    MetricKey.SESSIONS.value: True,
    MetricKey.AOV.value: True,
    MetricKey.ROAS.value: True,
    MetricKey.CONV_RATE.value: True,
    MetricKey.PROFIT_MARGIN.value: True,
    MetricKey.PROFIT_PER_ORDER.value: True,
    MetricKey.AD_SPEND.value: False,
    MetricKey.CANCEL_RATE.value: False,
    MetricKey.AVG_FULFILLMENT_DAYS.value: False,
    MetricKey.ORDERS_CANCELED.value: False,
}

# KPI tiles compare these; tables additionally show the cancellation and
# fulfillment columns.
KPI_METRICS: tuple[str, ...] = (
    "revenue",
    "orders",
    "roas",
    "aov",
    "profit",
    "sessions",
    "ad_spend",
    "conv_rate",
)

TABLE_INDICATOR_METRICS: tuple[str, ...] = (
    "revenue",
    "profit",
    "orders",
    "sessions",
    "conv_rate",
    "aov",
    "roas",
    "cancel_rate",
    "avg_fulfillment_days",
)


def _metric_name(metric_key: Union[MetricKey, str]) -> str:
    return metric_key.value if isinstance(metric_key, MetricKey) else str(metric_key)


def higher_is_better(metric_key: Union[MetricKey, str]) -> bool:
    """
    Polarity lookup. Unknown metrics default to higher-is-better.
    """
    name = _metric_name(metric_key)
    polarity = METRIC_POLARITY.get(name)
    if polarity is None:
        logger.warning("unknown_metric_polarity", metric=name)
        return True
    return polarity


def _finite_or_zero(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def compare(
    current: float,
    reference: Optional[float],
    metric_key: Union[MetricKey, str],
) -> ChangeResult:
    """
    Compare a current value against a reference value for one metric.

    Args:
        current: Current-period value (non-finite treated as 0)
        reference: Reference-period value, or None when there is none
        metric_key: Metric name, used for the polarity lookup

    Returns:
        ChangeResult; ``percent_change`` is "N/A" when the reference is
        None, zero or non-finite.

    Example:
        >>> compare(1200, 1000, "revenue").percent_change
        20.0
        >>> compare(500, 400, "ad_spend").is_favorable
        False
    """
    name = _metric_name(metric_key)
    current_value = _finite_or_zero(current)
    reference_value = None if reference is None else _finite_or_zero(reference)

    if not reference_value:
        return ChangeResult(
            metric_key=name,
            current_value=current_value,
            reference_value=reference_value,
            percent_change=NOT_AVAILABLE,
            is_favorable=False,
        )

    percent_change = (current_value - reference_value) / reference_value * 100
    if not math.isfinite(percent_change):
        return ChangeResult(
            metric_key=name,
            current_value=current_value,
            reference_value=reference_value,
            percent_change=NOT_AVAILABLE,
            is_favorable=False,
        )

    if higher_is_better(name):
        favorable = percent_change > 0
    else:
        favorable = percent_change < 0

    return ChangeResult(
        metric_key=name,
        current_value=current_value,
        reference_value=reference_value,
        percent_change=percent_change,
        is_favorable=favorable,
    )


def compare_periods(
    current: AggregatedPeriod,
    reference: Optional[AggregatedPeriod],
    metrics: Iterable[Union[MetricKey, str]] = KPI_METRICS,
) -> dict[str, ChangeResult]:
    """
    Compare every metric of two periods. A missing reference period yields
    "N/A" for every metric.
    """
    results = {}
    for metric in metrics:
        name = _metric_name(metric)
        ref_value = reference.metric_value(name) if reference is not None else None
        results[name] = compare(current.metric_value(name), ref_value, name)
    return results


def find_period(
    series: Iterable[AggregatedPeriod], key: PeriodKey
) -> Optional[AggregatedPeriod]:
    """Exact (year, month) lookup."""
    for period in series:
        if period.period == key:
            return period
    return None


def find_previous_period(
    series: Iterable[AggregatedPeriod], period: AggregatedPeriod
) -> Optional[AggregatedPeriod]:
    """The immediately preceding calendar month, if present in the series."""
    return find_period(series, period.period.previous())


def find_year_ago_period(
    series: Iterable[AggregatedPeriod], period: AggregatedPeriod
) -> Optional[AggregatedPeriod]:
    """Exactly (year - 1, month), if present. Never a neighbouring month."""
    return find_period(series, period.period.year_ago())


def compare_latest(
    series: Sequence[AggregatedPeriod],
    reference_date: Optional[date] = None,
    metrics: Iterable[Union[MetricKey, str]] = KPI_METRICS,
    projector: Optional[Projector] = None,
) -> Optional[PeriodComparison]:
    """
    MoM and YoY comparison for the latest period of a series.

    The latest period is projected first (when partial) so a half-finished
    month is compared as a full-month estimate against closed months.

    Returns:
        PeriodComparison, or None for an empty series.
    """
    latest = next((p for p in series if p.is_latest), None)
    if latest is None:
        return None

    projector = projector or Projector()
    current = projector.project(latest, reference_date)
    previous = find_previous_period(series, latest)
    year_ago = find_year_ago_period(series, latest)
    metrics = tuple(metrics)

    comparison = PeriodComparison(
        period=latest.period,
        previous_period=previous.period if previous is not None else None,
        year_ago_period=year_ago.period if year_ago is not None else None,
        mom=compare_periods(current, previous, metrics),
        yoy=compare_periods(current, year_ago, metrics),
    )

    logger.debug(
        "latest_period_compared",
        group=latest.group_name,
        period=latest.label,
        projected=current.is_projected,
        has_previous=previous is not None,
        has_year_ago=year_ago is not None,
    )
    return comparison


def change_indicators(
    current: AggregatedPeriod,
    previous: Optional[AggregatedPeriod],
    metrics: Iterable[Union[MetricKey, str]] = TABLE_INDICATOR_METRICS,
) -> dict[str, ChangeDirection]:
    """
    Table-row arrows: positive / negative / neutral per metric.

    Neutral when the values are equal or the previous value is 0. No
    indicators at all when there is no previous row.
    """
    if previous is None:
        return {}

    indicators = {}
    for metric in metrics:
        name = _metric_name(metric)
        cur = _finite_or_zero(current.metric_value(name))
        prev = _finite_or_zero(previous.metric_value(name))
        if cur == prev or prev == 0:
            indicators[name] = ChangeDirection.NEUTRAL
        elif (cur > prev) == higher_is_better(name):
            indicators[name] = ChangeDirection.POSITIVE
        else:
            indicators[name] = ChangeDirection.NEGATIVE
    return indicators
