"""
Projector — extrapolate an in-progress month to a full-month estimate.

Projection formula:
    projection_factor = days_in_month / days_of_data
    projected_x       = x * projection_factor   for x in PROJECTED_FIELDS

Canceled orders are not scaled and the cancellation rate keeps its
recorded value; the other ratios are rederived from the projected
absolutes. Projection only happens when 0 < days_of_data < days_in_month;
a missing, zero or full day count leaves the period as is.

Only the single most recent period of a series is ever projected. Closed
months can carry a days_of_data value when they were back-filled, and
projecting them would silently rewrite history.

Version: projector_v1
"""

from datetime import date
from typing import Optional

import structlog

from opsboard.engine.ratios import ratio_values
from opsboard.models.performance import PeriodKey
from opsboard.models.periods import AggregatedPeriod, ProjectedPeriod

logger = structlog.get_logger()

PROJECTED_FIELDS = (
    "revenue",
    "orders",
    "profit",
    "ad_spend",
    "sessions",
)

_PROJECTION_FIELDS = {"days_in_month", "projection_factor", "is_projected"}


def as_actuals(period: AggregatedPeriod) -> ProjectedPeriod:
    """The period's recorded values as an unprojected ProjectedPeriod."""
    if isinstance(period, ProjectedPeriod):
        period = AggregatedPeriod(**period.model_dump(exclude=_PROJECTION_FIELDS))
    return ProjectedPeriod(
        **period.model_dump(),
        days_in_month=period.period.days_in_month,
        projection_factor=1.0,
        is_projected=False,
    )


class Projector:
    """
    Builds ProjectedPeriods from AggregatedPeriods.

    The reference date is the only notion of "today" the engine has; it is
    passed in explicitly so identical inputs always give identical outputs.

    Example:
        >>> projector = Projector()
        >>> kpi = projector.project(series[-1], reference_date=date(2025, 6, 15))
        >>> kpi.is_projected
        True
    """

    def __init__(self):
        self.logger = structlog.get_logger()

    def project(
        self,
        period: AggregatedPeriod,
        reference_date: Optional[date] = None,
    ) -> ProjectedPeriod:
        """
        Project one period to a full month when it is partial.

        Args:
            period: Aggregated totals, normally the latest of a series
            reference_date: "Today" (defaults to date.today()); months that
                start after it are never projected

        Returns:
            ProjectedPeriod. Unchanged values and ``is_projected=False`` when
            the period is historical, complete, or has no usable day count.
        """
        if isinstance(period, ProjectedPeriod):
            if period.is_projected:
                return period
            period = AggregatedPeriod(**period.model_dump(exclude=_PROJECTION_FIELDS))

        days_in_month = period.period.days_in_month
        factor = self.projection_factor(period, reference_date)
        if factor is None:
            return as_actuals(period)

        values = period.model_dump()
        for field in PROJECTED_FIELDS:
            values[field] = values[field] * factor
        values.update(ratio_values(values))
        # Canceled orders are not projected, so the rate stays at actuals
        values["cancel_rate"] = period.cancel_rate

        self.logger.debug(
            "projection_applied",
            group=period.group_name,
            period=period.label,
            days_of_data=period.days_of_data,
            days_in_month=days_in_month,
            factor=factor,
        )
        return ProjectedPeriod(
            **values,
            days_in_month=days_in_month,
            projection_factor=factor,
            is_projected=True,
        )

    def projection_factor(
        self,
        period: AggregatedPeriod,
        reference_date: Optional[date] = None,
    ) -> Optional[float]:
        """
        Factor for a period, or None when it must not be projected.
        """
        if not period.is_latest:
            return None

        days_of_data = period.days_of_data
        days_in_month = period.period.days_in_month
        if days_of_data is None or not 0 < days_of_data < days_in_month:
            return None

        today = reference_date or date.today()
        if period.period > PeriodKey.from_date(today):
            self.logger.debug(
                "projection_skipped_future_period",
                period=period.label,
                reference_date=today.isoformat(),
            )
            return None

        return days_in_month / days_of_data

    def project_latest(
        self,
        series: list[AggregatedPeriod],
        reference_date: Optional[date] = None,
    ) -> list[ProjectedPeriod]:
        """
        Project the ``is_latest`` period of a series; history passes through.

        Returns a new list, same order as ``series``.
        """
        return [self.project(p, reference_date) for p in series]


_default_projector = Projector()


def project(
    period: AggregatedPeriod,
    reference_date: Optional[date] = None,
) -> ProjectedPeriod:
    """Project with the default Projector. See Projector.project."""
    return _default_projector.project(period, reference_date)
