"""
Aggregator — sum raw monthly records into group totals.

Given raw PerformanceRecords for many clients and an EntityGroup selection,
the aggregator keeps records of included members only, buckets them by
period key, sums the absolute fields of each bucket and then derives the
ratio metrics from those sums. Ratios are never averaged across clients:
averaging per-client AOVs weights a tiny store the same as a large one.

The fields that are summed (and the ones that are averaged) come from a
field table, so every dashboard view shares this one implementation:

    SUMMED_FIELDS   -> element-wise sum across member records
    AVERAGED_FIELDS -> mean per client (already per-client averages)

Output has one entry per distinct period present in the filtered input,
oldest first. Months with no contributing records are not gap-filled.
"""

from collections.abc import Callable, Iterable
from typing import Optional

import structlog

from opsboard.engine.ratios import ratio_values
from opsboard.models.groups import EntityGroup
from opsboard.models.performance import PerformanceRecord, PeriodKey, period_key
from opsboard.models.periods import AggregatedPeriod, EntityTotals

logger = structlog.get_logger()

SUMMED_FIELDS: tuple[str, ...] = (
    "revenue",
    "orders",
    "orders_canceled",
    "profit",
    "ad_spend",
    "sessions",
)

AVERAGED_FIELDS: tuple[str, ...] = ("avg_fulfillment_days",)

PeriodKeyFn = Callable[[PerformanceRecord], PeriodKey]


class Aggregator:
    """
    Sums PerformanceRecords per (group, period) using a field table.

    Attributes:
        summed_fields: Absolute fields summed across member records
        averaged_fields: Fields averaged across member records
        logger: Structured logger for observability

    Example:
        >>> aggregator = Aggregator()
        >>> series = aggregator.aggregate(records, group)
        >>> series[-1].is_latest
        True
    """

    def __init__(
        self,
        summed_fields: Iterable[str] = SUMMED_FIELDS,
        averaged_fields: Iterable[str] = AVERAGED_FIELDS,
    ):
        """
        Args:
            summed_fields: Fields to sum (default SUMMED_FIELDS)
            averaged_fields: Fields to average (default AVERAGED_FIELDS)

        Raises:
            ValueError: If a field is listed as both summed and averaged
        """
        self.summed_fields = tuple(summed_fields)
        self.averaged_fields = tuple(averaged_fields)
        overlap = set(self.summed_fields) & set(self.averaged_fields)
        if overlap:
            raise ValueError(
                f"Fields cannot be both summed and averaged: {sorted(overlap)}"
            )
        self.logger = structlog.get_logger()

    def aggregate(
        self,
        records: Iterable[PerformanceRecord],
        group: EntityGroup,
        period_key_fn: PeriodKeyFn = period_key,
    ) -> list[AggregatedPeriod]:
        """
        Aggregate one group's records into per-period totals.

        Args:
            records: Raw records for any number of clients
            group: Selection; only included members are summed
            period_key_fn: Maps a record to its period (default: calendar month)

        Returns:
            AggregatedPeriods oldest to newest, the last flagged ``is_latest``.
            Empty when the group has no included members or no matching
            records; callers treat that as insufficient data.
        """
        included = group.included_ids
        if not included:
            self.logger.debug("aggregation_skipped", group=group.name, reason="no_members")
            return []

        buckets: dict[PeriodKey, list[PerformanceRecord]] = {}
        for record in records:
            if record.entity_id not in included:
                continue
            buckets.setdefault(period_key_fn(record), []).append(record)

        if not buckets:
            self.logger.debug("aggregation_skipped", group=group.name, reason="no_records")
            return []

        ordered = sorted(buckets)
        latest = ordered[-1]
        series = [
            self._build_period(group.name, key, buckets[key], is_latest=key == latest)
            for key in ordered
        ]

        self.logger.debug(
            "aggregation_complete",
            group=group.name,
            members=len(included),
            periods=len(series),
            latest=latest.label,
        )
        return series

    def aggregate_by_entity(
        self,
        records: Iterable[PerformanceRecord],
        periods: Optional[Iterable[PeriodKey]] = None,
    ) -> list[EntityTotals]:
        """
        Total each client across the selected periods.

        Args:
            records: Raw records
            periods: Months to include (None = every month present)

        Returns:
            One EntityTotals per client, in order of first appearance.
        """
        selected = set(periods) if periods is not None else None
        by_entity: dict[str, list[PerformanceRecord]] = {}
        for record in records:
            if selected is not None and record.period not in selected:
                continue
            by_entity.setdefault(record.entity_id, []).append(record)

        return [self._build_totals(entity_id, rows) for entity_id, rows in by_entity.items()]

    def aggregate_groups(
        self,
        records: Iterable[PerformanceRecord],
        groups: Iterable[EntityGroup],
        periods: Optional[Iterable[PeriodKey]] = None,
    ) -> list[EntityTotals]:
        """
        Total several groups (e.g. every brand) across the selected periods.

        Groups without any contributing record are omitted.
        """
        selected = set(periods) if periods is not None else None
        rows = [r for r in records if selected is None or r.period in selected]

        totals = []
        for group in groups:
            included = group.included_ids
            members = [r for r in rows if r.entity_id in included]
            if members:
                totals.append(self._build_totals(group.name, members))
        return totals

    # =========================================================================
    # Summing helpers
    # =========================================================================

    def _sum_fields(
        self, rows: list[PerformanceRecord], divisor: Optional[int] = None
    ) -> dict[str, float]:
        """
        Sum the summed fields; average the averaged fields over ``divisor``
        (default: the number of rows).
        """
        totals = {f: 0.0 for f in self.summed_fields}
        averaged = {f: 0.0 for f in self.averaged_fields}
        for row in rows:
            for f in self.summed_fields:
                totals[f] += getattr(row, f)
            for f in self.averaged_fields:
                averaged[f] += getattr(row, f)
        count = divisor if divisor is not None else len(rows)
        if count:
            for f in self.averaged_fields:
                totals[f] = averaged[f] / count
        return totals

    def _build_period(
        self,
        group_name: str,
        key: PeriodKey,
        rows: list[PerformanceRecord],
        is_latest: bool,
    ) -> AggregatedPeriod:
        # Fulfillment is averaged per client, not per row
        entity_count = len({r.entity_id for r in rows})
        totals = self._sum_fields(rows, divisor=entity_count)
        # First member that reports partial-month coverage sets the period's.
        days_of_data = next(
            (r.days_of_data for r in rows if r.days_of_data and r.days_of_data > 0),
            None,
        )
        return AggregatedPeriod(
            group_name=group_name,
            period=key,
            days_of_data=days_of_data,
            entity_count=entity_count,
            record_count=len(rows),
            is_latest=is_latest,
            **totals,
            **ratio_values(totals),
        )

    def _build_totals(self, entity_id: str, rows: list[PerformanceRecord]) -> EntityTotals:
        totals = self._sum_fields(rows)
        periods = sorted({r.period for r in rows})
        contributing = tuple(sorted({r.entity_id for r in rows}))
        return EntityTotals(
            entity_id=entity_id,
            first_period=periods[0] if periods else None,
            last_period=periods[-1] if periods else None,
            period_count=len(periods),
            record_count=len(rows),
            contributing_entities=contributing,
            **totals,
            **ratio_values(totals),
        )


_default_aggregator = Aggregator()


def aggregate(
    records: Iterable[PerformanceRecord],
    group: EntityGroup,
    period_key_fn: PeriodKeyFn = period_key,
) -> list[AggregatedPeriod]:
    """Aggregate with the default field table. See Aggregator.aggregate."""
    return _default_aggregator.aggregate(records, group, period_key_fn)
