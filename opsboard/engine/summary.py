"""
Group Summary — everything a dashboard renders for one selection.

Pipeline for a group view:
    records -> aggregate -> project latest -> MoM / YoY
                         -> trend window (latest month excluded)
                         -> monthly table (newest first)

When the latest month is projected the table shows it twice: an
"(Actuals)" row with the recorded month-to-date values and a "(Proj.)" row
with the full-month estimate. Both carry indicators against the month
before.

Also hosts the cross-client views built from the same primitives:
client leaderboards, brand leaderboards, brand benchmarks, top movers and
metric drift alerts.

Version: summary_v1
"""

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional, Union

import structlog

from opsboard.config import get_settings
from opsboard.engine.aggregator import Aggregator
from opsboard.engine.comparator import change_indicators, compare, compare_latest
from opsboard.engine.grouping import brand_groups
from opsboard.engine.projector import Projector, as_actuals
from opsboard.engine.ranker import rank_totals, split_movers, threshold_filter
from opsboard.engine.windows import latest_period_keys, select_window
from opsboard.models.accounts import AccountDetail
from opsboard.models.enums import MetricKey, RankDirection, TimeRange
from opsboard.models.groups import EntityGroup
from opsboard.models.performance import PerformanceRecord, PeriodKey
from opsboard.models.periods import (
    AggregatedPeriod,
    BrandBenchmark,
    ChangeResult,
    GroupSummary,
    MoverBoard,
    ProjectedPeriod,
    RankedEntity,
    TableRow,
)

logger = structlog.get_logger()

RangeArg = Union[TimeRange, str, int]

# Brand comparison cards
BENCHMARK_METRICS: tuple[str, ...] = (
    "revenue",
    "sessions",
    "conv_rate",
    "aov",
    "orders",
    "roas",
    "cancel_rate",
    "profit",
    "ad_spend",
    "avg_fulfillment_days",
)


class SummaryBuilder:
    """
    Builds GroupSummaries and cross-client leaderboards.

    Attributes:
        aggregator: Aggregator used for every total
        projector: Projector applied to each series' latest month
        logger: Structured logger for observability

    Example:
        >>> builder = SummaryBuilder()
        >>> summary = builder.build(records, group, reference_date=date(2025, 6, 15))
        >>> summary.kpi_period.is_projected
        True
    """

    def __init__(
        self,
        aggregator: Optional[Aggregator] = None,
        projector: Optional[Projector] = None,
    ):
        self.aggregator = aggregator or Aggregator()
        self.projector = projector or Projector()
        self.logger = structlog.get_logger()

    def build(
        self,
        records: Iterable[PerformanceRecord],
        group: EntityGroup,
        reference_date: Optional[date] = None,
        chart_range: Optional[RangeArg] = None,
        table_range: Optional[RangeArg] = None,
    ) -> GroupSummary:
        """
        Summarize one group.

        Args:
            records: Raw records for any number of clients
            group: Selection to aggregate
            reference_date: "Today" for projection (default: date.today())
            chart_range: Trend window (default: settings.default_chart_range)
            table_range: Table window (default: settings.default_table_range)

        Returns:
            GroupSummary. When the group has no data only ``group_name`` is
            set and ``has_data`` is False.
        """
        settings = get_settings()
        if chart_range is None:
            chart_range = settings.default_chart_range
        if table_range is None:
            table_range = settings.default_table_range
        today = reference_date or date.today()

        series = self.aggregator.aggregate(records, group)
        if not series:
            self.logger.info("group_summary_empty", group=group.name)
            return GroupSummary(group_name=group.name)

        projected = self.projector.project_latest(series, today)
        kpi_period = projected[-1]
        comparison = compare_latest(series, today, projector=self.projector)
        trend = select_window(series, chart_range, exclude_current=True)
        table = self.build_table(series, projected, table_range)

        self.logger.info(
            "group_summary_built",
            group=group.name,
            periods=len(series),
            latest=kpi_period.label,
            projected=kpi_period.is_projected,
            trend_points=len(trend),
            table_rows=len(table),
        )
        return GroupSummary(
            group_name=group.name,
            series=series,
            kpi_period=kpi_period,
            comparison=comparison,
            trend=trend,
            table=table,
        )

    def build_table(
        self,
        series: Sequence[AggregatedPeriod],
        projected: Sequence[ProjectedPeriod],
        table_range: RangeArg,
    ) -> list[TableRow]:
        """
        Monthly table rows, newest first.

        Args:
            series: Aggregated periods, oldest to newest
            projected: The same periods after project_latest
            table_range: Months to show

        Each row's indicators compare it with the period before it in the
        full series, so the oldest row shown still gets arrows when older
        data exists.
        """
        # Window counts months; a projected month adds a second row
        count = len(select_window(series, table_range, exclude_current=False))
        if not count:
            return []

        rows = []
        for index in range(len(series) - count, len(series)):
            previous = series[index - 1] if index > 0 else None
            period = projected[index]
            if period.is_projected:
                actuals = as_actuals(series[index])
                rows.append(
                    TableRow(
                        label=f"{period.label} (Proj.)",
                        row_type="projection",
                        period=period,
                        changes=change_indicators(period, previous),
                    )
                )
                rows.append(
                    TableRow(
                        label=f"{period.label} (Actuals)",
                        row_type="actuals",
                        period=actuals,
                        changes=change_indicators(actuals, previous),
                    )
                )
            else:
                rows.append(
                    TableRow(
                        label=period.label,
                        row_type="month",
                        period=period,
                        changes=change_indicators(period, previous),
                    )
                )

        rows.reverse()
        return rows

    # =========================================================================
    # Cross-client views
    # =========================================================================

    def entity_leaderboard(
        self,
        records: Iterable[PerformanceRecord],
        metric: Union[MetricKey, str] = MetricKey.REVENUE,
        periods: Optional[Iterable[PeriodKey]] = None,
        direction: Union[RankDirection, str] = RankDirection.DESC,
        limit: Optional[int] = None,
    ) -> list[RankedEntity]:
        """
        Rank clients by a metric totalled over ``periods``.

        ``limit`` defaults to settings.leaderboard_limit.
        """
        if limit is None:
            limit = get_settings().leaderboard_limit
        totals = self.aggregator.aggregate_by_entity(records, periods)
        return rank_totals(totals, metric, direction, limit)

    def brand_leaderboard(
        self,
        records: Iterable[PerformanceRecord],
        accounts: Iterable[AccountDetail],
        metric: Union[MetricKey, str] = MetricKey.REVENUE,
        periods: Optional[Iterable[PeriodKey]] = None,
        direction: Union[RankDirection, str] = RankDirection.DESC,
        limit: Optional[int] = None,
    ) -> list[RankedEntity]:
        """
        Rank brands by a metric totalled across their single-brand stores.
        """
        if limit is None:
            limit = get_settings().leaderboard_limit
        groups = brand_groups(accounts)
        totals = self.aggregator.aggregate_groups(records, groups, periods)
        return rank_totals(totals, metric, direction, limit)

    def brand_benchmark(
        self,
        records: Iterable[PerformanceRecord],
        group: EntityGroup,
        client: str,
        periods: Optional[Iterable[PeriodKey]] = None,
        metrics: Sequence[Union[MetricKey, str]] = BENCHMARK_METRICS,
    ) -> BrandBenchmark:
        """
        Compare one client with the average of the group's included peers.

        Every client is first totalled across ``periods``. The peer average
        is the plain mean of those per-client totals and ratios, over the
        included members that have data; the client counts toward it only
        when it is itself an included member.

        Args:
            records: Raw records
            group: Peer group, e.g. from group_for_brand(); toggled-off
                members are left out of the average
            client: Client to benchmark
            periods: Months to total (None = every month present)
            metrics: Metrics to compare (default BENCHMARK_METRICS)

        Returns:
            BrandBenchmark. A change is "N/A" when the client has no data,
            no peer has data, or that metric's peer average is zero.

        Raises:
            ValueError: If a metric is not a MetricKey
        """
        names = [MetricKey.parse(m).value for m in metrics]
        totals = {t.entity_id: t for t in self.aggregator.aggregate_by_entity(records, periods)}

        included = group.included_ids
        peers = [totals[e] for e in group.member_ids if e in included and e in totals]
        target = totals.get(client)

        peer_average = {}
        if peers:
            peer_average = {
                name: sum(p.metric_value(name) for p in peers) / len(peers) for name in names
            }
        client_values = {name: target.metric_value(name) for name in names} if target else {}

        changes = {}
        for name in names:
            reference = peer_average.get(name) if target is not None else None
            changes[name] = compare(client_values.get(name, 0.0), reference, name)

        self.logger.info(
            "brand_benchmark_built",
            group=group.name,
            client=client,
            peers=len(peers),
            has_client_data=target is not None,
        )
        return BrandBenchmark(
            client=client,
            group_name=group.name,
            peers=tuple(p.entity_id for p in peers),
            client_values=client_values,
            peer_average=peer_average,
            changes=changes,
        )

    def latest_changes(
        self,
        records: Iterable[PerformanceRecord],
        metric: Union[MetricKey, str],
        reference_date: Optional[date] = None,
        group: Optional[EntityGroup] = None,
    ) -> tuple[Optional[PeriodKey], list[tuple[str, ChangeResult]], bool]:
        """
        Per-client change of one metric, latest month vs the month before.

        The latest month is the most recent month present in the records.
        Each client's latest month is projected on its own day count before
        comparing. Clients without a record in the latest month are left
        out; clients without one in the previous month get "N/A".

        Returns:
            (latest month or None when there are no records,
             [(client, ChangeResult), ...] in first-appearance order,
             whether any client's latest month was projected)
        """
        rows = list(records)
        if group is not None:
            included = group.included_ids
            rows = [r for r in rows if r.entity_id in included]

        latest_keys = latest_period_keys(rows, 1)
        if not latest_keys:
            return None, [], False
        latest = latest_keys[0]
        previous = latest.previous()
        today = reference_date or date.today()

        by_entity: dict[str, list[PerformanceRecord]] = {}
        for record in rows:
            if record.period in (latest, previous):
                by_entity.setdefault(record.entity_id, []).append(record)

        changes = []
        any_projected = False
        for entity_id, entity_rows in by_entity.items():
            client = EntityGroup.from_names(entity_id, [entity_id])
            series = self.aggregator.aggregate(entity_rows, client)
            if series[-1].period != latest:
                continue
            current = self.projector.project(series[-1], today)
            any_projected = any_projected or current.is_projected
            reference = series[0].metric_value(metric) if len(series) > 1 else None
            changes.append((entity_id, compare(current.metric_value(metric), reference, metric)))

        return latest, changes, any_projected

    def client_movers(
        self,
        records: Iterable[PerformanceRecord],
        metric: Union[MetricKey, str] = MetricKey.REVENUE,
        reference_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> MoverBoard:
        """Top gainers and losers, latest (projected) month vs the month before."""
        if limit is None:
            limit = get_settings().leaderboard_limit
        name = MetricKey.parse(metric).value
        latest, changes, projected = self.latest_changes(records, name, reference_date)
        if latest is None:
            return MoverBoard(metric_key=name)

        gainers, losers = split_movers(changes, limit)
        suffix = " (Proj)" if projected else ""
        label = f"{latest.label}{suffix} vs {latest.previous().label}"

        self.logger.info(
            "client_movers_built",
            metric=name,
            label=label,
            gainers=len(gainers),
            losers=len(losers),
        )
        return MoverBoard(metric_key=name, label=label, gainers=gainers, losers=losers)

    def metric_drift_alerts(
        self,
        records: Iterable[PerformanceRecord],
        group: EntityGroup,
        metric: Union[MetricKey, str],
        threshold: Optional[float] = None,
        reference_date: Optional[date] = None,
    ) -> list[RankedEntity]:
        """
        Group members whose metric moved at least ``threshold`` percent.

        Args:
            records: Raw records
            group: Clients to check; only included members
            metric: Metric to compare
            threshold: Percent; 0 lists every client (default:
                settings.default_alert_threshold)
            reference_date: "Today" for projection

        Returns:
            Largest absolute change first. Split by ``value`` sign for
            increasing / decreasing lists.
        """
        if threshold is None:
            threshold = get_settings().default_alert_threshold
        name = MetricKey.parse(metric).value
        _, changes, _ = self.latest_changes(records, name, reference_date, group)
        alerts = threshold_filter(changes, threshold)
        self.logger.info(
            "metric_drift_alerts_built",
            group=group.name,
            metric=name,
            threshold=threshold,
            alerts=len(alerts),
        )
        return alerts


_default_builder = SummaryBuilder()


def build_summary(
    records: Iterable[PerformanceRecord],
    group: EntityGroup,
    reference_date: Optional[date] = None,
    chart_range: Optional[RangeArg] = None,
    table_range: Optional[RangeArg] = None,
) -> GroupSummary:
    """Summarize with the default builder. See SummaryBuilder.build."""
    return _default_builder.build(records, group, reference_date, chart_range, table_range)


def metric_drift_alerts(
    records: Iterable[PerformanceRecord],
    group: EntityGroup,
    metric: Union[MetricKey, str],
    threshold: Optional[float] = None,
    reference_date: Optional[date] = None,
) -> list[RankedEntity]:
    return _default_builder.metric_drift_alerts(records, group, metric, threshold, reference_date)


def client_movers(
    records: Iterable[PerformanceRecord],
    metric: Union[MetricKey, str] = MetricKey.REVENUE,
    reference_date: Optional[date] = None,
    limit: Optional[int] = None,
) -> MoverBoard:
    return _default_builder.client_movers(records, metric, reference_date, limit)


def entity_leaderboard(
    records: Iterable[PerformanceRecord],
    metric: Union[MetricKey, str] = MetricKey.REVENUE,
    periods: Optional[Iterable[PeriodKey]] = None,
    direction: Union[RankDirection, str] = RankDirection.DESC,
    limit: Optional[int] = None,
) -> list[RankedEntity]:
    return _default_builder.entity_leaderboard(records, metric, periods, direction, limit)


def brand_leaderboard(
    records: Iterable[PerformanceRecord],
    accounts: Iterable[AccountDetail],
    metric: Union[MetricKey, str] = MetricKey.REVENUE,
    periods: Optional[Iterable[PeriodKey]] = None,
    direction: Union[RankDirection, str] = RankDirection.DESC,
    limit: Optional[int] = None,
) -> list[RankedEntity]:
    return _default_builder.brand_leaderboard(
        records, accounts, metric, periods, direction, limit
    )


def brand_benchmark(
    records: Iterable[PerformanceRecord],
    group: EntityGroup,
    client: str,
    periods: Optional[Iterable[PeriodKey]] = None,
    metrics: Sequence[Union[MetricKey, str]] = BENCHMARK_METRICS,
) -> BrandBenchmark:
    return _default_builder.brand_benchmark(records, group, client, periods, metrics)
