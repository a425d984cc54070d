"""
Aggregated, projected and comparison models.

These are the engine's outputs. All of them are frozen: every render pass
builds new instances from the raw records instead of mutating old ones.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import ChangeDirection, MetricKey
from .performance import PeriodKey

NOT_AVAILABLE = "N/A"

PercentChange = Union[float, Literal["N/A"]]


class DerivedRatios(BaseModel):
    """
    Ratio metrics derived from summed absolutes.

    Every field is finite; a zero or non-finite denominator yields 0.
    """

    model_config = ConfigDict(frozen=True)

    aov: float = Field(default=0.0, description="Revenue per order")
    roas: float = Field(default=0.0, description="Revenue per unit of ad spend")
    conv_rate: float = Field(default=0.0, description="Orders per session, percent")
    cancel_rate: float = Field(default=0.0, description="Canceled per order, percent")
    profit_margin: float = Field(default=0.0, description="Profit per revenue, percent")
    profit_per_order: float = Field(default=0.0, description="Profit per order")


class AggregatedPeriod(DerivedRatios):
    """
    Totals for one group over one calendar month.

    Absolute fields are element-wise sums of the member records; ratio
    fields are recomputed from those sums, never averaged across members.

    Attributes:
        group_name: Name of the entity group (brand, manager, custom set)
        period: Calendar month of the totals
        entity_count: Distinct clients that contributed a record
        record_count: Records summed into this period
        days_of_data: Days covered when the month is still in progress
        is_latest: True only for the most recent period in its series
    """

    group_name: str = Field(description="Entity group the totals belong to")
    period: PeriodKey = Field(description="Calendar month")
    revenue: float = 0.0
    orders: float = 0.0
    orders_canceled: float = 0.0
    profit: float = 0.0
    ad_spend: float = 0.0
    sessions: float = 0.0
    avg_fulfillment_days: float = Field(
        default=0.0, description="Mean of member fulfillment averages"
    )
    days_of_data: Optional[float] = None
    entity_count: int = Field(default=0, ge=0)
    record_count: int = Field(default=0, ge=0)
    is_latest: bool = Field(
        default=True, description="Most recent period of its series"
    )

    @property
    def year(self) -> int:
        return self.period.year

    @property
    def month(self) -> int:
        return self.period.month

    @property
    def label(self) -> str:
        return self.period.label

    def metric_value(self, metric: Union[MetricKey, str]) -> float:
        """
        Look up an absolute or ratio metric by key.

        Raises:
            ValueError: If the key is not a MetricKey
        """
        return float(getattr(self, MetricKey.parse(metric).value))


class ProjectedPeriod(AggregatedPeriod):
    """
    An AggregatedPeriod extrapolated to a full month.

    When ``is_projected`` is False the values are identical to the
    source period and ``projection_factor`` is 1.0.
    """

    days_in_month: int = Field(ge=28, le=31)
    projection_factor: float = Field(default=1.0, gt=0)
    is_projected: bool = False

    @property
    def projection_info(self) -> str:
        if not self.is_projected or self.days_of_data is None:
            return ""
        return f"Based on {self.days_of_data:g} days of data"


class EntityTotals(DerivedRatios):
    """
    Totals for one client or group across a span of months.

    Used by leaderboards, which rank entities over a selected month or a
    trailing window rather than month by month.
    """

    entity_id: str
    revenue: float = 0.0
    orders: float = 0.0
    orders_canceled: float = 0.0
    profit: float = 0.0
    ad_spend: float = 0.0
    sessions: float = 0.0
    avg_fulfillment_days: float = 0.0
    first_period: Optional[PeriodKey] = None
    last_period: Optional[PeriodKey] = None
    period_count: int = Field(default=0, ge=0)
    record_count: int = Field(default=0, ge=0)
    contributing_entities: tuple[str, ...] = Field(default_factory=tuple)

    def metric_value(self, metric: Union[MetricKey, str]) -> float:
        return float(getattr(self, MetricKey.parse(metric).value))


class ChangeResult(BaseModel):
    """
    Relative change of one metric between a current and a reference value.

    ``percent_change`` is the string ``"N/A"`` when the reference is zero or
    missing: a zero baseline makes relative change undefined, not zero.
    """

    model_config = ConfigDict(frozen=True)

    metric_key: str
    current_value: float
    reference_value: Optional[float] = None
    percent_change: PercentChange = NOT_AVAILABLE
    is_favorable: bool = False

    @property
    def is_available(self) -> bool:
        return self.percent_change != NOT_AVAILABLE

    @property
    def magnitude(self) -> Optional[float]:
        """Absolute percent change, or None when not available."""
        if not self.is_available:
            return None
        return abs(float(self.percent_change))


class RankedEntity(BaseModel):
    """One leaderboard row."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    value: float
    rank: int = Field(ge=1)
    change: Optional[ChangeResult] = None


class PeriodComparison(BaseModel):
    """Month-over-month and year-over-year changes for one period."""

    model_config = ConfigDict(frozen=True)

    period: PeriodKey
    previous_period: Optional[PeriodKey] = None
    year_ago_period: Optional[PeriodKey] = None
    mom: dict[str, ChangeResult] = Field(default_factory=dict)
    yoy: dict[str, ChangeResult] = Field(default_factory=dict)


class TableRow(BaseModel):
    """
    One row of the monthly performance table.

    ``row_type`` is ``month`` for closed months, and ``actuals`` /
    ``projection`` for the two rows shown for a projected latest month.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    row_type: Literal["month", "actuals", "projection"] = "month"
    period: ProjectedPeriod
    changes: dict[str, ChangeDirection] = Field(default_factory=dict)


class GroupSummary(BaseModel):
    """Everything a group dashboard renders for one selection."""

    model_config = ConfigDict(frozen=True)

    group_name: str
    series: list[AggregatedPeriod] = Field(default_factory=list)
    kpi_period: Optional[ProjectedPeriod] = None
    comparison: Optional[PeriodComparison] = None
    trend: list[AggregatedPeriod] = Field(default_factory=list)
    table: list[TableRow] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return bool(self.series)


class MoverBoard(BaseModel):
    """Top gainers and losers for one metric between two months."""

    model_config = ConfigDict(frozen=True)

    metric_key: str
    label: str = ""
    gainers: list[RankedEntity] = Field(default_factory=list)
    losers: list[RankedEntity] = Field(default_factory=list)


class BrandBenchmark(BaseModel):
    """
    One client measured against the average of its brand peers.

    Attributes:
        client: Client being benchmarked
        group_name: Peer group (usually a brand)
        peers: Included peers that had data and formed the average
        client_values: The client's totals per metric (empty without data)
        peer_average: Mean of the peers' totals per metric
        changes: Client vs peer average per metric; "N/A" when the average
            is zero or there are no peers
    """

    model_config = ConfigDict(frozen=True)

    client: str
    group_name: str
    peers: tuple[str, ...] = Field(default_factory=tuple)
    client_values: dict[str, float] = Field(default_factory=dict)
    peer_average: dict[str, float] = Field(default_factory=dict)
    changes: dict[str, ChangeResult] = Field(default_factory=dict)
