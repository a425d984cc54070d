"""
Pydantic v2 data models for the metrics engine.

Model Organization:
    - enums: Metric keys, range tokens and indicator enums
    - performance: Raw monthly PerformanceRecord and PeriodKey
    - groups: EntityGroup selections
    - accounts: Account, contact and budget reference rows
    - periods: Aggregated, projected and comparison outputs
    - ingest: Sheet ingestion reports

All models are frozen. Engine stages build new instances rather than
mutating their inputs.

Usage:
    >>> from opsboard.models import PerformanceRecord
    >>> record = PerformanceRecord(
    ...     entity_id="Shop A", year=2025, month=6, revenue=1000, orders=10
    ... )
"""

from .enums import ChangeDirection, ContactRole, MetricKey, RankDirection, TimeRange
from .performance import PerformanceRecord, PeriodKey, coerce_number, period_key
from .groups import EntityGroup, GroupMember
from .accounts import AccountDetail, BudgetStatus, KeyContact
from .ingest import IngestReport, SkippedRow
from .periods import (
    NOT_AVAILABLE,
    AggregatedPeriod,
    BrandBenchmark,
    ChangeResult,
    DerivedRatios,
    EntityTotals,
    GroupSummary,
    MoverBoard,
    PeriodComparison,
    ProjectedPeriod,
    RankedEntity,
    TableRow,
)

__all__ = [
    # Enumerations
    "ChangeDirection",
    "ContactRole",
    "MetricKey",
    "RankDirection",
    "TimeRange",
    # Raw records
    "PerformanceRecord",
    "PeriodKey",
    "coerce_number",
    "period_key",
    # Groups and accounts
    "EntityGroup",
    "GroupMember",
    "AccountDetail",
    "BudgetStatus",
    "KeyContact",
    # Ingestion
    "IngestReport",
    "SkippedRow",
    # Engine outputs
    "NOT_AVAILABLE",
    "AggregatedPeriod",
    "BrandBenchmark",
    "ChangeResult",
    "DerivedRatios",
    "EntityTotals",
    "GroupSummary",
    "MoverBoard",
    "PeriodComparison",
    "ProjectedPeriod",
    "RankedEntity",
    "TableRow",
]
