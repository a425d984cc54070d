"""
Pytest configuration and shared fixtures for the opsboard test suite.

Data factories for records, groups and periods, plus environment isolation,
reused across all test types (unit, integration, golden, property-based).
"""

import os
from datetime import date
from typing import Optional

import pytest

os.environ["OPSBOARD_TESTING"] = "true"
os.environ["OPSBOARD_LOG_FORMAT"] = "console"


# ---------------------------------------------------------------------------
# Pydantic model factories, shared by every test suite
# ---------------------------------------------------------------------------

from opsboard.config import get_settings
from opsboard.models import (
    AccountDetail,
    AggregatedPeriod,
    BudgetStatus,
    ChangeResult,
    EntityGroup,
    KeyContact,
    PerformanceRecord,
    PeriodKey,
)

REFERENCE_DATE = date(2025, 6, 15)


def make_record(
    entity_id: str = "Shop A",
    year: int = 2025,
    month: int = 6,
    revenue: float = 1000.0,
    orders: float = 10.0,
    orders_canceled: float = 0.0,
    profit: float = 250.0,
    ad_spend: float = 100.0,
    sessions: float = 500.0,
    avg_fulfillment_days: float = 2.0,
    days_of_data: Optional[float] = None,
    **overrides,
) -> PerformanceRecord:
    """Factory function for creating test PerformanceRecord objects."""
    defaults = dict(
        entity_id=entity_id,
        year=year,
        month=month,
        revenue=revenue,
        orders=orders,
        orders_canceled=orders_canceled,
        profit=profit,
        ad_spend=ad_spend,
        sessions=sessions,
        avg_fulfillment_days=avg_fulfillment_days,
        days_of_data=days_of_data,
    )
    defaults.update(overrides)
    return PerformanceRecord(**defaults)


def make_history(
    entity_id: str = "Shop A",
    start: PeriodKey = PeriodKey(2024, 6),
    months: int = 13,
    revenue: float = 1000.0,
    step: float = 0.0,
    days_of_data_last: Optional[float] = None,
    **overrides,
) -> list[PerformanceRecord]:
    """
    Consecutive monthly records for one client, oldest first.

    Revenue grows by ``step`` each month. The last record gets
    ``days_of_data_last``.
    """
    records = []
    key = start
    for i in range(months):
        is_last = i == months - 1
        records.append(
            make_record(
                entity_id=entity_id,
                year=key.year,
                month=key.month,
                revenue=revenue + step * i,
                days_of_data=days_of_data_last if is_last else None,
                **overrides,
            )
        )
        key = key.next()
    return records


def make_group(
    name: str = "Test Group",
    members: tuple[str, ...] = ("Shop A", "Shop B"),
    excluded: tuple[str, ...] = (),
) -> EntityGroup:
    """Factory for EntityGroups; ``excluded`` members are toggled off."""
    group = EntityGroup.from_names(name, members)
    for entity_id in excluded:
        group = group.toggle(entity_id)
    return group


def make_period(
    group_name: str = "Test Group",
    year: int = 2025,
    month: int = 6,
    revenue: float = 1000.0,
    orders: float = 10.0,
    days_of_data: Optional[float] = None,
    is_latest: bool = True,
    **overrides,
) -> AggregatedPeriod:
    """Factory for AggregatedPeriods with ratios derived from the absolutes."""
    from opsboard.engine.ratios import ratio_values

    values = dict(
        group_name=group_name,
        period=PeriodKey(year, month),
        revenue=revenue,
        orders=orders,
        orders_canceled=0.0,
        profit=revenue * 0.25,
        ad_spend=revenue * 0.1,
        sessions=orders * 50,
        days_of_data=days_of_data,
        entity_count=1,
        record_count=1,
        is_latest=is_latest,
    )
    values.update(overrides)
    values.update(ratio_values(values))
    return AggregatedPeriod(**values)


def make_change(
    percent_change=10.0,
    metric_key: str = "revenue",
    current_value: float = 110.0,
    reference_value: Optional[float] = 100.0,
    is_favorable: Optional[bool] = None,
) -> ChangeResult:
    """Factory for ChangeResults; favorable defaults to a positive change."""
    if is_favorable is None:
        is_favorable = percent_change != "N/A" and percent_change > 0
    return ChangeResult(
        metric_key=metric_key,
        current_value=current_value,
        reference_value=reference_value,
        percent_change=percent_change,
        is_favorable=is_favorable,
    )


def make_account(
    client_name: str = "Shop A",
    auto_group: Optional[str] = "Jeep",
    brands: str = "Rugged Ridge",
) -> AccountDetail:
    return AccountDetail(client_name=client_name, auto_group=auto_group, brands=brands)


def make_contact(
    client_name: str = "Shop A",
    ppc: Optional[str] = "Dana",
    pdm: Optional[str] = "Morgan",
) -> KeyContact:
    return KeyContact(client_name=client_name, ppc=ppc, pdm=pdm)


def make_budget(
    client_name: str = "Shop A",
    ppc_budget: float = 5000.0,
    target_spend: float = 100.0,
    projected_total_spend: float = 100.0,
    **overrides,
) -> BudgetStatus:
    return BudgetStatus(
        client_name=client_name,
        ppc_budget=ppc_budget,
        target_spend=target_spend,
        projected_total_spend=projected_total_spend,
        **overrides,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def reference_date() -> date:
    return REFERENCE_DATE


@pytest.fixture
def two_client_records() -> list[PerformanceRecord]:
    """
    Shop A and Shop B, Jun 2024 through Jun 2025.

    Jun 2025 is in progress with 15 days of data for both clients.
    """
    return make_history("Shop A", revenue=1000.0, step=10.0, days_of_data_last=15) + make_history(
        "Shop B", revenue=500.0, step=-5.0, orders=5.0, days_of_data_last=15
    )


@pytest.fixture
def accounts() -> list[AccountDetail]:
    return [
        make_account("Shop A", "Jeep", "Rugged Ridge"),
        make_account("Shop B", "Jeep", "Rugged Ridge, Bestop"),
        make_account("Shop C", "Truck", "WeatherTech"),
        make_account("Shop D", None, "Bestop"),
    ]


@pytest.fixture
def contacts() -> list[KeyContact]:
    return [
        make_contact("Shop A", "Dana", "Morgan"),
        make_contact("Shop B", "Dana", "Lee"),
        make_contact("Shop C", "Morgan", "Lee"),
        make_contact("Shop D", None, "Morgan"),
    ]
