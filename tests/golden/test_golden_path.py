"""
Golden Path (End-to-End) Tests for the opsboard engine.

These tests pin the engine's behavior on small fixed datasets whose
expected numbers are worked out by hand. Each scenario exercises the
public functions exactly as a dashboard view would call them.
"""

from datetime import date

import pytest

from opsboard.engine.aggregator import aggregate
from opsboard.engine.comparator import compare
from opsboard.engine.projector import Projector, project
from opsboard.engine.summary import build_summary
from opsboard.models import NOT_AVAILABLE, ChangeDirection, EntityGroup, PeriodKey
from tests.conftest import make_group, make_history, make_period, make_record


# ============================================================================
# Scenario A: Partial June → projected to a full month
# ============================================================================


def test_golden_projection_half_month():
    """
    Golden path: revenue 1000 and 10 orders over 15 of June's 30 days
    project to revenue 2000 and 20 orders.
    """
    period = make_period(year=2025, month=6, revenue=1000.0, orders=10.0, days_of_data=15)

    projected = project(period, reference_date=date(2025, 6, 16))

    assert projected.is_projected
    assert projected.days_in_month == 30
    assert projected.projection_factor == 2.0
    assert projected.revenue == 2000.0
    assert projected.orders == 20.0
    # AOV is unchanged because revenue and orders scale together
    assert projected.aov == pytest.approx(100.0)


def test_golden_projection_only_latest_period():
    """Golden path: a back-filled historical month keeps its recorded totals."""
    records = [
        make_record(month=5, revenue=900.0, days_of_data=20),
        make_record(month=6, revenue=1000.0, days_of_data=15),
    ]
    series = aggregate(records, make_group(members=("Shop A",)))

    projected = Projector().project_latest(series, date(2025, 6, 16))

    assert projected[0].revenue == 900.0
    assert not projected[0].is_projected
    assert projected[1].revenue == 2000.0


# ============================================================================
# Scenario B: Empty selection → insufficient data
# ============================================================================


def test_golden_empty_group_is_insufficient_data():
    """Golden path: a group whose members are all excluded aggregates to []."""
    records = [make_record("Shop A"), make_record("Shop B")]
    group = make_group(excluded=("Shop A", "Shop B"))

    assert aggregate(records, group) == []


def test_golden_empty_group_summary():
    """Golden path: the summary of an empty group carries no data."""
    summary = build_summary([make_record()], EntityGroup(name="Nobody"), date(2025, 6, 16))

    assert not summary.has_data
    assert summary.comparison is None


# ============================================================================
# Scenario C: Revenue up and down
# ============================================================================


def test_golden_revenue_increase():
    """Golden path: revenue 1200 vs 1000 is +20% and favorable."""
    change = compare(1200, 1000, "revenue")

    assert change.percent_change == pytest.approx(20.0)
    assert change.is_favorable is True


def test_golden_revenue_decrease():
    """Golden path: revenue 800 vs 1000 is -20% and unfavorable."""
    change = compare(800, 1000, "revenue")

    assert change.percent_change == pytest.approx(-20.0)
    assert change.is_favorable is False


# ============================================================================
# Scenario D: Spend up is not good news
# ============================================================================


def test_golden_ad_spend_increase_unfavorable():
    """Golden path: ad spend 500 vs 400 is +25% but unfavorable."""
    change = compare(500, 400, "ad_spend")

    assert change.percent_change == pytest.approx(25.0)
    assert change.is_favorable is False


# ============================================================================
# Scenario E: Full group summary
# ============================================================================


def test_golden_group_summary_end_to_end():
    """
    Golden path: two clients, Jun 2024 through Jun 2025, June in progress.

    Shop A revenue grows 1000 -> 1120 (+10/month), Shop B falls
    500 -> 440 (-5/month). Both report 15 days of June data.

        June actuals   = 1120 + 440         = 1560
        June projected = 1560 * 30 / 15     = 3120
        May 2025       = 1110 + 445         = 1555
        June 2024      = 1000 + 500         = 1500
        MoM revenue    = (3120 - 1555) / 1555
        YoY revenue    = (3120 - 1500) / 1500 = +108%
    """
    records = make_history("Shop A", revenue=1000.0, step=10.0, days_of_data_last=15) + make_history(
        "Shop B", revenue=500.0, step=-5.0, orders=5.0, days_of_data_last=15
    )
    group = make_group()

    summary = build_summary(records, group, date(2025, 6, 15), chart_range="6m", table_range=2)

    assert summary.has_data
    assert len(summary.series) == 13
    assert summary.series[-1].revenue == 1560.0

    kpi = summary.kpi_period
    assert kpi.period == PeriodKey(2025, 6)
    assert kpi.is_projected
    assert kpi.revenue == 3120.0
    assert kpi.orders == 30.0
    assert kpi.projection_info == "Based on 15 days of data"

    mom = summary.comparison.mom["revenue"]
    yoy = summary.comparison.yoy["revenue"]
    assert mom.reference_value == 1555.0
    assert mom.percent_change == pytest.approx((3120 - 1555) / 1555 * 100)
    assert yoy.percent_change == pytest.approx(108.0)
    assert summary.comparison.mom["orders"].percent_change == pytest.approx(100.0)

    assert [p.label for p in summary.trend] == [
        "Dec 2024",
        "Jan 2025",
        "Feb 2025",
        "Mar 2025",
        "Apr 2025",
        "May 2025",
    ]

    labels = [row.label for row in summary.table]
    assert labels == ["Jun 2025 (Actuals)", "Jun 2025 (Proj.)", "May 2025"]
    may = summary.table[-1]
    # May 1555 vs April 1550
    assert may.changes["revenue"] == ChangeDirection.POSITIVE
    assert may.changes["orders"] == ChangeDirection.NEUTRAL


def test_golden_group_summary_missing_year_ago():
    """
    Golden path: without the same month last year, YoY is "N/A" for every
    metric; no neighbouring month is substituted.
    """
    records = make_history("Shop A", start=PeriodKey(2024, 7), months=12, days_of_data_last=None)

    summary = build_summary(records, make_group(), date(2025, 6, 30))

    assert summary.comparison.year_ago_period is None
    assert all(c.percent_change == NOT_AVAILABLE for c in summary.comparison.yoy.values())
    assert summary.comparison.previous_period == PeriodKey(2025, 5)
