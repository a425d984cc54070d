"""
Sheet-to-dashboard integration test for opsboard.

Verifies the full pipeline: CSV exports -> adapters -> groups -> summary,
leaderboards, movers and pacing alerts, using the same calls a dashboard
view makes.
"""

from datetime import date
from textwrap import dedent

import pytest

from opsboard.adapters import (
    AccountSheetAdapter,
    BudgetSheetAdapter,
    ContactSheetAdapter,
    PerformanceSheetAdapter,
    get_adapter,
    load_csv,
)
from opsboard.engine import SummaryBuilder
from opsboard.engine.grouping import (
    ALL_CLIENTS,
    group_for_auto_group,
    group_for_brand,
    group_for_manager,
    managers_for_role,
)
from opsboard.engine.pacing import pacing_alerts
from opsboard.models import NOT_AVAILABLE, PeriodKey

TODAY = date(2025, 6, 16)

PERFORMANCE_CSV = dedent(
    """\
    ClientName,Month,Year,Revenue,Orders,PPC_Spend,Sessions,Days_of_Data
    Shop A,May,2025,"$1,000",10,100,500,
    Shop A,June,2025,600,6,60,300,15
    Shop B,May,2025,2000,20,200,1000,
    Shop B,June,2025,800,8,80,400,15
    Shop C,May,2025,500,5,50,250,
    Shop C,June,2025,250,2,25,125,15
    ,June,2025,999,1,1,1,15
    """
)

ACCOUNTS_CSV = dedent(
    """\
    ClientName,AutoGroup,Brands
    Shop A,Jeep,Rugged Ridge
    Shop B,Jeep,"Rugged Ridge, Bestop"
    Shop C,Truck,Bestop
    """
)

CONTACTS_CSV = dedent(
    """\
    ClientName,PPC,PDM
    Shop A,Dana,Morgan
    Shop B,Dana,Lee
    Shop C,Lee,Morgan
    """
)

BUDGET_CSV = dedent(
    """\
    ClientName,ppcBudget,googleSpend,bingSpend,percentSpent,targetSpend,projectedTotalSpend
    Shop A,"$5,000",2500,600,62%,50%,62%
    Shop B,4000,1800,120,48%,50%,48%
    Shop C,0,0,0,0%,50%,0%
    """
)


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def sheets(tmp_path):
    """Load all four sheets from CSV exports."""
    records, performance_report = load_csv(
        _write(tmp_path, "performance.csv", PERFORMANCE_CSV), PerformanceSheetAdapter()
    )
    accounts, _ = load_csv(_write(tmp_path, "accounts.csv", ACCOUNTS_CSV), AccountSheetAdapter())
    contacts, _ = load_csv(_write(tmp_path, "contacts.csv", CONTACTS_CSV), ContactSheetAdapter())
    budgets, _ = load_csv(_write(tmp_path, "budget.csv", BUDGET_CSV), BudgetSheetAdapter())
    return {
        "records": records,
        "performance_report": performance_report,
        "accounts": accounts,
        "contacts": contacts,
        "budgets": budgets,
    }


@pytest.fixture
def builder():
    return SummaryBuilder()


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


class TestSheetIngestion:
    def test_performance_report_counts_skipped_row(self, sheets):
        report = sheets["performance_report"]
        assert report.source == "performance"
        assert report.total_rows == 7
        assert report.valid_rows == 6
        assert [s.row_index for s in report.skipped] == [6]

    def test_performance_cells_cleaned(self, sheets):
        first = sheets["records"][0]
        assert first.entity_id == "Shop A"
        assert first.period == PeriodKey(2025, 5)
        assert first.revenue == 1000.0
        assert first.days_of_data is None
        assert sheets["records"][1].days_of_data == 15.0

    def test_reference_sheets_loaded(self, sheets):
        assert [a.client_name for a in sheets["accounts"]] == ["Shop A", "Shop B", "Shop C"]
        assert sheets["accounts"][1].brands == ("Rugged Ridge", "Bestop")
        assert sheets["budgets"][0].ppc_budget == 5000.0
        assert sheets["budgets"][0].target_spend == 50.0

    def test_missing_required_column_rejected(self, tmp_path):
        path = _write(tmp_path, "bad.csv", "ClientName,Revenue\nShop A,100\n")
        with pytest.raises(ValueError):
            load_csv(path, get_adapter("performance"))


# ---------------------------------------------------------------------------
# Group summaries
# ---------------------------------------------------------------------------


class TestGroupSummaryPipeline:
    def test_auto_group_summary(self, sheets, builder):
        group = group_for_auto_group(sheets["accounts"], "Jeep")
        assert group.member_ids == ["Shop A", "Shop B"]

        summary = builder.build(
            sheets["records"], group, TODAY, chart_range="3m", table_range=2
        )

        assert summary.has_data
        assert [p.revenue for p in summary.series] == [3000.0, 1400.0]
        assert summary.kpi_period.is_projected
        assert summary.kpi_period.revenue == 2800.0

        mom = summary.comparison.mom["revenue"]
        assert mom.percent_change == pytest.approx((2800 - 3000) / 3000 * 100)
        assert mom.is_favorable is False

        assert [p.label for p in summary.trend] == ["May 2025"]
        assert [row.label for row in summary.table] == [
            "Jun 2025 (Actuals)",
            "Jun 2025 (Proj.)",
            "May 2025",
        ]
        assert summary.table[0].period.revenue == 1400.0

    def test_manager_group_with_toggle(self, sheets, builder):
        assert managers_for_role(sheets["contacts"], "PPC") == [ALL_CLIENTS, "Dana", "Lee"]

        group = group_for_manager(sheets["contacts"], "PPC", "Dana").toggle("Shop B")
        summary = builder.build(sheets["records"], group, TODAY)

        assert summary.kpi_period.revenue == 1200.0
        assert summary.comparison.mom["revenue"].percent_change == pytest.approx(20.0)

    def test_all_clients_group(self, sheets, builder):
        group = group_for_manager(sheets["contacts"], "PDM", ALL_CLIENTS, sheets["records"])
        summary = builder.build(sheets["records"], group, TODAY)

        assert group.member_ids == ["Shop A", "Shop B", "Shop C"]
        assert summary.series[-1].revenue == 1650.0


# ---------------------------------------------------------------------------
# Cross-client views
# ---------------------------------------------------------------------------


class TestCrossClientPipeline:
    def test_brand_leaderboard_single_brand_stores(self, sheets, builder):
        board = builder.brand_leaderboard(sheets["records"], sheets["accounts"], "revenue")

        # Shop B carries two brands and is not attributed to either
        assert [(r.entity_id, r.value) for r in board] == [
            ("Rugged Ridge", 1600.0),
            ("Bestop", 750.0),
        ]

    def test_entity_leaderboard_latest_month(self, sheets, builder):
        board = builder.entity_leaderboard(
            sheets["records"], "revenue", periods=[PeriodKey(2025, 6)]
        )
        assert [r.entity_id for r in board] == ["Shop B", "Shop A", "Shop C"]

    def test_client_movers(self, sheets, builder):
        movers = builder.client_movers(sheets["records"], "revenue", TODAY)

        assert movers.label == "Jun 2025 (Proj) vs May 2025"
        assert [r.entity_id for r in movers.gainers] == ["Shop A"]
        assert [r.entity_id for r in movers.losers] == ["Shop B"]
        assert movers.gainers[0].value == pytest.approx(20.0)
        assert movers.losers[0].value == pytest.approx(-20.0)

    def test_metric_drift_alerts(self, sheets, builder):
        group = group_for_manager(sheets["contacts"], "PPC", ALL_CLIENTS, sheets["records"])

        alerts = builder.metric_drift_alerts(
            sheets["records"], group, "revenue", threshold=10.0, reference_date=TODAY
        )

        assert {r.entity_id for r in alerts} == {"Shop A", "Shop B"}

    def test_budget_pacing_alerts(self, sheets):
        alerts = pacing_alerts(sheets["budgets"], threshold=5.0)

        assert [r.entity_id for r in alerts] == ["Shop A"]
        assert alerts[0].value == pytest.approx(12.0)

    def test_budget_pacing_threshold_zero_lists_everyone(self, sheets):
        alerts = pacing_alerts(sheets["budgets"], threshold=0)

        assert [r.entity_id for r in alerts] == ["Shop A", "Shop B", "Shop C"]
        assert alerts[-1].change.percent_change == NOT_AVAILABLE

    def test_brand_benchmark_for_store(self, sheets, builder):
        group = group_for_brand(sheets["accounts"], "Bestop")
        assert group.member_ids == ["Shop B", "Shop C"]

        benchmark = builder.brand_benchmark(
            sheets["records"], group, "Shop C", periods=[PeriodKey(2025, 5)]
        )

        assert benchmark.peer_average["revenue"] == pytest.approx(1250.0)
        assert benchmark.changes["revenue"].percent_change == pytest.approx(-60.0)
        assert benchmark.changes["revenue"].is_favorable is False

        without_self = builder.brand_benchmark(
            sheets["records"], group.toggle("Shop C"), "Shop C", periods=[PeriodKey(2025, 5)]
        )
        assert without_self.peers == ("Shop B",)
        assert without_self.changes["revenue"].percent_change == pytest.approx(-75.0)
