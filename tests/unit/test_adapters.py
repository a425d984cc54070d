"""
Unit tests for the sheet adapters.
"""

import pandas as pd
import pytest

from opsboard.adapters import (
    ADAPTER_REGISTRY,
    PerformanceSheetAdapter,
    get_adapter,
    ingest_accounts,
    ingest_budgets,
    ingest_contacts,
    ingest_performance,
    parse_month,
)
from opsboard.models import PeriodKey


# ============================================================================
# Month / Year Parsing
# ============================================================================


class TestParseMonth:
    """Test month cell parsing."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("January", 1),
            ("jan", 1),
            ("Sep.", 9),
            ("Sept", 9),
            ("DECEMBER", 12),
            (6, 6),
            ("6", 6),
            (6.0, 6),
        ],
    )
    def test_parse_month_valid(self, raw, expected):
        assert parse_month(raw) == expected

    @pytest.mark.parametrize("raw", ["Smarch", "", "13", 0, 6.5, None, float("nan")])
    def test_parse_month_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_month(raw)


# ============================================================================
# Performance Sheet
# ============================================================================


class TestPerformanceSheetAdapter:
    """Test performance sheet ingestion."""

    def test_ingest_performance_parses_rows(self):
        rows = [
            {
                "ClientName": " Shop A ",
                "Month": "June",
                "Year": 2025,
                "Revenue": "$1,200.50",
                "Orders": 12,
                "Orders_Canceled": 1,
                "Profit": "300",
                "PPC_Spend": 150.0,
                "Sessions": 600,
                "Avg_Fulfillment": 2.5,
                "Days_of_Data": 15,
            }
        ]
        records, report = ingest_performance(rows)

        assert report.valid_rows == 1
        record = records[0]
        assert record.entity_id == "Shop A"
        assert record.period == PeriodKey(2025, 6)
        assert record.revenue == 1200.5
        assert record.ad_spend == 150.0
        assert record.avg_fulfillment_days == 2.5
        assert record.days_of_data == 15

    def test_ingest_performance_headers_case_insensitive(self):
        records, _ = ingest_performance([{"clientname": "Shop A", "MONTH": "Jan", "year": "2025"}])
        assert records[0].period == PeriodKey(2025, 1)
        assert records[0].revenue == 0.0

    def test_ingest_performance_blank_days_of_data(self):
        rows = [
            {"ClientName": "Shop A", "Month": "May", "Year": 2025, "Days_of_Data": ""},
            {"ClientName": "Shop A", "Month": "June", "Year": 2025, "Days_of_Data": 9},
        ]
        records, _ = ingest_performance(rows)
        assert [r.days_of_data for r in records] == [None, 9]

    def test_ingest_performance_skips_bad_rows(self):
        rows = [
            {"ClientName": "Shop A", "Month": "June", "Year": 2025, "Revenue": 10},
            {"ClientName": "", "Month": "June", "Year": 2025, "Revenue": 10},
            {"ClientName": "Shop B", "Month": "Smarch", "Year": 2025, "Revenue": 10},
            {"ClientName": "Shop C", "Month": "June", "Year": "", "Revenue": 10},
        ]
        records, report = ingest_performance(rows)

        assert [r.entity_id for r in records] == ["Shop A"]
        assert report.total_rows == 4
        assert report.skipped_rows == 3
        assert [s.row_index for s in report.skipped] == [1, 2, 3]
        assert report.acceptance_rate == pytest.approx(0.25)

    def test_ingest_performance_missing_required_column(self):
        with pytest.raises(ValueError, match="missing required columns"):
            ingest_performance([{"ClientName": "Shop A", "Revenue": 10}])

    def test_ingest_performance_accepts_dataframe(self):
        df = pd.DataFrame(
            {"ClientName": ["Shop A", "Shop B"], "Month": [1, 2], "Year": [2025, 2025], "Orders": [3, 4]}
        )
        records, _ = PerformanceSheetAdapter().ingest(df)
        assert [r.orders for r in records] == [3.0, 4.0]

    def test_ingest_performance_empty(self):
        records, report = ingest_performance([])
        assert records == []
        assert report.total_rows == 0
        assert report.acceptance_rate == 1.0


# ============================================================================
# Reference Sheets
# ============================================================================


class TestReferenceSheetAdapters:
    """Test account, contact and budget sheet ingestion."""

    def test_ingest_accounts(self):
        rows = [
            {"ClientName": "Shop A", "AutoGroup": "Jeep", "Brands": "Rugged Ridge, Bestop"},
            {"ClientName": "Shop B", "AutoGroup": "", "Brands": None},
        ]
        accounts, _ = ingest_accounts(rows)

        assert accounts[0].brands == ("Rugged Ridge", "Bestop")
        assert accounts[1].auto_group is None
        assert accounts[1].brands == ()

    def test_ingest_contacts(self):
        contacts, _ = ingest_contacts([{"ClientName": "Shop A", "PPC": "Dana", "PDM": " "}])
        assert contacts[0].manager_for("PPC") == "Dana"
        assert contacts[0].pdm is None

    def test_ingest_budgets_percent_cells(self):
        rows = [
            {
                "ClientName": "Shop A",
                "ppcBudget": "$5,000",
                "googleSpend": "1,500",
                "bingSpend": 250,
                "targetSpend": "50%",
                "projectedTotalSpend": "118%",
            }
        ]
        budgets, _ = ingest_budgets(rows)

        budget = budgets[0]
        assert budget.ppc_budget == 5000.0
        assert budget.total_spend == 1750.0
        assert budget.target_spend == 50.0
        assert budget.projected_total_spend == 118.0
        assert budget.percent_spent == 0.0


class TestAdapterRegistry:
    """Test adapter lookup by sheet name."""

    def test_get_adapter(self):
        assert isinstance(get_adapter("performance"), PerformanceSheetAdapter)

    def test_get_adapter_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown adapter source"):
            get_adapter("feeds")

    def test_registry_names_match_sources(self):
        for name, adapter_class in ADAPTER_REGISTRY.items():
            assert adapter_class().source_name == name
