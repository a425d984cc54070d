"""
Spreadsheet adapters for the dashboard's source sheets.

Each adapter matches the sheet's headers (case-insensitive, with a few
accepted aliases), converts cells and builds frozen models:

- PerformanceSheetAdapter -> PerformanceRecord (one client, one month)
- AccountSheetAdapter     -> AccountDetail (auto group, brands)
- ContactSheetAdapter     -> KeyContact (PPC / PDM managers)
- BudgetSheetAdapter      -> BudgetStatus (month-to-date paid search pacing)

Numeric cells are lenient: currency symbols, thousands separators and blanks
are cleaned up by the models. A row is skipped only when it cannot identify
a client or a month.
"""

import math
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
import structlog

from opsboard.models.accounts import AccountDetail, BudgetStatus, KeyContact
from opsboard.models.ingest import IngestReport
from opsboard.models.performance import MONTH_ABBREVIATIONS, PerformanceRecord, coerce_number

from .base_adapter import BaseAdapter, Rows

logger = structlog.get_logger()

_MONTHS_BY_NAME = {}
for _number, _abbr in enumerate(MONTH_ABBREVIATIONS, start=1):
    _MONTHS_BY_NAME[_abbr.lower()] = _number
for _number, _name in enumerate(
    (
        "january", "february", "march", "april", "may", "june",
        "july", "august", "september", "october", "november", "december",
    ),
    start=1,
):
    _MONTHS_BY_NAME[_name] = _number


def parse_month(value: Any) -> int:
    """
    Month number from "January", "Jan", "jan." or 1-12.

    Raises:
        ValueError: If the value is not a recognizable month
    """
    if isinstance(value, str):
        text = value.strip().lower().rstrip(".")
        if text in _MONTHS_BY_NAME:
            return _MONTHS_BY_NAME[text]
        # "Sept", "Janu"
        for name, number in _MONTHS_BY_NAME.items():
            if len(text) > 3 and name.startswith(text):
                return number
        try:
            value = float(text)
        except ValueError:
            raise ValueError(f"Unrecognized month: {value!r}") from None

    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Unrecognized month: {value!r}") from None
    if not math.isfinite(number) or number != int(number) or not 1 <= number <= 12:
        raise ValueError(f"Month out of range: {value!r}")
    return int(number)


def parse_year(value: Any) -> int:
    """
    Raises:
        ValueError: If the year is blank or not a positive whole number
    """
    number = coerce_number(value)
    if number <= 0 or number != int(number):
        raise ValueError(f"Invalid year: {value!r}")
    return int(number)


class PerformanceSheetAdapter(BaseAdapter[PerformanceRecord]):
    """
    Adapts the monthly performance sheet into PerformanceRecords.

    Unknown columns (notes, pricing changes, Projected_Revenue) are ignored;
    projections are always recomputed from Days_of_Data.
    """

    COLUMN_MAPPINGS = {
        "entity_id": ["ClientName", "Client Name", "Client"],
        "month": ["Month", "MonthNumber"],
        "year": ["Year"],
        "revenue": ["Revenue"],
        "orders": ["Orders"],
        "orders_canceled": ["Orders_Canceled", "Orders Canceled"],
        "profit": ["Profit"],
        "ad_spend": ["PPC_Spend", "PPC Spend", "Ad_Spend"],
        "sessions": ["Sessions"],
        "avg_fulfillment_days": ["Avg_Fulfillment", "Avg Fulfillment"],
        "days_of_data": ["Days_of_Data", "Days of Data"],
    }
    REQUIRED_FIELDS = ("entity_id", "month", "year")

    def __init__(self):
        super().__init__(source_name="performance")

    def _parse_row(self, values: dict[str, Any]) -> PerformanceRecord:
        entity_id = self._safe_str(values.get("entity_id"))
        if entity_id is None:
            raise ValueError("Row has no client name")

        fields = {
            key: None if self._is_missing(value) else value
            for key, value in values.items()
            if key not in ("entity_id", "month", "year")
        }
        return PerformanceRecord(
            entity_id=entity_id,
            year=parse_year(values.get("year")),
            month=parse_month(values.get("month")),
            **fields,
        )


class AccountSheetAdapter(BaseAdapter[AccountDetail]):
    """Adapts the account details sheet (auto group and brand list)."""

    COLUMN_MAPPINGS = {
        "client_name": ["ClientName", "Client Name", "Client"],
        "auto_group": ["AutoGroup", "Auto Group"],
        "brands": ["Brands", "Brand"],
    }
    REQUIRED_FIELDS = ("client_name",)

    def __init__(self):
        super().__init__(source_name="accounts")

    def _parse_row(self, values: dict[str, Any]) -> AccountDetail:
        client_name = self._safe_str(values.get("client_name"))
        if client_name is None:
            raise ValueError("Row has no client name")
        return AccountDetail(
            client_name=client_name,
            auto_group=self._safe_str(values.get("auto_group")),
            brands=self._safe_str(values.get("brands"), default=""),
        )


class ContactSheetAdapter(BaseAdapter[KeyContact]):
    """Adapts the key contacts sheet (PPC and PDM managers)."""

    COLUMN_MAPPINGS = {
        "client_name": ["ClientName", "Client Name", "Client"],
        "ppc": ["PPC"],
        "pdm": ["PDM"],
    }
    REQUIRED_FIELDS = ("client_name",)

    def __init__(self):
        super().__init__(source_name="contacts")

    def _parse_row(self, values: dict[str, Any]) -> KeyContact:
        client_name = self._safe_str(values.get("client_name"))
        if client_name is None:
            raise ValueError("Row has no client name")
        return KeyContact(
            client_name=client_name,
            ppc=self._safe_str(values.get("ppc")),
            pdm=self._safe_str(values.get("pdm")),
        )


class BudgetSheetAdapter(BaseAdapter[BudgetStatus]):
    """Adapts the budget status sheet. Percent cells may carry a '%' sign."""

    COLUMN_MAPPINGS = {
        "client_name": ["ClientName", "Client Name", "Client"],
        "ppc_budget": ["ppcBudget", "PPC_Budget", "PPC Budget"],
        "google_spend": ["googleSpend", "Google_Spend", "Google Spend"],
        "bing_spend": ["bingSpend", "Bing_Spend", "Bing Spend"],
        "percent_spent": ["percentSpent", "Percent_Spent", "% Spent"],
        "target_spend": ["targetSpend", "Target_Spend", "Target Spend"],
        "projected_total_spend": [
            "projectedTotalSpend",
            "Projected_Total_Spend",
            "Projected Total Spend",
        ],
    }
    REQUIRED_FIELDS = ("client_name",)

    def __init__(self):
        super().__init__(source_name="budget")

    def _parse_row(self, values: dict[str, Any]) -> BudgetStatus:
        client_name = self._safe_str(values.get("client_name"))
        if client_name is None:
            raise ValueError("Row has no client name")
        amounts = {
            key: None if self._is_missing(value) else value
            for key, value in values.items()
            if key != "client_name"
        }
        return BudgetStatus(client_name=client_name, **amounts)


def load_csv(
    path: Union[str, Path],
    adapter: BaseAdapter,
    encoding: Optional[str] = "utf-8",
) -> tuple[list, IngestReport]:
    """
    Read a sheet export from CSV and run it through an adapter.

    Cells are read as strings so that the models do the numeric cleanup.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding=encoding)
    logger.debug("csv_loaded", path=str(path), rows=len(df), adapter=adapter.source_name)
    return adapter.ingest(df)


def ingest_performance(rows: Rows) -> tuple[list[PerformanceRecord], IngestReport]:
    return PerformanceSheetAdapter().ingest(rows)


def ingest_accounts(rows: Rows) -> tuple[list[AccountDetail], IngestReport]:
    return AccountSheetAdapter().ingest(rows)


def ingest_contacts(rows: Rows) -> tuple[list[KeyContact], IngestReport]:
    return ContactSheetAdapter().ingest(rows)


def ingest_budgets(rows: Rows) -> tuple[list[BudgetStatus], IngestReport]:
    return BudgetSheetAdapter().ingest(rows)
