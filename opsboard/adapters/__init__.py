"""
Sheet adapters for loading dashboard spreadsheets.

Each adapter handles one source sheet, converts its loosely typed rows into
frozen models and reports the rows it had to skip.

Supported adapters:
- PerformanceSheetAdapter: Monthly client performance
- AccountSheetAdapter: Account details (auto group, brands)
- ContactSheetAdapter: Key contacts (PPC / PDM managers)
- BudgetSheetAdapter: Paid search budget status

Usage:
    from opsboard.adapters import get_adapter

    adapter = get_adapter("performance")
    records, report = adapter.ingest(rows)
"""

from typing import Type

from .base_adapter import BaseAdapter
from .sheet_adapter import (
    AccountSheetAdapter,
    BudgetSheetAdapter,
    ContactSheetAdapter,
    PerformanceSheetAdapter,
    ingest_accounts,
    ingest_budgets,
    ingest_contacts,
    ingest_performance,
    load_csv,
    parse_month,
)

ADAPTER_REGISTRY: dict[str, Type[BaseAdapter]] = {
    "performance": PerformanceSheetAdapter,
    "accounts": AccountSheetAdapter,
    "contacts": ContactSheetAdapter,
    "budget": BudgetSheetAdapter,
}


def get_adapter(source: str) -> BaseAdapter:
    """
    Get adapter instance by sheet name.

    Raises:
        ValueError: If source is not found in registry

    Example:
        >>> records, report = get_adapter("performance").ingest(rows)
    """
    adapter_class = ADAPTER_REGISTRY.get(source)
    if not adapter_class:
        available = ", ".join(ADAPTER_REGISTRY.keys())
        raise ValueError(
            f"Unknown adapter source: '{source}'. Available adapters: {available}"
        )
    return adapter_class()


__all__ = [
    "BaseAdapter",
    "PerformanceSheetAdapter",
    "AccountSheetAdapter",
    "ContactSheetAdapter",
    "BudgetSheetAdapter",
    "ADAPTER_REGISTRY",
    "get_adapter",
    "ingest_performance",
    "ingest_accounts",
    "ingest_contacts",
    "ingest_budgets",
    "load_csv",
    "parse_month",
]
