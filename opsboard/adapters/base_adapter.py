"""
Base adapter class for spreadsheet ingestion.

Every sheet the dashboard reads (monthly performance, account details, key
contacts, budget status) arrives as rows of loosely typed cells. Adapters
turn those rows into frozen models and report the rows they had to skip
instead of failing the whole batch.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, Generic, Optional, TypeVar, Union

import pandas as pd
import structlog
from pydantic import ValidationError

from opsboard.models.ingest import IngestReport, SkippedRow

logger = structlog.get_logger()

ModelT = TypeVar("ModelT")

Rows = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


class BaseAdapter(ABC, Generic[ModelT]):
    """
    Abstract base class for sheet adapters.

    Subclasses declare COLUMN_MAPPINGS (field -> accepted header names) and
    implement _parse_row(). ingest() handles header matching, row iteration
    and the IngestReport.

    Attributes:
        source_name: Identifier for the sheet (e.g., "performance", "budget")
    """

    COLUMN_MAPPINGS: dict[str, list[str]] = {}
    REQUIRED_FIELDS: tuple[str, ...] = ()

    def __init__(self, source_name: str):
        """
        Initialize the adapter with a source name.

        Args:
            source_name: Identifier for this sheet
        """
        self.source_name = source_name
        self.logger = logger.bind(adapter=source_name)

    def ingest(self, rows: Rows) -> tuple[list[ModelT], IngestReport]:
        """
        Convert sheet rows into models.

        Args:
            rows: A DataFrame, or any iterable of header -> cell mappings

        Returns:
            Tuple of (models in row order, ingest report)

        Raises:
            ValueError: If a required column is missing from the header
        """
        df = rows if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
        columns = self._resolve_columns(df)

        missing = [f for f in self.REQUIRED_FIELDS if f not in columns]
        if missing and not df.empty:
            raise ValueError(
                f"{self.source_name} sheet is missing required columns: {missing}"
            )

        models: list[ModelT] = []
        skipped: list[SkippedRow] = []
        for position, (_, row) in enumerate(df.iterrows()):
            values = {field: row[column] for field, column in columns.items()}
            try:
                model = self._parse_row(values)
            except ValidationError as e:
                error = e.errors()[0]
                field = ".".join(str(p) for p in error.get("loc", ()))
                skipped.append(
                    SkippedRow(row_index=position, field=field, reason=error.get("msg", str(e)))
                )
                continue
            except ValueError as e:
                skipped.append(SkippedRow(row_index=position, reason=str(e)))
                continue
            models.append(model)

        report = IngestReport(
            source=self.source_name,
            total_rows=len(df),
            valid_rows=len(models),
            skipped_rows=len(skipped),
            skipped=skipped,
        )

        log = self.logger.warning if skipped else self.logger.info
        log(
            "sheet_ingested",
            total_rows=report.total_rows,
            valid_rows=report.valid_rows,
            skipped_rows=report.skipped_rows,
        )
        return models, report

    @abstractmethod
    def _parse_row(self, values: dict[str, Any]) -> ModelT:
        """
        Build one model from a row's matched cells.

        Raises:
            ValueError: (or pydantic ValidationError) to skip the row
        """

    def _resolve_columns(self, df: pd.DataFrame) -> dict[str, str]:
        """Map each known field to the header present in ``df``."""
        resolved = {}
        for field in self.COLUMN_MAPPINGS:
            column = self._find_column(df, field)
            if column is not None:
                resolved[field] = column
        return resolved

    def _find_column(self, df: pd.DataFrame, field: str) -> Optional[str]:
        """
        Find the actual column name in DataFrame using flexible matching.

        Args:
            df: DataFrame to search
            field: Field type to find (from COLUMN_MAPPINGS)

        Returns:
            Actual column name or None if not found
        """
        by_lower = {str(c).strip().lower(): c for c in df.columns}
        for candidate in self.COLUMN_MAPPINGS.get(field, []):
            column = by_lower.get(candidate.lower())
            if column is not None:
                return column
        return None

    def _is_missing(self, value) -> bool:
        """
        Check if a value is missing (None, NaN, empty string).
        """
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False

    def _safe_str(self, value, default: Optional[str] = None) -> Optional[str]:
        """
        Safely convert value to a stripped string, handling None and NaN.
        """
        if self._is_missing(value):
            return default
        return str(value).strip()
