"""
Raw monthly performance models.

A PerformanceRecord is one client's figures for one calendar month as they
arrive from the performance spreadsheet. Ratios are never stored on the
record; they are always rederived from the absolutes by the engine.
"""

import calendar
import math
from datetime import date
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MONTH_ABBREVIATIONS = tuple(calendar.month_abbr)[1:]


def coerce_number(value: Any) -> float:
    """
    Convert a raw spreadsheet value to a finite float.

    None, NaN, infinities, blanks and unparseable strings all become 0.0.
    Currency symbols and thousands separators are stripped from strings.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("$", "").rstrip("%")
        if not cleaned:
            return 0.0
        try:
            value = float(cleaned)
        except ValueError:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class PeriodKey(NamedTuple):
    """A calendar month. Tuple ordering is chronological."""

    year: int
    month: int

    @classmethod
    def from_date(cls, d: date) -> "PeriodKey":
        return cls(d.year, d.month)

    @property
    def label(self) -> str:
        """Short display label, e.g. ``Jun 2025``."""
        return f"{MONTH_ABBREVIATIONS[self.month - 1]} {self.year}"

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def previous(self) -> "PeriodKey":
        if self.month == 1:
            return PeriodKey(self.year - 1, 12)
        return PeriodKey(self.year, self.month - 1)

    def next(self) -> "PeriodKey":
        if self.month == 12:
            return PeriodKey(self.year + 1, 1)
        return PeriodKey(self.year, self.month + 1)

    def year_ago(self) -> "PeriodKey":
        return PeriodKey(self.year - 1, self.month)


class PerformanceRecord(BaseModel):
    """
    One client's performance for one calendar month.

    Attributes:
        entity_id: Client name as it appears in the performance sheet
        year: Calendar year
        month: Calendar month (1-12)
        revenue: Website revenue for the month
        orders: Orders placed
        orders_canceled: Orders canceled
        profit: Gross profit (may be negative)
        ad_spend: Paid search spend (Google + Bing)
        sessions: Website sessions
        avg_fulfillment_days: Average days from order to shipment
        days_of_data: Days covered so far when the month is in progress
            or was back-filled; None for complete months
    """

    model_config = ConfigDict(frozen=True)

    entity_id: str = Field(description="Client name")
    year: int = Field(ge=1, le=9999, description="Calendar year")
    month: int = Field(ge=1, le=12, description="Calendar month (1-12)")
    revenue: float = Field(default=0.0, description="Revenue for the month")
    orders: float = Field(default=0.0, description="Orders placed")
    orders_canceled: float = Field(default=0.0, description="Orders canceled")
    profit: float = Field(default=0.0, description="Profit (may be negative)")
    ad_spend: float = Field(default=0.0, description="Paid search spend")
    sessions: float = Field(default=0.0, description="Website sessions")
    avg_fulfillment_days: float = Field(
        default=0.0, description="Average fulfillment time in days"
    )
    days_of_data: Optional[float] = Field(
        default=None, description="Days covered for an in-progress month"
    )

    @field_validator(
        "revenue",
        "orders",
        "orders_canceled",
        "profit",
        "ad_spend",
        "sessions",
        "avg_fulfillment_days",
        mode="before",
    )
    @classmethod
    def coerce_absolute(cls, v: Any) -> float:
        """Malformed numbers degrade to 0 instead of failing validation."""
        return coerce_number(v)

    @field_validator("days_of_data", mode="before")
    @classmethod
    def coerce_days_of_data(cls, v: Any) -> Optional[float]:
        """Blank or malformed day counts mean the month is complete."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        days = coerce_number(v)
        return days if days > 0 else None

    @field_validator("entity_id")
    @classmethod
    def validate_entity_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("entity_id must not be empty")
        return v

    @property
    def period(self) -> PeriodKey:
        return PeriodKey(self.year, self.month)


def period_key(record: PerformanceRecord) -> PeriodKey:
    """Default period key: the record's calendar month."""
    return record.period
