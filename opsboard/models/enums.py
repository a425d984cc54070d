"""
Enumeration types for the metrics engine.

All enums inherit from str so they serialize to JSON as plain values and
compare equal to the raw strings UI callers pass in.
"""

from enum import Enum
from typing import Union


class MetricKey(str, Enum):
    """
    Metrics the engine can aggregate, compare and rank.

    The first group are absolute (summable) fields of a monthly performance
    record; the second group are ratios derived after summing.
    """

    # Absolute fields
    REVENUE = "revenue"
    ORDERS = "orders"
    ORDERS_CANCELED = "orders_canceled"
    PROFIT = "profit"
    AD_SPEND = "ad_spend"
    SESSIONS = "sessions"
    AVG_FULFILLMENT_DAYS = "avg_fulfillment_days"

    # Derived ratios
    AOV = "aov"
    ROAS = "roas"
    CONV_RATE = "conv_rate"
    CANCEL_RATE = "cancel_rate"
    PROFIT_MARGIN = "profit_margin"
    PROFIT_PER_ORDER = "profit_per_order"

    @classmethod
    def parse(cls, metric: Union["MetricKey", str]) -> "MetricKey":
        """
        Look up a metric by key.

        Raises:
            ValueError: If the key is not a known metric
        """
        try:
            return cls(metric)
        except ValueError:
            available = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Unknown metric: {metric!r}. Available metrics: {available}"
            ) from None


class ChangeDirection(str, Enum):
    """Table-row change indicator relative to the previous month."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class RankDirection(str, Enum):
    """Sort direction for leaderboards."""

    ASC = "asc"
    DESC = "desc"


class TimeRange(str, Enum):
    """
    Trailing windows offered by the dashboard's range selectors.

    Each value is the number of months followed by ``m``.
    """

    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    TWELVE_MONTHS = "12m"
    TWENTY_FOUR_MONTHS = "24m"

    @property
    def months(self) -> int:
        return int(self.value[:-1])


class ContactRole(str, Enum):
    """Account-team roles that own a book of business."""

    PPC = "PPC"
    PDM = "PDM"
