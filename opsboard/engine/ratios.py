"""
Ratio Calculator — division-safe derived metrics.

Ratios are always computed from absolute totals, after any summing or
projection, never averaged across clients:

    aov              = revenue / orders
    roas             = revenue / ad_spend
    conv_rate        = orders / sessions * 100
    cancel_rate      = orders_canceled / orders * 100
    profit_margin    = profit / revenue * 100
    profit_per_order = profit / orders

A zero or non-finite denominator yields 0. NaN or infinite absolutes are
treated as 0 before dividing, so every output is finite and rendering
layers never need to special-case a ratio.
"""

import math
from collections.abc import Mapping
from typing import Any

from opsboard.models.periods import DerivedRatios

ABSOLUTE_FIELDS = (
    "revenue",
    "orders",
    "orders_canceled",
    "profit",
    "ad_spend",
    "sessions",
)


def _finite(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def safe_divide(numerator: Any, denominator: Any, scale: float = 1.0) -> float:
    """
    Divide, returning 0.0 instead of NaN or infinity.

    Args:
        numerator: Dividend (non-finite treated as 0)
        denominator: Divisor (zero or non-finite yields 0)
        scale: Multiplier applied to the quotient (100 for percentages)

    Returns:
        Finite quotient, or 0.0
    """
    num = _finite(numerator)
    den = _finite(denominator)
    if den == 0:
        return 0.0
    result = num / den * scale
    return result if math.isfinite(result) else 0.0


def read_absolutes(absolutes: Any) -> dict[str, float]:
    """Pull the absolute fields from a mapping or a model, defaulting to 0."""
    if isinstance(absolutes, Mapping):
        return {f: _finite(absolutes.get(f, 0.0)) for f in ABSOLUTE_FIELDS}
    return {f: _finite(getattr(absolutes, f, 0.0)) for f in ABSOLUTE_FIELDS}


def ratio_values(absolutes: Any) -> dict[str, float]:
    """Derived ratios as a plain dict, for merging into model constructors."""
    a = read_absolutes(absolutes)
    return {
        "aov": safe_divide(a["revenue"], a["orders"]),
        "roas": safe_divide(a["revenue"], a["ad_spend"]),
        "conv_rate": safe_divide(a["orders"], a["sessions"], 100.0),
        "cancel_rate": safe_divide(a["orders_canceled"], a["orders"], 100.0),
        "profit_margin": safe_divide(a["profit"], a["revenue"], 100.0),
        "profit_per_order": safe_divide(a["profit"], a["orders"]),
    }


def derive_ratios(absolutes: Any) -> DerivedRatios:
    """
    Compute every derived ratio from absolute totals.

    Accepts a PerformanceRecord, an AggregatedPeriod, or any mapping with
    the absolute field names. Missing fields count as 0. Cannot fail.

    Example:
        >>> derive_ratios({"revenue": 1000, "orders": 10, "sessions": 500}).aov
        100.0
    """
    return DerivedRatios(**ratio_values(absolutes))
