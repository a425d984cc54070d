"""
Metrics engine core components.

This package contains the stages that turn raw monthly client records into
dashboard-ready figures:

- Ratios: AOV, ROAS, conversion and cancellation rates from summed absolutes
- Aggregation: per-group, per-month totals over an EntityGroup selection
- Projection: full-month estimates for an in-progress month
- Comparison: month-over-month and year-over-year changes with polarity
- Ranking: leaderboards, top movers and threshold alerts
- Windows: trailing chart and table windows
- Summary: group dashboards and cross-client views built from the above

Engine components do no I/O and every output is a new frozen model. The
reference date ("today") is a parameter; when a caller leaves it out,
Projector.project, SummaryBuilder.build and the cross-client views fall back
to date.today(), so pass it explicitly for repeatable results.
"""

__version__ = "1.0.0"

__all__ = [
    "Aggregator",
    "Projector",
    "SummaryBuilder",
]

from opsboard.engine.aggregator import Aggregator
from opsboard.engine.projector import Projector
from opsboard.engine.summary import SummaryBuilder
