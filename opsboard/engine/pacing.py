"""
Budget pacing alerts.

    pace_offset = projected_total_spend - target_spend

Both sides are percentages of the monthly budget, so the offset is in
percentage points: a client projected to finish at 118% of budget while
100% is expected is 18 points over pace. Clients whose |offset| meets the
threshold are alerted, most off-pace first.

Version: pacing_v1
"""

import math
from collections.abc import Iterable
from typing import Optional

import structlog

from opsboard.engine.ranker import threshold_filter
from opsboard.models.accounts import BudgetStatus
from opsboard.models.periods import NOT_AVAILABLE, ChangeResult, RankedEntity

logger = structlog.get_logger()

PACING_METRIC = "budget_pace"


def pacing_change(status: BudgetStatus) -> ChangeResult:
    """
    Pace offset of one client as a ChangeResult.

    ``percent_change`` is the signed offset in percentage points; it is
    "N/A" when the client has no budget. Only an exactly on-pace client is
    favorable, since overspend and underspend both need attention.
    """
    if not status.ppc_budget:
        return ChangeResult(
            metric_key=PACING_METRIC,
            current_value=status.projected_total_spend,
            reference_value=status.target_spend,
            percent_change=NOT_AVAILABLE,
        )

    offset = status.projected_total_spend - status.target_spend
    if not math.isfinite(offset):
        offset = 0.0
    return ChangeResult(
        metric_key=PACING_METRIC,
        current_value=status.projected_total_spend,
        reference_value=status.target_spend,
        percent_change=offset,
        is_favorable=offset == 0,
    )


def pacing_alerts(
    statuses: Iterable[BudgetStatus],
    threshold: float,
    limit: Optional[int] = None,
) -> list[RankedEntity]:
    """
    Clients whose projected spend is at least ``threshold`` points off target.

    Args:
        statuses: Budget status rows
        threshold: Percentage points; 0 lists every client
        limit: Keep at most this many rows (None = all)
    """
    changes = [(s.client_name, pacing_change(s)) for s in statuses]
    alerts = threshold_filter(changes, threshold, limit)
    logger.debug(
        "pacing_alerts_built",
        clients=len(changes),
        alerts=len(alerts),
        threshold=threshold,
    )
    return alerts
