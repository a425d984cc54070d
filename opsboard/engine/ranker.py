"""
Ranker — leaderboards and threshold alerts.

Two modes:
1. Value ranking: stable sort of (entity, value) pairs, ascending or
   descending, optionally limited. Ties keep their input order so that
   re-rendering an unchanged input never reshuffles a leaderboard.
2. Threshold filter: keep entities whose absolute percent change meets or
   exceeds a threshold, largest magnitude first. Used by budget pacing and
   metric drift alerts. A threshold of 0 means "show all", including
   entities whose change is "N/A" (those sort last).

Version: ranker_v1
"""

import math
from collections.abc import Iterable
from typing import Optional, Union

import structlog

from opsboard.models.enums import MetricKey, RankDirection
from opsboard.models.periods import ChangeResult, EntityTotals, RankedEntity

logger = structlog.get_logger()

DEFAULT_MOVER_LIMIT = 20


def _sort_value(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _numbered(
    rows: Iterable[tuple[str, float, Optional[ChangeResult]]],
) -> list[RankedEntity]:
    return [
        RankedEntity(entity_id=entity_id, value=value, rank=i, change=change)
        for i, (entity_id, value, change) in enumerate(rows, start=1)
    ]


def rank(
    entities: Iterable[tuple[str, float]],
    direction: Union[RankDirection, str] = RankDirection.DESC,
    limit: Optional[int] = None,
) -> list[RankedEntity]:
    """
    Stable sort of (entity_id, value) pairs.

    Args:
        entities: Pairs in their natural (input) order
        direction: "asc" or "desc"
        limit: Keep at most this many rows (None = all)

    Returns:
        RankedEntity list with 1-based ranks. Non-finite values sort as 0.

    Raises:
        ValueError: If direction is not "asc" or "desc"
    """
    direction = RankDirection(direction)
    rows = [(entity_id, _sort_value(value)) for entity_id, value in entities]
    # sorted() is stable for reverse=True as well
    ordered = sorted(rows, key=lambda row: row[1], reverse=direction == RankDirection.DESC)
    if limit is not None:
        ordered = ordered[: max(limit, 0)]
    return _numbered((entity_id, value, None) for entity_id, value in ordered)


def rank_totals(
    totals: Iterable[EntityTotals],
    metric: Union[MetricKey, str],
    direction: Union[RankDirection, str] = RankDirection.DESC,
    limit: Optional[int] = None,
) -> list[RankedEntity]:
    """Leaderboard of EntityTotals by one metric."""
    name = MetricKey.parse(metric).value
    return rank(((t.entity_id, t.metric_value(name)) for t in totals), direction, limit)


def threshold_filter(
    entities: Iterable[tuple[str, ChangeResult]],
    threshold: float,
    limit: Optional[int] = None,
) -> list[RankedEntity]:
    """
    Keep entities whose |percent_change| >= threshold, largest first.

    Args:
        entities: (entity_id, ChangeResult) pairs
        threshold: Percent (e.g. 10.0 for +/-10%). 0 keeps every entity.
        limit: Keep at most this many rows (None = all)

    Returns:
        RankedEntity list; ``value`` is the percent change (0.0 when "N/A")
        and ``change`` carries the full ChangeResult.
    """
    threshold = _sort_value(threshold)
    show_all = threshold <= 0

    kept = []
    for entity_id, change in entities:
        magnitude = change.magnitude
        if show_all or (magnitude is not None and magnitude >= threshold):
            kept.append((entity_id, change))

    ordered = sorted(
        kept,
        key=lambda row: (row[1].is_available, row[1].magnitude or 0.0),
        reverse=True,
    )
    if limit is not None:
        ordered = ordered[: max(limit, 0)]

    logger.debug("threshold_filter_applied", threshold=threshold, kept=len(ordered))
    return _numbered(
        (entity_id, float(change.percent_change) if change.is_available else 0.0, change)
        for entity_id, change in ordered
    )


def split_movers(
    entities: Iterable[tuple[str, ChangeResult]],
    limit: Optional[int] = DEFAULT_MOVER_LIMIT,
) -> tuple[list[RankedEntity], list[RankedEntity]]:
    """
    Top gainers and losers by percent change.

    Gainers have a positive change, largest first; losers a negative change,
    most negative first. "N/A" and zero changes are in neither list.
    """
    available = [(e, c) for e, c in entities if c.is_available]
    gainers = [(e, c) for e, c in available if c.percent_change > 0]
    losers = [(e, c) for e, c in available if c.percent_change < 0]

    gainers = sorted(gainers, key=lambda row: row[1].percent_change, reverse=True)
    losers = sorted(losers, key=lambda row: row[1].percent_change)
    if limit is not None:
        gainers = gainers[: max(limit, 0)]
        losers = losers[: max(limit, 0)]

    return (
        _numbered((e, float(c.percent_change), c) for e, c in gainers),
        _numbered((e, float(c.percent_change), c) for e, c in losers),
    )
