"""
Dashboard Summary Demo - Group Aggregation and Projection

Demonstrates the metrics engine building a group dashboard from synthetic
monthly client records.

This script shows:
1. Creating synthetic sheet rows for a handful of clients
2. Ingesting them through the sheet adapters
3. Building a brand group summary (KPIs, MoM / YoY, trend, table)
4. Client and brand leaderboards
5. Top movers and metric drift alerts
6. Budget pacing alerts

Usage:
    python demo_dashboard_summary.py
"""

from datetime import date

from opsboard.adapters import ingest_accounts, ingest_budgets, ingest_contacts, ingest_performance
from opsboard.engine import SummaryBuilder
from opsboard.engine.grouping import group_for_brand, group_for_manager
from opsboard.engine.pacing import pacing_alerts
from opsboard.engine.windows import trailing_period_keys
from opsboard.models import NOT_AVAILABLE, GroupSummary, MoverBoard, RankedEntity
from opsboard.utils import bind_view_context, clear_view_context, configure_logging

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

CLIENTS = {
    # client: (base monthly revenue, brands, auto group, PPC manager)
    "Summit Offroad": (42000.0, "Rugged Ridge", "Jeep", "Dana"),
    "Trailhead Parts": (31000.0, "Rugged Ridge, Bestop", "Jeep", "Dana"),
    "Canyon Auto": (18500.0, "Bestop", "Jeep", "Morgan"),
    "Harbor Truck Supply": (55000.0, "WeatherTech", "Truck", "Morgan"),
    "Pinewood Garage": (9000.0, "WeatherTech", "Truck", "Dana"),
}


def create_synthetic_rows(reference_date: date, num_months: int = 15) -> list[dict]:
    """
    Create synthetic performance-sheet rows.

    Generates one row per client per month, ending with the reference month,
    which only has ``reference_date.day - 1`` days of data.

    Args:
        reference_date: "Today" for the demo
        num_months: Months of history per client

    Returns:
        List of sheet rows keyed by the sheet's headers
    """
    rows = []
    year, month = reference_date.year, reference_date.month
    months = []
    for _ in range(num_months):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    months.reverse()

    print(f"Generating {num_months} months of rows for {len(CLIENTS)} clients...")

    for client_index, (client, (base, _, _, _)) in enumerate(CLIENTS.items()):
        for month_index, (y, m) in enumerate(months):
            seasonal = 1.0 + 0.15 * ((m % 6) - 2.5) / 2.5
            growth = 1.0 + 0.01 * month_index * (1 if client_index % 2 == 0 else -1)
            revenue = base * seasonal * growth
            is_current = (y, m) == (reference_date.year, reference_date.month)
            days = max(reference_date.day - 1, 1)
            if is_current:
                revenue = revenue * days / 30

            orders = round(revenue / (180 + 15 * client_index))
            rows.append({
                "ClientName": client,
                "Month": MONTH_NAMES[m - 1],
                "Year": y,
                "Revenue": f"${revenue:,.2f}",
                "Orders": orders,
                "Orders_Canceled": max(orders // 40, 0),
                "Profit": round(revenue * 0.22, 2),
                "PPC_Spend": round(revenue * 0.11, 2),
                "Sessions": orders * 55,
                "Avg_Fulfillment": 1.5 + 0.2 * client_index,
                "Days_of_Data": days if is_current else "",
            })
    return rows


def print_group_summary(summary: GroupSummary):
    """
    Pretty print a group summary.

    Args:
        summary: Output of SummaryBuilder.build()
    """
    print("\n" + "=" * 80)
    print(f"GROUP DASHBOARD: {summary.group_name}")
    print("=" * 80)

    if not summary.has_data:
        print("  No data for this selection.")
        return

    kpi = summary.kpi_period
    suffix = f" (Proj.) - {kpi.projection_info}" if kpi.is_projected else ""
    print(f"\nKPI MONTH: {kpi.label}{suffix}")
    print("-" * 80)

    comparison = summary.comparison
    for metric, mom in comparison.mom.items():
        yoy = comparison.yoy[metric]
        mom_str = NOT_AVAILABLE if not mom.is_available else f"{mom.percent_change:+.1f}%"
        yoy_str = NOT_AVAILABLE if not yoy.is_available else f"{yoy.percent_change:+.1f}%"
        print(f"  {metric:<12} {mom.current_value:>14,.2f}   MoM {mom_str:>8}   YoY {yoy_str:>8}")

    print(f"\nTREND ({len(summary.trend)} closed months)")
    print("-" * 80)
    print("  " + "  ".join(p.label for p in summary.trend))

    print("\nMONTHLY TABLE")
    print("-" * 80)
    arrows = {"positive": "+", "negative": "-", "neutral": "="}
    for row in summary.table[:6]:
        indicator = arrows.get(row.changes.get("revenue", ""), " ")
        print(
            f"  {row.label:<22} revenue {row.period.revenue:>12,.2f} {indicator}"
            f"   roas {row.period.roas:>6.2f}   conv {row.period.conv_rate:>5.2f}%"
        )


def print_ranked(title: str, rows: list[RankedEntity], percent: bool = False):
    print(f"\n{title}")
    print("-" * 80)
    if not rows:
        print("  (none)")
    for row in rows:
        value = f"{row.value:+.1f}%" if percent else f"{row.value:,.2f}"
        print(f"  {row.rank:>2}. {row.entity_id:<24} {value:>14}")


def print_movers(board: MoverBoard):
    print("\n" + "=" * 80)
    print(f"TOP MOVERS - {board.metric_key} ({board.label})")
    print("=" * 80)
    print_ranked("Gainers", board.gainers, percent=True)
    print_ranked("Losers", board.losers, percent=True)


def main():
    """Main demonstration function."""
    configure_logging()

    print("\n" + "=" * 80)
    print("DASHBOARD SUMMARY DEMO - Group Aggregation and Projection")
    print("=" * 80 + "\n")

    reference_date = date.today()
    builder = SummaryBuilder()

    # Ingest synthetic sheets
    records, report = ingest_performance(create_synthetic_rows(reference_date))
    print(f"Ingested {report.valid_rows}/{report.total_rows} performance rows")

    accounts, _ = ingest_accounts(
        {"ClientName": c, "AutoGroup": g, "Brands": b}
        for c, (_, b, g, _) in CLIENTS.items()
    )
    contacts, _ = ingest_contacts(
        {"ClientName": c, "PPC": ppc, "PDM": ""} for c, (_, _, _, ppc) in CLIENTS.items()
    )

    # Demo 1: Brand group summary
    print("\n" + "=" * 80)
    print("DEMO 1: Brand Group Summary")
    print("=" * 80)
    group = group_for_brand(accounts, "Rugged Ridge")
    bind_view_context(view="brand_summary", group=group.name)
    print_group_summary(builder.build(records, group, reference_date, "6m", "12m"))
    clear_view_context()

    # Demo 2: Manager book of business with one client toggled off
    print("\n" + "=" * 80)
    print("DEMO 2: Manager Book of Business (one client excluded)")
    print("=" * 80)
    group = group_for_manager(contacts, "PPC", "Dana").toggle("Pinewood Garage")
    bind_view_context(view="manager_summary", group=group.name)
    print_group_summary(builder.build(records, group, reference_date, "3m", "6m"))
    clear_view_context()

    # Demo 3: Leaderboards over the last three closed months
    print("\n" + "=" * 80)
    print("DEMO 3: Leaderboards (last 3 closed months)")
    print("=" * 80)
    periods = trailing_period_keys(reference_date, "3m")
    print_ranked("Clients by revenue", builder.entity_leaderboard(records, "revenue", periods))
    print_ranked(
        "Brands by revenue (single-brand stores)",
        builder.brand_leaderboard(records, accounts, "revenue", periods),
    )

    # Demo 4: Movers and drift alerts
    print_movers(builder.client_movers(records, "revenue", reference_date))
    everyone = group_for_manager(contacts, "PPC", "All Clients", records)
    print_ranked(
        "Revenue drift alerts (>= 5%)",
        builder.metric_drift_alerts(records, everyone, "revenue", 5.0, reference_date),
        percent=True,
    )

    # Demo 5: Budget pacing
    budgets, _ = ingest_budgets([
        {"ClientName": "Summit Offroad", "ppcBudget": "$5,000", "targetSpend": "100%",
         "projectedTotalSpend": "118%"},
        {"ClientName": "Canyon Auto", "ppcBudget": "2500", "targetSpend": "100%",
         "projectedTotalSpend": "96%"},
        {"ClientName": "Harbor Truck Supply", "ppcBudget": "8000", "targetSpend": "100",
         "projectedTotalSpend": "71"},
    ])
    print_ranked("Budget pacing alerts (>= 10 points)", pacing_alerts(budgets, 10.0))

    print("\n" + "=" * 80)
    print("DEMO COMPLETE")
    print("=" * 80)
    print("\nKey Takeaways:")
    print("1. Ratios are always rederived from summed absolutes")
    print("2. Only the latest month is projected, and only when it is partial")
    print("3. Trends exclude the in-progress month; KPIs use its projection")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    main()
