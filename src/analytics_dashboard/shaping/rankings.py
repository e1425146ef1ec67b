from __future__ import annotations

import pandas as pd

from analytics_dashboard.dates import format_date, to_utc_date
from analytics_dashboard.models import AnalyticsSnapshot

RANKING_COLUMNS = ["rank", "user", "usage_count", "last_active"]
CALCULATOR_COLUMNS = ["rank", "calculator", "count", "trend"]


def summary_cards(snapshot: AnalyticsSnapshot | None) -> list[dict[str, object]]:
    resolved = snapshot if snapshot is not None else AnalyticsSnapshot.empty()
    totals = resolved.totals
    return [
        {
            "key": "anthropometric_weekly",
            "label": "Anthropometric Stats (Weekly)",
            "value": totals.anthropometric_weekly,
        },
        {
            "key": "total_food_diary_logs",
            "label": "Total Food Diary Logs",
            "value": totals.total_food_diary_logs,
        },
        {
            "key": "weekly_food_diary_logs",
            "label": "Weekly Food Diary Logs",
            "value": totals.weekly_food_diary_logs,
        },
        {
            "key": "monthly_food_diary_logs",
            "label": "Monthly Food Diary Logs",
            "value": totals.monthly_food_diary_logs,
        },
        {
            "key": "yearly_food_diary_logs",
            "label": "Yearly Food Diary Logs",
            "value": totals.yearly_food_diary_logs,
        },
        {"key": "total_users", "label": "Total Users", "value": totals.total_users},
        {
            "key": "total_anthropometric",
            "label": "Total Anthropometric",
            "value": totals.total_anthropometric_calculations,
        },
    ]


def top_users_table(
    snapshot: AnalyticsSnapshot | None,
    missing_date_marker: str = "N/A",
) -> pd.DataFrame:
    """Upstream engagement ranking, 1-based, in the order the backend sent it."""
    if snapshot is None or not snapshot.top_users:
        return pd.DataFrame(columns=RANKING_COLUMNS)
    return pd.DataFrame(
        [
            {
                "rank": position,
                "user": user.name,
                "usage_count": user.usage_count,
                "last_active": format_date(user.last_used, missing_date_marker),
            }
            for position, user in enumerate(snapshot.top_users, start=1)
        ],
        columns=RANKING_COLUMNS,
    )


def top_calculation_users_table(
    snapshot: AnalyticsSnapshot | None,
    missing_date_marker: str = "N/A",
) -> pd.DataFrame:
    if snapshot is None or not snapshot.user_calculations:
        return pd.DataFrame(columns=RANKING_COLUMNS)
    rows = []
    for position, user in enumerate(snapshot.user_calculations, start=1):
        dates = [
            parsed
            for parsed in (to_utc_date(point.key) for point in user.calculations.points)
            if parsed is not None
        ]
        rows.append(
            {
                "rank": position,
                "user": user.name,
                "usage_count": user.total_calculations,
                "last_active": max(dates) if dates else missing_date_marker,
            }
        )
    return pd.DataFrame(rows, columns=RANKING_COLUMNS)


def calculator_usage_table(snapshot: AnalyticsSnapshot | None) -> pd.DataFrame:
    """Most used calculators with their upstream trend, in the order received."""
    if snapshot is None or not snapshot.most_used_calculators:
        return pd.DataFrame(columns=CALCULATOR_COLUMNS)
    return pd.DataFrame(
        [
            {
                "rank": position,
                "calculator": calculator.name,
                "count": calculator.count,
                "trend": calculator.trend,
            }
            for position, calculator in enumerate(snapshot.most_used_calculators, start=1)
        ],
        columns=CALCULATOR_COLUMNS,
    )
