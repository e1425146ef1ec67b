from __future__ import annotations

from analytics_dashboard.io.snapshot import parse_snapshot
from analytics_dashboard.shaping.rankings import (
    CALCULATOR_COLUMNS,
    RANKING_COLUMNS,
    calculator_usage_table,
    summary_cards,
    top_calculation_users_table,
    top_users_table,
)


def test_top_users_table_ranks_in_upstream_order() -> None:
    snapshot = parse_snapshot(
        {
            "topUsers": [
                {"id": "a", "name": "Ana", "usageCount": 30, "lastUsed": "2024-03-04T12:00:00Z"},
                {"id": "b", "name": "Ben", "usageCount": 20, "lastUsed": None},
            ]
        }
    )

    table = top_users_table(snapshot)

    assert list(table.columns) == RANKING_COLUMNS
    assert table["rank"].tolist() == [1, 2]
    assert table["user"].tolist() == ["Ana", "Ben"]
    assert table["last_active"].tolist() == ["2024-03-04", "N/A"]


def test_top_calculation_users_use_latest_calculation_date() -> None:
    snapshot = parse_snapshot(
        {
            "userCalculations": [
                {
                    "name": "Ana",
                    "totalCalculations": 9,
                    "calculations": [
                        {"date": "2024-01-05", "count": 4},
                        {"date": "2024-02-01", "count": 5},
                    ],
                },
                {"name": "Ben", "totalCalculations": 0, "calculations": []},
            ]
        }
    )

    table = top_calculation_users_table(snapshot, missing_date_marker="-")

    assert table["usage_count"].tolist() == [9, 0]
    assert table["last_active"].tolist() == ["2024-02-01", "-"]


def test_rankings_without_data_are_empty_frames() -> None:
    assert top_users_table(None).empty
    assert list(top_calculation_users_table(None).columns) == RANKING_COLUMNS


def test_summary_cards_default_to_zero() -> None:
    cards = summary_cards(None)

    assert [card["label"] for card in cards] == [
        "Anthropometric Stats (Weekly)",
        "Total Food Diary Logs",
        "Weekly Food Diary Logs",
        "Monthly Food Diary Logs",
        "Yearly Food Diary Logs",
        "Total Users",
        "Total Anthropometric",
    ]
    assert {card["value"] for card in cards} == {0}


def test_summary_cards_include_food_diary_periods() -> None:
    snapshot = parse_snapshot(
        {"weeklyFoodDiaryLogs": 7, "monthlyFoodDiaryLogs": 31, "yearlyFoodDiaryLogs": 365}
    )

    values = {card["key"]: card["value"] for card in summary_cards(snapshot)}

    assert values["weekly_food_diary_logs"] == 7
    assert values["monthly_food_diary_logs"] == 31
    assert values["yearly_food_diary_logs"] == 365


def test_calculator_usage_table_keeps_trend_and_order() -> None:
    snapshot = parse_snapshot(
        {
            "mostUsedCalculators": [
                {"name": "TDEE", "count": 10, "trend": 12.5},
                {"name": "BMI", "count": 4, "trend": -3},
            ]
        }
    )

    table = calculator_usage_table(snapshot)

    assert list(table.columns) == CALCULATOR_COLUMNS
    assert table["calculator"].tolist() == ["TDEE", "BMI"]
    assert table["trend"].tolist() == [12.5, -3.0]
    assert calculator_usage_table(None).empty
