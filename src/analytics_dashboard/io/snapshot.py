from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Mapping

from analytics_dashboard.models import (
    AnalyticsSnapshot,
    CalculatorUsage,
    NamedSeries,
    NewsletterSubscriber,
    SnapshotTotals,
    TimeSeriesPoint,
    TopUser,
    UserCalculation,
    UserRecord,
)

LOGGER = logging.getLogger(__name__)


def _as_list(value: Any, *, field_name: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    LOGGER.warning("Snapshot field '%s' is not a list; treating it as empty", field_name)
    return []


def _coerce_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


def _coerce_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return default
    return default


def _coerce_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def _optional_string(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_series(
    entries: Any,
    *,
    label: str,
    field_name: str,
    key_fields: tuple[str, ...] = ("_id",),
) -> NamedSeries:
    points: list[TimeSeriesPoint] = []
    dropped = 0
    for entry in _as_list(entries, field_name=field_name):
        if not isinstance(entry, Mapping):
            dropped += 1
            continue
        key = next(
            (
                _optional_string(entry.get(name))
                for name in key_fields
                if entry.get(name) is not None
            ),
            None,
        )
        count = _coerce_count(entry.get("count"))
        if key is None or count is None:
            dropped += 1
            continue
        points.append(TimeSeriesPoint(key=key, count=count))
    if dropped:
        LOGGER.warning(
            "Dropped %d malformed point(s) from snapshot field '%s'", dropped, field_name
        )
    return NamedSeries(label=label, points=tuple(points))


def _parse_user(entry: Mapping[str, Any]) -> UserRecord:
    return UserRecord(
        id=str(entry.get("_id") or entry.get("id") or ""),
        email=str(entry.get("email") or ""),
        first_name=str(entry.get("firstName") or ""),
        last_name=str(entry.get("lastName") or ""),
        usage=_coerce_int(entry.get("usage")),
        category=_coerce_int(entry.get("category")),
        google_id=_optional_string(entry.get("googleId")),
        last_usage_date=_optional_string(entry.get("lastUsageDate")),
        is_verified=bool(entry.get("isVerified")),
    )


def _parse_user_calculation(entry: Mapping[str, Any], index: int) -> UserCalculation:
    name = str(entry.get("name") or f"User {index + 1}")
    calculations = _parse_series(
        entry.get("calculations"),
        label=name,
        field_name=f"userCalculations[{index}].calculations",
        key_fields=("date",),
    )
    total = entry.get("totalCalculations")
    return UserCalculation(
        id=str(entry.get("id") or entry.get("_id") or ""),
        name=name,
        calculations=calculations,
        total_calculations=(
            _coerce_int(total)
            if total is not None
            else sum(point.count for point in calculations.points)
        ),
    )


def _mappings(value: Any, *, field_name: str) -> list[Mapping[str, Any]]:
    entries = _as_list(value, field_name=field_name)
    mappings = [entry for entry in entries if isinstance(entry, Mapping)]
    if len(mappings) != len(entries):
        LOGGER.warning(
            "Dropped %d non-object entr(ies) from snapshot field '%s'",
            len(entries) - len(mappings),
            field_name,
        )
    return mappings


def parse_snapshot(payload: Mapping[str, Any] | None) -> AnalyticsSnapshot:
    """Convert one decoded analytics document into an ``AnalyticsSnapshot``.

    Missing optional sections degrade to empty collections and zero totals; only a
    payload that is not an object at all is rejected.
    """
    if payload is None:
        return AnalyticsSnapshot.empty()
    if not isinstance(payload, Mapping):
        raise ValueError("analytics snapshot must be a JSON object")

    anthropometric = payload.get("anthropometricStats")
    totals = SnapshotTotals(
        anthropometric_weekly=_coerce_int(
            anthropometric.get("weekly") if isinstance(anthropometric, Mapping) else None
        ),
        total_food_diary_logs=_coerce_int(payload.get("totalFoodDiaryLogs")),
        weekly_food_diary_logs=_coerce_int(payload.get("weeklyFoodDiaryLogs")),
        monthly_food_diary_logs=_coerce_int(payload.get("monthlyFoodDiaryLogs")),
        yearly_food_diary_logs=_coerce_int(payload.get("yearlyFoodDiaryLogs")),
        total_users=_coerce_int(payload.get("totalUsers")),
        total_anthropometric_calculations=_coerce_int(
            payload.get("totalAnthropometricCalculations")
        ),
    )

    return AnalyticsSnapshot(
        daily_calculations=_parse_series(
            payload.get("dailyCalculations"),
            label="Daily Calculations",
            field_name="dailyCalculations",
        ),
        weekly_calculations=_parse_series(
            payload.get("weeklyCalculations"),
            label="Weekly Calculations",
            field_name="weeklyCalculations",
            key_fields=("week", "_id"),
        ),
        monthly_calculations=_parse_series(
            payload.get("monthlyCalculations"),
            label="Monthly Calculations",
            field_name="monthlyCalculations",
            key_fields=("month", "_id"),
        ),
        yearly_calculations=_parse_series(
            payload.get("yearlyCalculations"),
            label="Yearly Calculations",
            field_name="yearlyCalculations",
            key_fields=("year", "_id"),
        ),
        daily_usage=_parse_series(
            payload.get("dailyUsage"), label="Daily Usage", field_name="dailyUsage"
        ),
        daily_signups=_parse_series(
            payload.get("dailySignups"), label="Daily Signup", field_name="dailySignups"
        ),
        user_calculations=tuple(
            _parse_user_calculation(entry, index)
            for index, entry in enumerate(
                _mappings(payload.get("userCalculations"), field_name="userCalculations")
            )
        ),
        all_users=tuple(
            _parse_user(entry)
            for entry in _mappings(payload.get("allUsers"), field_name="allUsers")
        ),
        top_users=tuple(
            TopUser(
                id=str(entry.get("id") or ""),
                name=str(entry.get("name") or ""),
                usage_count=_coerce_int(entry.get("usageCount")),
                last_used=_optional_string(entry.get("lastUsed")),
            )
            for entry in _mappings(payload.get("topUsers"), field_name="topUsers")
        ),
        most_used_calculators=tuple(
            CalculatorUsage(
                name=str(entry.get("name") or ""),
                count=_coerce_int(entry.get("count")),
                trend=_coerce_float(entry.get("trend")),
            )
            for entry in _mappings(
                payload.get("mostUsedCalculators"), field_name="mostUsedCalculators"
            )
        ),
        newsletter_subscribers=tuple(
            NewsletterSubscriber(email=str(entry.get("email") or ""))
            for entry in _mappings(
                payload.get("newsletterSubscribers"), field_name="newsletterSubscribers"
            )
        ),
        totals=totals,
    )


def load_snapshot(path: str | Path | None) -> AnalyticsSnapshot:
    if not path:
        return AnalyticsSnapshot.empty()
    source_path = Path(path).resolve()
    with source_path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid analytics snapshot JSON in {source_path}") from exc
        except UnicodeDecodeError as exc:
            raise ValueError(f"analytics snapshot {source_path} is not valid UTF-8") from exc
    return parse_snapshot(payload)
