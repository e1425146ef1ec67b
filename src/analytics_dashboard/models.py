from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TimeSeriesPoint:
    key: str
    count: int


@dataclass(frozen=True)
class NamedSeries:
    label: str
    points: tuple[TimeSeriesPoint, ...] = ()

    @classmethod
    def from_pairs(cls, label: str, pairs: Any) -> NamedSeries:
        """Build a series from ``(key, count)`` pairs or a ``{key: count}`` mapping."""
        items = pairs.items() if hasattr(pairs, "items") else pairs
        return cls(
            label=label,
            points=tuple(TimeSeriesPoint(key=str(key), count=int(count)) for key, count in items),
        )


@dataclass(frozen=True)
class AlignedSeriesSet:
    """Several series re-expressed over one shared, sorted key axis.

    Every entry of ``series`` has exactly ``len(keys)`` values; a key the source
    series never reported is filled with ``0``.
    """

    keys: tuple[str, ...] = ()
    series: dict[str, tuple[int, ...]] = field(default_factory=dict)

    @property
    def labels(self) -> list[str]:
        return list(self.series)

    def as_named_series(self) -> list[NamedSeries]:
        return [
            NamedSeries(
                label=label,
                points=tuple(
                    TimeSeriesPoint(key=key, count=count) for key, count in zip(self.keys, values)
                ),
            )
            for label, values in self.series.items()
        ]


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    usage: int = 0
    category: int = 0
    google_id: str | None = None
    last_usage_date: str | None = None
    is_verified: bool = False


@dataclass(frozen=True)
class NewsletterSubscriber:
    email: str


@dataclass(frozen=True)
class TopUser:
    id: str
    name: str
    usage_count: int
    last_used: str | None = None


@dataclass(frozen=True)
class UserCalculation:
    id: str
    name: str
    calculations: NamedSeries
    total_calculations: int = 0


@dataclass(frozen=True)
class CalculatorUsage:
    name: str
    count: int
    trend: float = 0.0


@dataclass(frozen=True)
class SnapshotTotals:
    anthropometric_weekly: int = 0
    total_food_diary_logs: int = 0
    weekly_food_diary_logs: int = 0
    monthly_food_diary_logs: int = 0
    yearly_food_diary_logs: int = 0
    total_users: int = 0
    total_anthropometric_calculations: int = 0


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """One complete analytics payload. A new fetch replaces it wholesale."""

    daily_calculations: NamedSeries = field(
        default_factory=lambda: NamedSeries(label="Daily Calculations")
    )
    weekly_calculations: NamedSeries = field(
        default_factory=lambda: NamedSeries(label="Weekly Calculations")
    )
    monthly_calculations: NamedSeries = field(
        default_factory=lambda: NamedSeries(label="Monthly Calculations")
    )
    yearly_calculations: NamedSeries = field(
        default_factory=lambda: NamedSeries(label="Yearly Calculations")
    )
    daily_usage: NamedSeries = field(default_factory=lambda: NamedSeries(label="Daily Usage"))
    daily_signups: NamedSeries = field(default_factory=lambda: NamedSeries(label="Daily Signup"))
    user_calculations: tuple[UserCalculation, ...] = ()
    all_users: tuple[UserRecord, ...] = ()
    top_users: tuple[TopUser, ...] = ()
    most_used_calculators: tuple[CalculatorUsage, ...] = ()
    newsletter_subscribers: tuple[NewsletterSubscriber, ...] = ()
    totals: SnapshotTotals = field(default_factory=SnapshotTotals)

    @classmethod
    def empty(cls) -> AnalyticsSnapshot:
        return cls()

    def calculations_for(self, granularity: str) -> NamedSeries:
        by_granularity = {
            "daily": self.daily_calculations,
            "weekly": self.weekly_calculations,
            "monthly": self.monthly_calculations,
            "yearly": self.yearly_calculations,
        }
        if granularity not in by_granularity:
            raise ValueError(f"Unsupported granularity: {granularity}")
        return by_granularity[granularity]
