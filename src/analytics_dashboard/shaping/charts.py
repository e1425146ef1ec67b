from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from analytics_dashboard.config import DEFAULT_PALETTE, AppConfig
from analytics_dashboard.models import AlignedSeriesSet, AnalyticsSnapshot, NamedSeries
from analytics_dashboard.shaping.series import align_series

GRANULARITIES = ("daily", "weekly", "monthly", "yearly")

# (border, background) pairs used by the single-series charts.
GRANULARITY_COLORS = {
    "daily": ("#FF6384", "rgba(255, 99, 132, 0.2)"),
    "weekly": ("#36A2EB", "rgba(54, 162, 235, 0.2)"),
    "monthly": ("#FFCE56", "rgba(255, 206, 86, 0.2)"),
    "yearly": ("#4BC0C0", "rgba(75, 192, 192, 0.2)"),
}
USAGE_COLORS = ("#6366F1", "rgba(99, 102, 241, 0.2)")
ACTIVITY_COLORS = {
    "Daily Logins": ("#6366F1", "rgba(99, 102, 241, 0.5)"),
    "Daily Calculations": ("#FF6384", "rgba(255, 99, 132, 0.5)"),
}
CALCULATOR_COLOR = "#4F46E5"


@dataclass(frozen=True)
class ChartDataset:
    label: str
    data: tuple[int, ...]
    border_color: str | None = None
    background_color: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"label": self.label, "data": list(self.data)}
        if self.border_color is not None:
            payload["borderColor"] = self.border_color
        if self.background_color is not None:
            payload["backgroundColor"] = self.background_color
        return payload


@dataclass(frozen=True)
class ChartData:
    title: str
    labels: tuple[str, ...] = ()
    datasets: tuple[ChartDataset, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.labels

    def as_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "labels": list(self.labels),
            "datasets": [dataset.as_dict() for dataset in self.datasets],
        }


def _hex_to_rgba(color: str, alpha: float) -> str:
    stripped = color.lstrip("#")
    if len(stripped) != 6:
        return color
    red, green, blue = (int(stripped[offset : offset + 2], 16) for offset in (0, 2, 4))
    return f"rgba({red}, {green}, {blue}, {alpha})"


def _single_series_chart(
    title: str,
    series: NamedSeries,
    colors: tuple[str, str],
) -> ChartData:
    aligned = align_series([series])
    return _aligned_chart(title, aligned, {series.label: colors})


def _aligned_chart(
    title: str,
    aligned: AlignedSeriesSet,
    colors: dict[str, tuple[str, str]],
) -> ChartData:
    if not aligned.keys:
        return ChartData(title=title)
    return ChartData(
        title=title,
        labels=aligned.keys,
        datasets=tuple(
            ChartDataset(
                label=label,
                data=values,
                border_color=colors.get(label, (None, None))[0],
                background_color=colors.get(label, (None, None))[1],
            )
            for label, values in aligned.series.items()
        ),
    )


def _snapshot_or_empty(snapshot: AnalyticsSnapshot | None) -> AnalyticsSnapshot:
    return snapshot if snapshot is not None else AnalyticsSnapshot.empty()


def periodic_chart(snapshot: AnalyticsSnapshot | None, granularity: str = "daily") -> ChartData:
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unsupported granularity: {granularity}")
    series = _snapshot_or_empty(snapshot).calculations_for(granularity)
    return _single_series_chart(
        f"Calculator Usage - {granularity}",
        series,
        GRANULARITY_COLORS[granularity],
    )


def daily_usage_chart(snapshot: AnalyticsSnapshot | None) -> ChartData:
    return _single_series_chart(
        "Daily Usage", _snapshot_or_empty(snapshot).daily_usage, USAGE_COLORS
    )


def daily_signups_chart(snapshot: AnalyticsSnapshot | None) -> ChartData:
    return _single_series_chart(
        "Daily Signup Rate", _snapshot_or_empty(snapshot).daily_signups, USAGE_COLORS
    )


def user_activity_chart(snapshot: AnalyticsSnapshot | None) -> ChartData:
    """Logins and calculations per day on one shared date axis."""
    resolved = _snapshot_or_empty(snapshot)
    aligned = align_series(
        [
            NamedSeries(label="Daily Logins", points=resolved.daily_usage.points),
            NamedSeries(label="Daily Calculations", points=resolved.daily_calculations.points),
        ]
    )
    return _aligned_chart("User Activity Distribution", aligned, ACTIVITY_COLORS)


def user_calculations_chart(
    snapshot: AnalyticsSnapshot | None,
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> ChartData:
    resolved = _snapshot_or_empty(snapshot)
    aligned = align_series(user.calculations for user in resolved.user_calculations)
    colors = {
        label: (
            palette[index % len(palette)],
            _hex_to_rgba(palette[index % len(palette)], 0.6),
        )
        for index, label in enumerate(aligned.series)
    }
    return _aligned_chart("Food Diary Usage", aligned, colors)


def calculator_usage_chart(snapshot: AnalyticsSnapshot | None) -> ChartData:
    # Ranked upstream; label order is the ranking, not sorted.
    calculators = _snapshot_or_empty(snapshot).most_used_calculators
    if not calculators:
        return ChartData(title="Most Used Calculators")
    return ChartData(
        title="Most Used Calculators",
        labels=tuple(calculator.name for calculator in calculators),
        datasets=(
            ChartDataset(
                label="Usage Count",
                data=tuple(calculator.count for calculator in calculators),
                background_color=CALCULATOR_COLOR,
            ),
        ),
    )


def build_charts(snapshot: AnalyticsSnapshot | None, config: AppConfig) -> dict[str, ChartData]:
    charts: dict[str, ChartData] = {
        "daily_signups": daily_signups_chart(snapshot),
        "daily_usage": daily_usage_chart(snapshot),
        "most_used_calculators": calculator_usage_chart(snapshot),
        "calculator_usage": periodic_chart(snapshot, config.charts.default_granularity),
        "user_activity": user_activity_chart(snapshot),
        "user_calculations": user_calculations_chart(snapshot, config.charts.palette),
    }
    for granularity in GRANULARITIES:
        charts[f"calculations_{granularity}"] = periodic_chart(snapshot, granularity)
    return charts
