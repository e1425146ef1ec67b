from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from analytics_dashboard.config import AppConfig
from analytics_dashboard.export.users_csv import ExportPayload, export_users_csv
from analytics_dashboard.io.snapshot import load_snapshot
from analytics_dashboard.io.write import write_export, write_summary, write_table
from analytics_dashboard.models import AnalyticsSnapshot, NamedSeries
from analytics_dashboard.paths import build_output_paths
from analytics_dashboard.shaping.charts import ChartData, build_charts
from analytics_dashboard.shaping.rankings import (
    calculator_usage_table,
    summary_cards,
    top_calculation_users_table,
    top_users_table,
)
from analytics_dashboard.shaping.series import align_series, aligned_to_frame

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardOutputs:
    charts: dict[str, ChartData]
    cards: list[dict[str, Any]]
    tables: dict[str, pd.DataFrame]
    export: ExportPayload


def _activity_table(snapshot: AnalyticsSnapshot) -> pd.DataFrame:
    aligned = align_series(
        [
            NamedSeries(label="daily_logins", points=snapshot.daily_usage.points),
            NamedSeries(label="daily_calculations", points=snapshot.daily_calculations.points),
            NamedSeries(label="daily_signups", points=snapshot.daily_signups.points),
        ]
    )
    return aligned_to_frame(aligned, key_column="date")


def build_dashboard(snapshot: AnalyticsSnapshot | None, config: AppConfig) -> DashboardOutputs:
    resolved = snapshot if snapshot is not None else AnalyticsSnapshot.empty()
    marker = config.export.missing_date_marker
    return DashboardOutputs(
        charts=build_charts(resolved, config),
        cards=summary_cards(resolved),
        tables={
            "daily_activity": _activity_table(resolved),
            "user_calculations": aligned_to_frame(
                align_series(user.calculations for user in resolved.user_calculations),
                key_column="date",
            ),
            "top_users": top_users_table(resolved, marker),
            "top_calculation_users": top_calculation_users_table(resolved, marker),
            "most_used_calculators": calculator_usage_table(resolved),
        },
        export=export_users_csv(resolved, config.export),
    )


def write_dashboard(outputs: DashboardOutputs, out_dir: Path, config: AppConfig) -> Path:
    paths = build_output_paths(out_dir)
    write_summary(
        {chart_id: chart.as_dict() for chart_id, chart in outputs.charts.items()},
        paths.summary / "charts.json",
    )
    write_summary({"cards": outputs.cards}, paths.summary / "cards.json")

    extension = "parquet" if config.outputs.tables_format == "parquet" else "csv"
    for name, table in outputs.tables.items():
        write_table(table, paths.tables / f"{name}.{extension}", fmt=config.outputs.tables_format)

    export_path = write_export(outputs.export.content, paths.exports / outputs.export.filename)
    LOGGER.info(
        "Wrote %d chart(s), %d table(s) and %d export row(s) to %s",
        len(outputs.charts),
        len(outputs.tables),
        outputs.export.row_count,
        out_dir,
    )
    return export_path


def run_all(snapshot_path: Path | None, out_dir: Path, config: AppConfig) -> Path:
    snapshot = load_snapshot(snapshot_path or config.snapshot.path)
    outputs = build_dashboard(snapshot, config)
    return write_dashboard(outputs, out_dir, config)
