from __future__ import annotations

from enum import Enum
from pathlib import Path

import pandas as pd
import typer

from analytics_dashboard.config import DEFAULT_CONFIG_PATH, AppConfig, default_config, load_config
from analytics_dashboard.export.users_csv import export_users_csv
from analytics_dashboard.io.snapshot import load_snapshot
from analytics_dashboard.io.write import write_export, write_summary
from analytics_dashboard.logging import configure_logging
from analytics_dashboard.models import AnalyticsSnapshot
from analytics_dashboard.paths import build_output_paths
from analytics_dashboard.pipeline.run_all import build_dashboard, write_dashboard
from analytics_dashboard.shaping.charts import build_charts, periodic_chart
from analytics_dashboard.table.columns import user_columns
from analytics_dashboard.table.engine import TableEngine


class GranularityName(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"


app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return default_config()
        config_path = DEFAULT_CONFIG_PATH
    return load_config(config_path)


def _load_snapshot_for(snapshot: Path | None, cfg: AppConfig) -> AnalyticsSnapshot:
    source = snapshot or cfg.snapshot.path
    if not source:
        raise typer.BadParameter(
            "Missing --snapshot. Pass a snapshot JSON file or set snapshot.path "
            "in the config (or ANALYTICS_DASHBOARD_SNAPSHOT)."
        )
    try:
        return load_snapshot(source)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def charts(
    snapshot: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    granularity: GranularityName | None = typer.Option(
        None,
        help="Override the calculator usage chart granularity.",
    ),
) -> None:
    """Write chart-ready datasets (aligned series) as JSON."""
    configure_logging()
    cfg = _load_app_config(config)
    resolved = _load_snapshot_for(snapshot, cfg)
    chart_set = build_charts(resolved, cfg)
    if granularity is not None:
        chart_set["calculator_usage"] = periodic_chart(resolved, granularity.value)
    paths = build_output_paths(out)
    path = write_summary(
        {chart_id: chart.as_dict() for chart_id, chart in chart_set.items()},
        paths.summary / "charts.json",
    )
    typer.echo(f"Charts written to: {path}")


@app.command()
def users(
    snapshot: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    page: int = typer.Option(1, help="1-based page number; out-of-range pages are clamped."),
    page_size: int | None = typer.Option(
        None, help="Rows per page, one of table.page_size_options (defaults to table.page_size)."
    ),
    sort: str | None = typer.Option(None, help="Column id to sort by, e.g. usage or email."),
    desc: bool = typer.Option(False, help="Sort descending instead of ascending."),
) -> None:
    """Print one page of the All Users table."""
    configure_logging()
    cfg = _load_app_config(config)
    resolved = _load_snapshot_for(snapshot, cfg)
    columns = user_columns(cfg.export.missing_date_marker)
    engine = TableEngine(resolved.all_users, columns, page_size=cfg.table.page_size)
    if page_size is not None:
        if page_size not in cfg.table.page_size_options:
            choices = ", ".join(str(option) for option in cfg.table.page_size_options)
            raise typer.BadParameter(
                f"--page-size must be one of: {choices}", param_hint="--page-size"
            )
        engine.set_page_size(page_size)
    if sort is not None:
        engine.set_sort(sort)
        if desc:
            engine.set_sort(sort)
    engine.goto_page(page - 1)

    view = engine.page_view()
    frame = pd.DataFrame(engine.rendered_page(), columns=[column.id for column in columns])
    frame.columns = [column.header for column in columns]
    if not frame.empty:
        typer.echo(frame.to_string(index=False))
    typer.echo(
        f"Page {view.page_index + 1} of {max(view.page_count, 1)} ({view.row_count} users)"
    )
    for corrupt in engine.corrupt_rows:
        typer.echo(f"Skipped corrupt row {corrupt.row_index}: {corrupt.message}", err=True)


@app.command("export-users")
def export_users(
    snapshot: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Export all users plus newsletter placeholders to CSV."""
    configure_logging()
    cfg = _load_app_config(config)
    resolved = _load_snapshot_for(snapshot, cfg)
    payload = export_users_csv(resolved, cfg.export)
    paths = build_output_paths(out)
    path = write_export(payload.content, paths.exports / payload.filename)
    typer.echo(f"Exported {payload.row_count} rows to: {path}")


@app.command("run-all")
def run_all_command(
    snapshot: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Build charts, tables and the user export in one command."""
    configure_logging()
    cfg = _load_app_config(config)
    resolved = _load_snapshot_for(snapshot, cfg)
    export_path = write_dashboard(build_dashboard(resolved, cfg), out_dir=out, config=cfg)
    typer.echo(f"Run complete. Export: {export_path}")


if __name__ == "__main__":
    app()
