from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

Granularity = Literal["daily", "weekly", "monthly", "yearly"]

DEFAULT_PAGE_SIZE_OPTIONS = [10, 20, 30, 40, 50]
DEFAULT_PALETTE = [
    "#6366F1",
    "#FF6384",
    "#36A2EB",
    "#FFCE56",
    "#4BC0C0",
    "#9966FF",
    "#FF9F40",
    "#4F46E5",
]
SNAPSHOT_ENV_VAR = "ANALYTICS_DASHBOARD_SNAPSHOT"


class SnapshotConfig(BaseModel):
    path: str | None = None


class TableConfig(BaseModel):
    page_size: int = Field(default=20, ge=1)
    page_size_options: list[int] = Field(
        default_factory=lambda: list(DEFAULT_PAGE_SIZE_OPTIONS)
    )


class ChartsConfig(BaseModel):
    default_granularity: Granularity = "daily"
    palette: list[str] = Field(default_factory=lambda: list(DEFAULT_PALETTE), min_length=1)


class PlaceholderConfig(BaseModel):
    first_name: str = "guest"
    last_name: str = "guest"
    usage: int = Field(default=0, ge=0)
    category: int = Field(default=0, ge=0)
    google_id: str = "guest"
    is_verified: bool = False


class ExportConfig(BaseModel):
    filename: str = "all_users.csv"
    missing_date_marker: str = "N/A"
    placeholder: PlaceholderConfig = Field(default_factory=PlaceholderConfig)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    table: TableConfig = Field(default_factory=TableConfig)
    charts: ChartsConfig = Field(default_factory=ChartsConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def _env_snapshot() -> str | None:
    return os.getenv(SNAPSHOT_ENV_VAR) or None


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.snapshot.path = _resolve_optional_path(config.snapshot.path, base_dir) or _env_snapshot()
    return config


def default_config() -> AppConfig:
    """Built-in defaults, used when no config file is available."""
    config = AppConfig()
    config.snapshot.path = _env_snapshot()
    return config
