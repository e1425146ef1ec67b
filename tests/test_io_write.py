from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from analytics_dashboard.io.write import write_export, write_summary, write_table
from analytics_dashboard.paths import build_output_paths


def test_write_table_supports_csv_and_parquet_and_rejects_unknown(tmp_path: Path) -> None:
    frame = pd.DataFrame({"date": ["2024-01-01"], "count": [3]})

    csv_path = write_table(frame, tmp_path / "nested" / "table.csv", fmt="csv")
    parquet_path = write_table(frame, tmp_path / "table.parquet", fmt="parquet")

    assert pd.read_csv(csv_path)["count"].tolist() == [3]
    assert pd.read_parquet(parquet_path)["date"].tolist() == ["2024-01-01"]
    with pytest.raises(ValueError, match="Unsupported table format"):
        write_table(frame, tmp_path / "table.txt", fmt="txt")


def test_write_summary_is_sorted_json(tmp_path: Path) -> None:
    path = write_summary({"b": 1, "a": [1, 2]}, tmp_path / "summary.json")

    assert json.loads(path.read_text(encoding="utf-8")) == {"a": [1, 2], "b": 1}


def test_write_export_replaces_existing_file_whole(tmp_path: Path) -> None:
    target = tmp_path / "exports" / "all_users.csv"
    write_export(b"old", target)

    write_export(b"new,content", target)

    assert target.read_bytes() == b"new,content"
    assert sorted(path.name for path in target.parent.iterdir()) == ["all_users.csv"]


def test_build_output_paths_creates_layout(tmp_path: Path) -> None:
    paths = build_output_paths(tmp_path / "out")

    for path in (paths.root, paths.tables, paths.summary, paths.exports):
        assert path.is_dir()
