from __future__ import annotations

import pandas as pd


def to_utc_date(value: str | None) -> str | None:
    """Return the UTC calendar date (``YYYY-MM-DD``) of a timestamp, or ``None``.

    Naive timestamps are taken as UTC. Values pandas cannot parse yield ``None``.
    """
    if value is None or not value.strip():
        return None
    timestamp = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(timestamp):
        return None
    return timestamp.date().isoformat()


def format_date(value: str | None, missing_marker: str = "N/A") -> str:
    return to_utc_date(value) or missing_marker
