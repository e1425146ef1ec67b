from __future__ import annotations

from typing import Iterable

import pandas as pd

from analytics_dashboard.models import AlignedSeriesSet, NamedSeries


def _unique_label(label: str, taken: set[str]) -> str:
    if label not in taken:
        return label
    suffix = 2
    while f"{label} ({suffix})" in taken:
        suffix += 1
    return f"{label} ({suffix})"


def align_series(series: Iterable[NamedSeries]) -> AlignedSeriesSet:
    """Merge sparse series onto the sorted union of their keys, zero-filling gaps.

    Keys are compared as plain strings, which orders ISO dates chronologically.
    A key repeated inside one series keeps its last count. Two inputs sharing a
    label are kept apart by suffixing the later one (``"Ana (2)"``).
    """
    counts_by_label: dict[str, dict[str, int]] = {}
    all_keys: set[str] = set()
    for named in series:
        counts: dict[str, int] = {}
        for point in named.points:
            counts[point.key] = point.count
        all_keys.update(counts)
        counts_by_label[_unique_label(named.label, set(counts_by_label))] = counts

    keys = tuple(sorted(all_keys))
    return AlignedSeriesSet(
        keys=keys,
        series={
            label: tuple(counts.get(key, 0) for key in keys)
            for label, counts in counts_by_label.items()
        },
    )


def aligned_to_frame(aligned: AlignedSeriesSet, key_column: str = "key") -> pd.DataFrame:
    """Tabulate an aligned set: one row per key, one integer column per series."""
    frame = pd.DataFrame({key_column: list(aligned.keys)})
    for label, values in aligned.series.items():
        frame[label] = pd.Series(list(values), dtype="int64")
    return frame
