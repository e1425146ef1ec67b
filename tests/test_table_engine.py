from __future__ import annotations

from dataclasses import dataclass

import pytest

from analytics_dashboard.models import UserRecord
from analytics_dashboard.table.columns import Column, ValueKind, user_columns
from analytics_dashboard.table.engine import SortDirection, TableEngine, TableState


@dataclass(frozen=True)
class _Row:
    idx: int
    n: str


def _name_columns(sortable: bool = True) -> list[Column[_Row]]:
    return [
        Column("idx", "Index", lambda row: row.idx, kind=ValueKind.numeric),
        Column("n", "Name", lambda row: row.n, sortable=sortable),
    ]


def _numbered_rows(count: int) -> list[_Row]:
    return [_Row(idx=index, n=f"row-{index:03d}") for index in range(count)]


def test_default_state_matches_mount_defaults() -> None:
    engine = TableEngine(_numbered_rows(3), _name_columns())

    assert engine.state == TableState(
        page_index=0, page_size=20, sort_column_id=None, sort_direction=None
    )


def test_pagination_over_45_rows_with_page_size_20() -> None:
    engine = TableEngine(_numbered_rows(45), _name_columns(), page_size=20)

    assert engine.page_count == 3
    assert engine.page_options == [0, 1, 2]
    assert len(engine.visible_page()) == 20

    engine.goto_page(2)
    assert len(engine.visible_page()) == 5
    assert [row.idx for row in engine.visible_page()] == [40, 41, 42, 43, 44]

    engine.goto_page(99)
    assert engine.state.page_index == 2

    engine.goto_page(-1)
    assert engine.state.page_index == 0


def test_next_and_previous_are_clamped_at_boundaries() -> None:
    engine = TableEngine(_numbered_rows(45), _name_columns())

    engine.previous_page()
    assert engine.state.page_index == 0
    assert engine.can_go_previous is False

    engine.next_page()
    engine.next_page()
    engine.next_page()
    assert engine.state.page_index == 2
    assert engine.can_go_next is False

    engine.first_page()
    assert engine.state.page_index == 0
    engine.last_page()
    assert engine.state.page_index == 2


def test_empty_collection_has_no_pages() -> None:
    engine = TableEngine([], _name_columns())

    assert engine.page_count == 0
    assert engine.visible_page() == []
    engine.goto_page(3)
    engine.next_page()
    assert engine.state.page_index == 0
    view = engine.page_view()
    assert view.can_go_next is False
    assert view.can_go_previous is False
    assert engine.page_options == []


def test_sort_cycle_is_stable_in_both_directions() -> None:
    rows = [_Row(idx=0, n="b"), _Row(idx=1, n="a"), _Row(idx=2, n="a")]
    engine = TableEngine(rows, _name_columns())

    engine.set_sort("n")
    assert engine.state.sort_direction is SortDirection.asc
    assert [(row.n, row.idx) for row in engine.visible_page()] == [("a", 1), ("a", 2), ("b", 0)]

    engine.set_sort("n")
    assert engine.state.sort_direction is SortDirection.desc
    assert [(row.n, row.idx) for row in engine.visible_page()] == [("b", 0), ("a", 1), ("a", 2)]

    engine.set_sort("n")
    assert engine.state.sort_column_id is None
    assert engine.state.sort_direction is None
    assert [row.idx for row in engine.visible_page()] == [0, 1, 2]


def test_switching_sort_column_restarts_at_ascending() -> None:
    rows = [_Row(idx=2, n="a"), _Row(idx=1, n="c"), _Row(idx=3, n="b")]
    engine = TableEngine(rows, _name_columns())

    engine.set_sort("n")
    engine.set_sort("n")
    engine.set_sort("idx")

    assert engine.state.sort_column_id == "idx"
    assert engine.state.sort_direction is SortDirection.asc
    assert [row.idx for row in engine.visible_page()] == [1, 2, 3]


def test_numeric_columns_sort_numerically() -> None:
    rows = [_Row(idx=10, n="x"), _Row(idx=9, n="y"), _Row(idx=100, n="z")]
    engine = TableEngine(rows, _name_columns())

    engine.set_sort("idx")

    assert [row.idx for row in engine.visible_page()] == [9, 10, 100]


def test_sorting_non_sortable_or_unknown_column_is_a_no_op() -> None:
    rows = [_Row(idx=0, n="b"), _Row(idx=1, n="a")]
    engine = TableEngine(rows, _name_columns(sortable=False))

    before = engine.state
    assert engine.set_sort("n") == before
    assert engine.set_sort("missing") == before
    assert [row.idx for row in engine.visible_page()] == [0, 1]


def test_sort_change_returns_to_first_page() -> None:
    engine = TableEngine(_numbered_rows(45), _name_columns())
    engine.goto_page(2)

    engine.set_sort("idx")

    assert engine.state.page_index == 0


def test_set_page_size_keeps_first_visible_row_on_screen() -> None:
    engine = TableEngine(_numbered_rows(45), _name_columns(), page_size=10)
    engine.goto_page(3)
    assert engine.visible_page()[0].idx == 30

    engine.set_page_size(20)

    assert engine.state.page_index == 1
    assert 30 in [row.idx for row in engine.visible_page()]

    engine.set_page_size(50)
    assert engine.state.page_index == 0
    assert engine.page_count == 1


@pytest.mark.parametrize("bad_size", [0, -5, 2.5, "10", True])
def test_set_page_size_ignores_invalid_values(bad_size: object) -> None:
    engine = TableEngine(_numbered_rows(45), _name_columns())

    before = engine.state
    engine.set_page_size(bad_size)  # type: ignore[arg-type]

    assert engine.state == before


def test_corrupt_rows_are_reported_and_excluded() -> None:
    def _explode(row: _Row) -> str:
        if row.idx == 1:
            raise KeyError("n")
        return row.n

    columns = [
        Column("idx", "Index", lambda row: row.idx, kind=ValueKind.numeric),
        Column("n", "Name", _explode),
    ]
    engine = TableEngine(_numbered_rows(3), columns)

    assert [row.idx for row in engine.visible_page()] == [0, 2]
    assert engine.row_count == 2
    assert [(corrupt.row_index, corrupt.column_id) for corrupt in engine.corrupt_rows] == [
        (1, "n")
    ]


def test_values_that_do_not_fit_numeric_kind_are_corrupt_when_sorted() -> None:
    columns = [Column("n", "Name", lambda row: row.n, kind=ValueKind.numeric)]
    rows = [_Row(idx=0, n="3"), _Row(idx=1, n="oops"), _Row(idx=2, n="1")]
    engine = TableEngine(rows, columns)

    engine.set_sort("n")

    assert [row.idx for row in engine.visible_page()] == [2, 0]
    assert engine.corrupt_rows[0].row_index == 1


def test_clearing_sort_brings_back_rows_that_could_not_be_ordered() -> None:
    columns = [Column("n", "Name", lambda row: row.n, kind=ValueKind.numeric)]
    rows = [_Row(idx=0, n="3"), _Row(idx=1, n="oops"), _Row(idx=2, n="1")]
    engine = TableEngine(rows, columns)

    engine.set_sort("n")
    assert engine.row_count == 2
    engine.set_sort("n")
    assert [row.idx for row in engine.visible_page()] == [0, 2]
    engine.set_sort("n")

    assert engine.state.sort_column_id is None
    assert [row.idx for row in engine.visible_page()] == [0, 1, 2]
    assert engine.row_count == 3
    assert engine.corrupt_rows == []


def test_set_rows_replaces_collection_and_reclamps_page() -> None:
    engine = TableEngine(_numbered_rows(45), _name_columns())
    engine.set_sort("idx")
    engine.set_sort("idx")
    engine.goto_page(2)

    engine.set_rows(_numbered_rows(25))

    assert engine.state.page_index == 1
    assert engine.state.sort_direction is SortDirection.desc
    assert [row.idx for row in engine.visible_page()] == [4, 3, 2, 1, 0]


def test_duplicate_column_ids_are_rejected() -> None:
    columns = [
        Column("n", "Name", lambda row: row.n),
        Column("n", "Again", lambda row: row.n),
    ]
    with pytest.raises(ValueError, match="Duplicate column id"):
        TableEngine([], columns)


def test_user_columns_render_dates_and_flags() -> None:
    users = [
        UserRecord(
            id="1",
            email="b@example.com",
            usage=3,
            last_usage_date="2024-05-01T10:00:00Z",
            is_verified=True,
        ),
        UserRecord(id="2", email="a@example.com", usage=12, last_usage_date=None),
    ]
    engine = TableEngine(users, user_columns())

    engine.set_sort("usage")
    engine.set_sort("usage")
    rendered = engine.rendered_page()

    assert [row["email"] for row in rendered] == ["a@example.com", "b@example.com"]
    assert rendered[0]["lastUsageDate"] == "N/A"
    assert rendered[0]["isVerified"] == "No"
    assert rendered[1]["lastUsageDate"] == "2024-05-01"
    assert rendered[1]["isVerified"] == "Yes"


def test_missing_dates_sort_after_present_dates_ascending() -> None:
    users = [
        UserRecord(id="1", email="none@example.com", last_usage_date=None),
        UserRecord(id="2", email="late@example.com", last_usage_date="2024-06-01"),
        UserRecord(id="3", email="early@example.com", last_usage_date="2024-01-01"),
    ]
    engine = TableEngine(users, user_columns())

    engine.set_sort("lastUsageDate")

    assert [user.id for user in engine.visible_page()] == ["3", "2", "1"]
