from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Generic, Iterable, Sequence, TypeVar

from analytics_dashboard.table.columns import Column, sort_key_for, validate_columns

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


@dataclass(frozen=True)
class TableState:
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    sort_column_id: str | None = None
    sort_direction: SortDirection | None = None


@dataclass(frozen=True)
class CorruptRow:
    row_index: int
    column_id: str
    message: str


@dataclass(frozen=True)
class PageView(Generic[T]):
    rows: tuple[T, ...]
    page_index: int
    page_size: int
    page_count: int
    row_count: int
    can_go_next: bool
    can_go_previous: bool


def _is_page_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class TableEngine(Generic[T]):
    """Sort and pagination state over an in-memory row collection.

    Every operation derives the next ``TableState`` from the current one and swaps
    it in as a whole. Invalid arguments are clamped or ignored, never raised.
    Rows whose accessors fail are listed in ``corrupt_rows`` and left out of every
    page.
    """

    def __init__(
        self,
        rows: Iterable[T],
        columns: Sequence[Column[T]],
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        validate_columns(columns)
        self._columns = list(columns)
        self._columns_by_id = {column.id: column for column in self._columns}
        if not _is_page_number(page_size) or page_size <= 0:
            LOGGER.warning("Invalid page size %r; using %d", page_size, DEFAULT_PAGE_SIZE)
            page_size = DEFAULT_PAGE_SIZE
        self._state = TableState(page_size=page_size)
        self._rows: tuple[T, ...] = ()
        self._values: dict[int, dict[str, Any]] = {}
        self._order: list[int] = []
        self._corrupt: dict[int, CorruptRow] = {}
        self._unsortable: dict[int, CorruptRow] = {}
        self.set_rows(rows)

    @property
    def state(self) -> TableState:
        return self._state

    @property
    def columns(self) -> list[Column[T]]:
        return list(self._columns)

    @property
    def corrupt_rows(self) -> list[CorruptRow]:
        excluded = {**self._unsortable, **self._corrupt}
        return [excluded[index] for index in sorted(excluded)]

    @property
    def row_count(self) -> int:
        return len(self._order)

    @property
    def page_count(self) -> int:
        return math.ceil(self.row_count / self._state.page_size)

    @property
    def page_options(self) -> list[int]:
        return list(range(self.page_count))

    @property
    def can_go_previous(self) -> bool:
        return self._state.page_index > 0

    @property
    def can_go_next(self) -> bool:
        return self._state.page_index < self.page_count - 1

    def set_rows(self, rows: Iterable[T]) -> TableState:
        """Replace the whole collection, keeping sort and re-clamping the page."""
        self._rows = tuple(rows)
        self._values = {}
        self._corrupt = {}
        for index, row in enumerate(self._rows):
            values: dict[str, Any] = {}
            for column in self._columns:
                try:
                    values[column.id] = column.accessor(row)
                except Exception as exc:
                    self._mark_corrupt(index, column.id, exc)
                    break
            else:
                self._values[index] = values
        self._order = self._sorted_order(self._state)
        self._state = replace(self._state, page_index=self._clamp(self._state.page_index))
        return self._state

    def set_sort(self, column_id: str) -> TableState:
        """Cycle ``column_id`` through ascending, descending and unsorted."""
        column = self._columns_by_id.get(column_id)
        if column is None or not column.sortable:
            LOGGER.debug("Ignoring sort request for non-sortable column %r", column_id)
            return self._state

        current = self._state
        if current.sort_column_id != column_id:
            next_state = replace(
                current, sort_column_id=column_id, sort_direction=SortDirection.asc
            )
        elif current.sort_direction is SortDirection.asc:
            next_state = replace(current, sort_direction=SortDirection.desc)
        else:
            next_state = replace(current, sort_column_id=None, sort_direction=None)

        self._order = self._sorted_order(next_state)
        self._state = replace(next_state, page_index=0)
        return self._state

    def goto_page(self, page_index: int) -> TableState:
        if not _is_page_number(page_index):
            LOGGER.debug("Ignoring non-integer page index %r", page_index)
            return self._state
        self._state = replace(self._state, page_index=self._clamp(page_index))
        return self._state

    def next_page(self) -> TableState:
        return self.goto_page(self._state.page_index + 1)

    def previous_page(self) -> TableState:
        return self.goto_page(self._state.page_index - 1)

    def first_page(self) -> TableState:
        return self.goto_page(0)

    def last_page(self) -> TableState:
        return self.goto_page(self.page_count - 1)

    def set_page_size(self, page_size: int) -> TableState:
        """Change rows per page, keeping the first visible row on screen."""
        if not _is_page_number(page_size) or page_size <= 0:
            LOGGER.warning("Ignoring invalid page size %r", page_size)
            return self._state
        first_row = self._state.page_index * self._state.page_size
        resized = replace(self._state, page_size=page_size)
        self._state = replace(resized, page_index=self._clamp(first_row // page_size, resized))
        return self._state

    def visible_page(self) -> list[T]:
        start = self._state.page_index * self._state.page_size
        end = min(start + self._state.page_size, self.row_count)
        return [self._rows[index] for index in self._order[start:end]]

    def page_view(self) -> PageView[T]:
        return PageView(
            rows=tuple(self.visible_page()),
            page_index=self._state.page_index,
            page_size=self._state.page_size,
            page_count=self.page_count,
            row_count=self.row_count,
            can_go_next=self.can_go_next,
            can_go_previous=self.can_go_previous,
        )

    def rendered_page(self) -> list[dict[str, Any]]:
        start = self._state.page_index * self._state.page_size
        end = min(start + self._state.page_size, self.row_count)
        rendered_rows: list[dict[str, Any]] = []
        for index in self._order[start:end]:
            values = self._values[index]
            rendered: dict[str, Any] = {}
            for column in self._columns:
                value = values[column.id]
                try:
                    rendered[column.id] = column.render(value)
                except Exception:
                    LOGGER.warning(
                        "Render failed for column %r on row %d; showing raw value",
                        column.id,
                        index,
                    )
                    rendered[column.id] = "" if value is None else str(value)
            rendered_rows.append(rendered)
        return rendered_rows

    def _mark_corrupt(self, index: int, column_id: str, exc: Exception) -> None:
        LOGGER.warning("Excluding corrupt row %d (column %r): %s", index, column_id, exc)
        self._corrupt[index] = CorruptRow(row_index=index, column_id=column_id, message=str(exc))

    def _sorted_order(self, state: TableState) -> list[int]:
        # Rows that cannot be ordered under the sort column are left out only while it is active.
        self._unsortable = {}
        valid = [index for index in range(len(self._rows)) if index in self._values]
        if state.sort_column_id is None or state.sort_direction is None:
            return valid

        column = self._columns_by_id[state.sort_column_id]
        keys: dict[int, tuple[bool, Any]] = {}
        for index in valid:
            try:
                keys[index] = sort_key_for(column.kind, self._values[index][column.id])
            except (TypeError, ValueError) as exc:
                LOGGER.warning(
                    "Excluding row %d from sort on column %r: %s", index, column.id, exc
                )
                self._unsortable[index] = CorruptRow(
                    row_index=index, column_id=column.id, message=str(exc)
                )
        # sorted() with reverse=True keeps tied rows in their original order.
        return sorted(
            keys,
            key=keys.__getitem__,
            reverse=state.sort_direction is SortDirection.desc,
        )

    def _clamp(self, page_index: int, state: TableState | None = None) -> int:
        resolved = state or self._state
        page_count = math.ceil(len(self._order) / resolved.page_size)
        if page_count == 0:
            return 0
        return min(max(page_index, 0), page_count - 1)
