from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Sequence, TypeVar

from analytics_dashboard.dates import format_date
from analytics_dashboard.models import UserRecord

T = TypeVar("T")


class ValueKind(str, Enum):
    numeric = "numeric"
    string = "string"
    date = "date"
    boolean = "boolean"


def _identity(value: Any) -> Any:
    return value


def _numeric_key(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    return float(str(value))


def sort_key_for(kind: ValueKind, value: Any) -> tuple[bool, Any]:
    """Total-order key for one accessor value; ``None`` (and NaN) sorts after every value.

    Strings and ISO date strings compare lexicographically. Raises ``ValueError``
    when a value does not fit the declared kind (for example text in a numeric
    column).
    """
    if value is None:
        return (True, 0)
    if kind is ValueKind.numeric:
        number = _numeric_key(value)
        return (True, 0) if math.isnan(number) else (False, number)
    if kind is ValueKind.boolean:
        return (False, bool(value))
    return (False, str(value))


@dataclass(frozen=True)
class Column(Generic[T]):
    id: str
    header: str
    accessor: Callable[[T], Any]
    kind: ValueKind = ValueKind.string
    sortable: bool = True
    render: Callable[[Any], Any] = _identity


def validate_columns(columns: Sequence[Column[Any]]) -> None:
    seen: set[str] = set()
    for column in columns:
        if column.id in seen:
            raise ValueError(f"Duplicate column id: {column.id}")
        seen.add(column.id)


def user_columns(missing_date_marker: str = "N/A") -> list[Column[UserRecord]]:
    """Column schema of the "All Users" table."""
    return [
        Column("email", "Email", lambda user: user.email),
        Column("firstName", "First Name", lambda user: user.first_name),
        Column("lastName", "Last Name", lambda user: user.last_name),
        Column("usage", "Usage", lambda user: user.usage, kind=ValueKind.numeric),
        Column("category", "Category", lambda user: user.category, kind=ValueKind.numeric),
        Column("googleId", "Google ID", lambda user: user.google_id),
        Column(
            "lastUsageDate",
            "Last Usage Date",
            lambda user: user.last_usage_date,
            kind=ValueKind.date,
            render=lambda value: format_date(value, missing_date_marker),
        ),
        Column(
            "isVerified",
            "Verified",
            lambda user: user.is_verified,
            kind=ValueKind.boolean,
            render=lambda value: "Yes" if value else "No",
        ),
    ]
