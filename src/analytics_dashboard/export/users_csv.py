from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Literal

from analytics_dashboard.config import ExportConfig, PlaceholderConfig
from analytics_dashboard.dates import to_utc_date
from analytics_dashboard.models import AnalyticsSnapshot, NewsletterSubscriber, UserRecord

LOGGER = logging.getLogger(__name__)

EXPORT_HEADERS = [
    "Email",
    "First Name",
    "Last Name",
    "Usage",
    "Category",
    "Google ID",
    "Last Usage Date",
    "Verified",
]
CSV_MIME_TYPE = "text/csv"

RowSource = Literal["real", "placeholder"]


@dataclass(frozen=True)
class ExportRow:
    values: tuple[str, ...]
    source: RowSource = "real"


@dataclass(frozen=True)
class ExportPayload:
    filename: str
    content: bytes
    row_count: int
    mime_type: str = CSV_MIME_TYPE


def safe_text(value: Any) -> str:
    """Stringify ``value`` without ever raising; the fallback is the type name."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except Exception:
        LOGGER.warning("Could not stringify %s value for export", type(value).__name__)
        try:
            return repr(value)
        except Exception:
            return f"<{type(value).__name__}>"


def as_text_literal(value: str) -> str:
    """Wrap ``value`` as ``="..."`` so spreadsheets keep it as text, not a number/date."""
    return '="' + value.replace('"', '""') + '"'


def project_user(
    user: UserRecord,
    missing_date_marker: str = "N/A",
    source: RowSource = "real",
) -> ExportRow:
    last_usage = to_utc_date(user.last_usage_date)
    return ExportRow(
        values=(
            safe_text(user.email),
            safe_text(user.first_name),
            safe_text(user.last_name),
            safe_text(user.usage),
            safe_text(user.category),
            as_text_literal(safe_text(user.google_id)),
            as_text_literal(last_usage) if last_usage else missing_date_marker,
            "Yes" if user.is_verified else "No",
        ),
        source=source,
    )


def placeholder_user(subscriber: NewsletterSubscriber, template: PlaceholderConfig) -> UserRecord:
    return UserRecord(
        id="",
        email=subscriber.email,
        first_name=template.first_name,
        last_name=template.last_name,
        usage=template.usage,
        category=template.category,
        google_id=template.google_id,
        last_usage_date=None,
        is_verified=template.is_verified,
    )


def build_export_rows(
    users: Iterable[UserRecord],
    subscribers: Iterable[NewsletterSubscriber] = (),
    placeholder: PlaceholderConfig | None = None,
    missing_date_marker: str = "N/A",
) -> list[ExportRow]:
    """Full user records first, then one placeholder row per email-only contact."""
    template = placeholder or PlaceholderConfig()
    rows = [project_user(user, missing_date_marker) for user in users]
    rows.extend(
        project_user(
            placeholder_user(subscriber, template),
            missing_date_marker,
            source="placeholder",
        )
        for subscriber in subscribers
    )
    return rows


def render_users_csv(rows: Iterable[ExportRow]) -> str:
    """Header line, then one fully quoted line per row; no trailing newline."""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(EXPORT_HEADERS)
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        if len(row.values) != len(EXPORT_HEADERS):
            raise ValueError(
                f"Export row has {len(row.values)} fields, expected {len(EXPORT_HEADERS)}"
            )
        writer.writerow(row.values)
    return buffer.getvalue()[: -len("\n")]


def export_users_csv(
    snapshot: AnalyticsSnapshot | None,
    config: ExportConfig | None = None,
) -> ExportPayload:
    """Serialize every user plus newsletter placeholders into one CSV download."""
    resolved_config = config or ExportConfig()
    resolved = snapshot if snapshot is not None else AnalyticsSnapshot.empty()
    rows = build_export_rows(
        users=resolved.all_users,
        subscribers=resolved.newsletter_subscribers,
        placeholder=resolved_config.placeholder,
        missing_date_marker=resolved_config.missing_date_marker,
    )
    text = render_users_csv(rows)
    return ExportPayload(
        filename=resolved_config.filename,
        content=text.encode("utf-8"),
        row_count=len(rows),
    )
