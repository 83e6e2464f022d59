"""
Pure helpers for mapping between stored records and form values.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

_NUMBER = re.compile(r"[\d.]+")

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_TRUTHY = frozenset(["1", "true", "on", "yes", "checked", "active"])


def normalize_date(value: Any) -> str:
    """
    Render a date-ish value as YYYY-MM-DD.

    Unparseable input yields "" so a bad stored value never reaches a
    date input.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return ""


def extract_number(value: Any) -> str:
    """First run of digits and dots, e.g. "2500 sq ft" -> "2500"."""
    match = _NUMBER.search(str(value)) if value is not None else None
    return match.group(0) if match else ""


def split_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def join_list(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return "" if value is None else str(value)


def is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def record_title(record: dict[str, Any]) -> str:
    """Display name of a record: its name, else its title."""
    return str(record.get("name") or record.get("title") or "").strip()


def coerce_record_id(value: Any) -> int | str | None:
    """
    Record id from a hidden input value.

    None and "" mean no id. ASCII digit strings become ints, so "0" is the
    valid id 0. Anything else stays a string key.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text == "":
        return None
    if text.isascii() and text.isdigit():
        return int(text)
    return text
