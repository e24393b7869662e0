"""Utility functions for dates, hours and paging."""

from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from math import ceil
from typing import TypeVar

T = TypeVar("T")

DATE_RANGE_PRESETS = [
    ("all", "All dates"),
    ("thisMonth", "This month"),
    ("lastMonth", "Last month"),
    ("thisQuarter", "This quarter"),
]


def get_week_start(d: date) -> date:
    """Get the Monday that starts the week containing date d."""
    return d - timedelta(days=d.weekday())


def format_date_range(start: date, end: date) -> str:
    """Human label for a week, e.g. '1 - 5 January, 2024'."""
    if (start.year, start.month) == (end.year, end.month):
        return f"{start.day} - {end.day} {start:%B}, {start.year}"
    if start.year == end.year:
        return f"{start.day} {start:%B} - {end.day} {end:%B}, {start.year}"
    return f"{start.day} {start:%B}, {start.year} - {end.day} {end:%B}, {end.year}"


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def date_range_for_preset(preset: str, today: date) -> tuple[date, date] | None:
    """Resolve a list filter preset to an inclusive (start, end) range.

    Returns None for "all" and for unknown presets.
    """
    if preset == "thisMonth":
        return _month_bounds(today.year, today.month)
    if preset == "lastMonth":
        if today.month == 1:
            return _month_bounds(today.year - 1, 12)
        return _month_bounds(today.year, today.month - 1)
    if preset == "thisQuarter":
        first_month = (today.month - 1) // 3 * 3 + 1
        start, _ = _month_bounds(today.year, first_month)
        _, end = _month_bounds(today.year, first_month + 2)
        return start, end
    return None


def ranges_overlap(start: date, end: date, range_start: date, range_end: date) -> bool:
    return start <= range_end and end >= range_start


def paginate(items: Sequence[T], page: int, per_page: int) -> tuple[list[T], int]:
    """Return the items on a 1-based page and the total page count."""
    total_pages = max(1, ceil(len(items) / per_page)) if per_page > 0 else 1
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return list(items[start:start + per_page]), total_pages


def group_by_date(entries: Iterable[T]) -> dict[date, list[T]]:
    """Group anything with a ``date`` attribute by day, days in ascending order."""
    grouped: dict[date, list[T]] = {}
    for entry in entries:
        grouped.setdefault(entry.date, []).append(entry)  # type: ignore[attr-defined]
    return dict(sorted(grouped.items()))


def parse_hours(value: str) -> Decimal | None:
    """Parse a user-entered hours value; None when it is not a finite number."""
    try:
        hours = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not hours.is_finite():
        return None
    return hours


def format_hours(hours: Decimal) -> str:
    """Format hours without trailing zeros: 4 -> '4', 7.50 -> '7.5'."""
    if hours == hours.to_integral_value():
        return str(int(hours))
    return str(hours.normalize())
