# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the institute backend.

All timestamps are stored in UTC and all Python datetimes produced here are
timezone-aware. Calendar dates (batch start, joining date, graduation date)
are plain ``date`` objects and use the month arithmetic below.

Usage:
------
    from src.utils.datetime import utc_now, add_months

    # For SQLAlchemy model defaults
    created_at = mapped_column(DateTime(timezone=True), default=utc_now)

    # Batch end date from its course duration
    end_date = add_months(batch.start_date, course.duration_months)
"""

import calendar
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def today() -> date:
    """Get the current UTC calendar date."""
    return utc_now().date()


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns, so values read from the store go through here before they are
    compared with ``utc_now()``.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def add_months(start: date, months: int) -> date:
    """Add calendar months to a date, clamping to the end of the month.

    Args:
        start: The starting date.
        months: Number of months to add (may be negative).

    Returns:
        The shifted date. 31 January plus one month is 28 or 29 February.

    Example:
        >>> add_months(date(2024, 1, 31), 1)
        datetime.date(2024, 2, 29)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def months_between(start: date, end: date) -> int:
    """Count the whole months elapsed between two dates.

    A month only counts once its day-of-month has been reached, so
    15 January to 14 March is one month and 15 January to 15 March is two.
    The result is negative when ``end`` is before ``start``.

    Args:
        start: The earlier date.
        end: The later date.

    Returns:
        Whole months from start to end.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months

