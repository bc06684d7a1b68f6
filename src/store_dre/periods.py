# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Store DRE.

This module defines a Period value object and helpers to derive reporting
periods (calendar month, previous calendar month, custom range) from CLI
arguments, and to select closings falling inside a period.
"""

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .models import StoreClosing


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def _check_month(month: int, year: int) -> None:
    if not isinstance(month, int) or not isinstance(year, int):
        raise TypeError("month and year must be integers.")
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month: {month!r}. Expected 1..12.")


def as_date(value, name: str = "date") -> date:
    """Return ``value`` as a ``datetime.date``.

    ``datetime`` values are truncated to their calendar day.

    Raises:
        TypeError: if ``value`` is neither a date nor a datetime.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(
        f"{name} must be a datetime.date instance, got {type(value).__name__}."
    )


def format_period_label(start: date, end: date) -> str:
    """Render a period as 'DD/MM/YYYY - DD/MM/YYYY'."""
    return f"{start.strftime('%d/%m/%Y')} - {end.strftime('%d/%m/%Y')}"


def month_period(month: int, year: int) -> Period:
    """Full calendar month (first day to last day, inclusive)."""
    _check_month(month, year)
    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])
    return Period(start=start, end=end, label=format_period_label(start, end))


def previous_month(month: int, year: int) -> tuple[int, int]:
    """Return (month, year) of the calendar month preceding (month, year)."""
    _check_month(month, year)
    if month == 1:
        return 12, year - 1
    return month - 1, year


def previous_month_period(month: int, year: int) -> Period:
    """Full calendar month immediately preceding (month, year)."""
    prev_month, prev_year = previous_month(month, year)
    return month_period(prev_month, prev_year)


def filter_closings_by_period(
    closings: Iterable[StoreClosing],
    period: Period,
    store_id: Optional[str] = None,
) -> list[StoreClosing]:
    """
    Keep only closings dated within the period, optionally for one store.

    Parameters
    ----------
    closings:
        Closings to filter.
    period:
        Period defining the [start, end] boundaries (inclusive).
    store_id:
        When given, closings of other stores are dropped.

    Returns
    -------
    list[StoreClosing]
        Matching closings, in their original order. An inverted period
        (start after end) simply matches nothing.

    Raises
    ------
    TypeError
        If the period bounds are not dates. ``datetime`` bounds are
        truncated to their calendar day.
    """
    start = as_date(period.start, "Period start")
    end = as_date(period.end, "Period end")

    return [
        c
        for c in closings
        if start <= c.closing_date <= end
        and (store_id is None or c.store_id == store_id)
    ]


def determine_period_from_args(args, today: Optional[date] = None) -> Period:
    """
    Determine the reporting period to use based on CLI args.

    Priority (highest to lowest):

        1. args.from_date / args.to_date (custom period)
        2. args.month / args.year (calendar month)
        3. current calendar month by default

    A missing custom bound defaults to the first (or last) day of the month
    selected by rule 2/3.
    """
    ref = today or _today()
    month = getattr(args, "month", None) or ref.month
    year = getattr(args, "year", None) or ref.year
    month_p = month_period(int(month), int(year))

    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        start = date.fromisoformat(from_raw) if from_raw else month_p.start
        end = date.fromisoformat(to_raw) if to_raw else month_p.end

        if end < start:
            raise ValueError("Custom period end date cannot be before start date.")

        return Period(start=start, end=end, label=format_period_label(start, end))

    return month_p
