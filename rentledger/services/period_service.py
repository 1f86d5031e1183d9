"""Billing period keys.

A period is a calendar month written ``YYYY-MM``. Keys sort lexicographically
in (year, month) order, so plain string comparison orders them.
"""

import re
from datetime import date, datetime

from rentledger.services.locale_service import get_system_timezone

PERIOD_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def format_period(year: int, month: int) -> str:
    """Format a year and month (1..12) as ``YYYY-MM``."""
    return f"{year:04d}-{month:02d}"


def parse_period(period: str) -> tuple[int, int]:
    """Split a period key into (year, month).

    Raises:
        ValueError: If the key is not a ``YYYY-MM`` month
    """
    match = PERIOD_PATTERN.match(period)
    if not match:
        raise ValueError(f"Invalid period '{period}', expected YYYY-MM")
    return int(match.group(1)), int(match.group(2))


def is_valid_period(period: str) -> bool:
    return PERIOD_PATTERN.match(period) is not None


def shift_period(period: str, months: int) -> str:
    """Move a period by a number of calendar months (negative moves back)."""
    year, month = parse_period(period)
    index = year * 12 + (month - 1) + months
    return format_period(index // 12, index % 12 + 1)


def previous_period(period: str) -> str:
    """Month before ``period``; January wraps to December of the prior year."""
    return shift_period(period, -1)


def next_period(period: str) -> str:
    """Month after ``period``; December wraps to January of the next year."""
    return shift_period(period, 1)


def current_period(today: date | None = None) -> str:
    """Wall-clock month in the local timezone."""
    if today is None:
        today = datetime.now(get_system_timezone()).date()
    return format_period(today.year, today.month)


__all__ = [
    "PERIOD_PATTERN",
    "format_period",
    "parse_period",
    "is_valid_period",
    "shift_period",
    "previous_period",
    "next_period",
    "current_period",
]
