"""Expiration dates for approval records.

Dates travel as fixed-width ``YYYYMMDD`` strings, so "past due" is a plain
string comparison. ``"Rolling"`` and ``"-"`` are sentinels, never dates.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

ROLLING = "Rolling"
NO_DATE = "-"

_PERIOD = re.compile(r"^(\d+)([my])$", re.IGNORECASE)
_STAMP = re.compile(r"^\d{8}$")


def format_stamp(value: date) -> str:
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def parse_stamp(value: str) -> Optional[date]:
    value = (value or "").strip()
    if not _STAMP.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y%m%d").date()
    except ValueError:
        return None


def compute_expiration(approval: Optional[str], period: Optional[str]) -> str:
    """Return the expiration stamp for an approval date and period code.

    >>> compute_expiration("20240101", "12m")
    '20250101'
    >>> compute_expiration("ROLLING", "-")
    'Rolling'
    """

    approval = (approval or "").strip()
    period = (period or "").strip()
    if approval.lower() == "rolling":
        return ROLLING
    if not approval or not period or approval == NO_DATE or period == NO_DATE:
        return NO_DATE

    match = _PERIOD.match(period)
    if not match:
        return NO_DATE
    start = parse_stamp(approval)
    if start is None:
        return NO_DATE

    amount = int(match.group(1))
    unit = "years" if match.group(2).lower() == "y" else "months"
    try:
        return format_stamp(start + relativedelta(**{unit: amount}))
    except (OverflowError, ValueError):
        return NO_DATE


def is_real_date(value: Optional[str]) -> bool:
    return bool(value) and value not in (NO_DATE, ROLLING)


def is_past_due(expiration: Optional[str], today: str) -> bool:
    return is_real_date(expiration) and expiration <= today


__all__ = [
    "ROLLING",
    "NO_DATE",
    "format_stamp",
    "parse_stamp",
    "compute_expiration",
    "is_real_date",
    "is_past_due",
]
