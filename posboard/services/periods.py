"""Human-readable labels for raw analytics period keys."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

logger = logging.getLogger("posboard.periods")

# "202503", "2025-03" or "2025-W03"
_WEEK_RE = re.compile(r"^(\d{4})-?W?(\d{1,2})$", re.IGNORECASE)
_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def _short_date(value: date) -> str:
    # "%-d" is not portable, so strip the zero padding by hand.
    return f"{value.strftime('%b')} {value.day}"


def _parse_day(text: str) -> date:
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        parsed = pd.to_datetime(text, errors="raise")
        if pd.isna(parsed):
            raise ValueError(f"not a date: {text!r}")
        return parsed.date()


def week_start(year: int, week: int) -> date:
    """Approximate first day of ``week``: January 1st plus whole weeks.

    This is a calendar approximation, not ISO-8601 week-date arithmetic.
    """
    if not 1 <= week <= 53:
        raise ValueError(f"week number out of range: {week}")
    return date(year, 1, 1) + timedelta(days=(week - 1) * 7)


def _format_daily(text: str) -> str:
    day = _parse_day(text)
    return f"{_short_date(day)}, {day.year}"


def _format_weekly(text: str) -> str:
    match = _WEEK_RE.match(text)
    if not match:
        raise ValueError(f"not a week key: {text!r}")
    year, week = int(match.group(1)), int(match.group(2))
    start = week_start(year, week)
    return f"Week {week}, {year} ({_short_date(start)})"


def _format_monthly(text: str) -> str:
    match = _MONTH_RE.match(text)
    if not match:
        raise ValueError(f"not a month key: {text!r}")
    month = date(int(match.group(1)), int(match.group(2)), 1)
    return month.strftime("%B %Y")


_FORMATTERS = {
    "daily": _format_daily,
    "weekly": _format_weekly,
    "monthly": _format_monthly,
}


def format_period(period: Any, interval: str) -> str:
    """Render ``period`` for display. Never raises.

    Unknown intervals (and ``yearly``) return the key verbatim. A key that
    cannot be parsed for its interval is logged and returned unchanged.
    """
    original = "" if period is None else str(period)
    formatter = _FORMATTERS.get(interval)
    if formatter is None:
        return original
    try:
        return formatter(original.strip())
    except (ValueError, TypeError, OverflowError) as exc:
        logger.warning("Could not format period %r for interval %s: %s", period, interval, exc)
        return original


__all__ = ["format_period", "week_start"]
