"""Validated query parameters shared by every analytics and order view."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Literal, Mapping, Optional

import pandas as pd

Interval = Literal["daily", "weekly", "monthly", "yearly"]
INTERVALS = ("daily", "weekly", "monthly", "yearly")

EPOCH = date(1970, 1, 1)
DEFAULT_INTERVAL: Interval = "monthly"
DEFAULT_LIMIT = 5

# Free-text / categorical filters understood by the order and product views.
EXTRA_FILTER_KEYS = ("search", "order_type", "date", "payment_method", "category")

INVALID_DATE_RANGE = "InvalidDateRange"
INVALID_LIMIT = "InvalidLimit"
INVALID_INTERVAL = "InvalidInterval"
INVALID_DATE = "InvalidDate"
FUTURE_END_DATE = "FutureEndDate"


class ValidationError(ValueError):
    """A rejected filter change. ``kind`` names the violated rule."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.kind, "message": self.message}


def _parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        parsed = pd.to_datetime(text, errors="coerce")
        if pd.isna(parsed):
            raise ValidationError(INVALID_DATE, f"Could not parse date value '{text}'.")
        return parsed.date()


def _parse_limit(value: Any) -> int:
    try:
        limit = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(INVALID_LIMIT, f"Limit must be an integer, got '{value}'.")
    if limit < 1:
        raise ValidationError(INVALID_LIMIT, "Limit must be at least 1.")
    return limit


def _parse_interval(value: Any) -> str:
    interval = str(value or "").strip().lower()
    if interval not in INTERVALS:
        raise ValidationError(
            INVALID_INTERVAL,
            f"Interval must be one of {', '.join(INTERVALS)}; got '{value}'.",
        )
    return interval


@dataclass(frozen=True)
class FilterState:
    start_date: Optional[date] = EPOCH
    end_date: Optional[date] = None
    interval: Interval = DEFAULT_INTERVAL
    limit: int = DEFAULT_LIMIT
    filters: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def reset(cls, limit: int = DEFAULT_LIMIT) -> "FilterState":
        """Return the fixed default state: epoch start, open end, monthly buckets."""
        return cls(start_date=EPOCH, end_date=None, interval=DEFAULT_INTERVAL, limit=limit)

    def validate(self, today: Optional[date] = None) -> "FilterState":
        """Check the invariants and return ``self``; raise ``ValidationError`` otherwise."""
        if self.interval not in INTERVALS:
            raise ValidationError(INVALID_INTERVAL, f"Unknown interval '{self.interval}'.")
        if not isinstance(self.limit, int) or self.limit < 1:
            raise ValidationError(INVALID_LIMIT, "Limit must be at least 1.")
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.start_date > self.end_date
        ):
            raise ValidationError(INVALID_DATE_RANGE, "Start date must be before end date.")
        if today is not None and self.end_date is not None and self.end_date > today:
            raise ValidationError(FUTURE_END_DATE, "End date cannot be in the future.")
        return self

    def apply_change(
        self, changes: Mapping[str, Any], today: Optional[date] = None
    ) -> "FilterState":
        """
        Return a new, validated state with ``changes`` applied.

        ``changes`` may carry raw strings (query args, form fields). Blank dates
        mean an open bound. On failure ``ValidationError`` is raised and this
        instance is left untouched.
        """
        updates: Dict[str, Any] = {}
        if "start_date" in changes:
            updates["start_date"] = _parse_date(changes["start_date"])
        if "end_date" in changes:
            updates["end_date"] = _parse_date(changes["end_date"])
        if "interval" in changes:
            updates["interval"] = _parse_interval(changes["interval"])
        if "limit" in changes:
            updates["limit"] = _parse_limit(changes["limit"])

        extras = dict(self.filters)
        for key in EXTRA_FILTER_KEYS:
            if key not in changes:
                continue
            value = changes[key]
            text = "" if value is None else str(value).strip()
            if text:
                extras[key] = text
            else:
                extras.pop(key, None)
        updates["filters"] = extras

        return replace(self, **updates).validate(today=today)

    @classmethod
    def from_args(
        cls,
        args: Mapping[str, Any],
        *,
        base: Optional["FilterState"] = None,
        today: Optional[date] = None,
    ) -> "FilterState":
        """Build a state from request args (``MultiDict`` or plain mapping)."""
        changes = {
            key: args.get(key)
            for key in ("start_date", "end_date", "interval", "limit") + EXTRA_FILTER_KEYS
            if key in args
        }
        return (base or cls.reset()).apply_change(changes, today=today)

    def to_query_params(self) -> Dict[str, Any]:
        """Query parameters for the analytics API; open bounds are omitted."""
        params: Dict[str, Any] = {"interval": self.interval, "limit": self.limit}
        if self.start_date is not None:
            params["start_date"] = self.start_date.isoformat()
        if self.end_date is not None:
            params["end_date"] = self.end_date.isoformat()
        params.update(self.filters)
        return params

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "interval": self.interval,
            "limit": self.limit,
            "filters": dict(self.filters),
        }


__all__ = [
    "EPOCH",
    "FilterState",
    "INTERVALS",
    "Interval",
    "ValidationError",
]
