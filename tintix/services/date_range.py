from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional, Union

DateInput = Union[date, str, None]


class DateRangeMode(str, Enum):
    ALL = "all"
    TODAY = "today"
    LAST_WEEK = "lastWeek"
    LAST_MONTH = "lastMonth"
    CUSTOM = "custom"


@dataclass(frozen=True)
class DateRange:
    date_from: Optional[date] = None
    date_to: Optional[date] = None  # inclusive day

    @property
    def applied(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    def start_at(self) -> Optional[datetime]:
        if self.date_from is None:
            return None
        return datetime.combine(self.date_from, time.min)

    def end_before(self) -> Optional[datetime]:
        # date_to is an inclusive day; compare as [from 00:00, (to + 1) 00:00)
        if self.date_to is None:
            return None
        return datetime.combine(self.date_to + timedelta(days=1), time.min)

    def contains(self, value: datetime) -> bool:
        start = self.start_at()
        end = self.end_before()
        if start is not None and value < start:
            return False
        if end is not None and value >= end:
            return False
        return True


UNBOUNDED = DateRange()


def parse_iso_date(value: DateInput) -> Optional[date]:
    """Parse YYYY-MM-DD; empty or missing input means no bound."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid date {value!r}; expected YYYY-MM-DD") from exc


def resolve_date_range(
    mode: Union[DateRangeMode, str, None],
    *,
    date_from: DateInput = None,
    date_to: DateInput = None,
    today: Optional[date] = None,
) -> DateRange:
    """
    Turn a dashboard filter mode into concrete inclusive bounds.

    custom needs both bounds; with only one the filter is not applied at all
    (returns UNBOUNDED) rather than guessing the missing side.
    """
    mode = DateRangeMode(mode or DateRangeMode.ALL)
    if today is None:
        today = date.today()

    if mode is DateRangeMode.TODAY:
        return DateRange(today, today)

    if mode is DateRangeMode.LAST_WEEK:
        return DateRange(today - timedelta(days=7), today)

    if mode is DateRangeMode.LAST_MONTH:
        first_of_this_month = today.replace(day=1)
        last_of_prev_month = first_of_this_month - timedelta(days=1)
        return DateRange(last_of_prev_month.replace(day=1), last_of_prev_month)

    if mode is DateRangeMode.CUSTOM:
        start = parse_iso_date(date_from)
        end = parse_iso_date(date_to)
        if start is None or end is None:
            return UNBOUNDED
        if start > end:
            raise ValueError("dateFrom must not be after dateTo")
        return DateRange(start, end)

    return UNBOUNDED


def explicit_date_range(date_from: DateInput = None, date_to: DateInput = None) -> DateRange:
    """Raw dateFrom/dateTo query bounds; each side is independently optional."""
    return DateRange(parse_iso_date(date_from), parse_iso_date(date_to))


def apply_date_range(query, column, date_range: DateRange):
    start = date_range.start_at()
    end = date_range.end_before()
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column < end)
    return query
