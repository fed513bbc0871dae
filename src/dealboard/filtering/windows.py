"""
Named and explicit time windows over deal dates.

Every function takes the reference time ``now`` as an argument; nothing here
reads the wall clock. Bounds are inclusive at day granularity.
"""

import calendar
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

from dealboard.errors import UnknownWindowError
from dealboard.models.dashboard import CustomRange
from dealboard.models.deal import Deal
from dealboard.normalizing.parsers import parse_date

THIS_MONTH = "this-month"
LAST_MONTH = "last-month"
LAST_QUARTER = "last-quarter"
YTD = "ytd"
LAST_YEAR = "last-year"
ALL_TIME = "all-time"

WINDOW_NAMES = (THIS_MONTH, LAST_MONTH, LAST_QUARTER, YTD, LAST_YEAR, ALL_TIME)

Window = Union[str, CustomRange, Mapping]


@dataclass(frozen=True)
class DateSpan:
    """Inclusive date span; a None bound is open."""

    start: Optional[date]
    end: Optional[date]

    @property
    def unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, day: Optional[date]) -> bool:
        if self.unbounded:
            return True
        if day is None:
            return False
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


def _as_date(now: Union[datetime, date]) -> date:
    return now.date() if isinstance(now, datetime) else now


def _month_span(year: int, month: int) -> DateSpan:
    last_day = calendar.monthrange(year, month)[1]
    return DateSpan(date(year, month, 1), date(year, month, last_day))


def _previous_quarter(today: date) -> tuple[int, int]:
    """(year, quarter 1-4) of the calendar quarter before today's."""
    quarter = (today.month - 1) // 3 + 1
    if quarter == 1:
        return today.year - 1, 4
    return today.year, quarter - 1


def _custom_range(window: Union[CustomRange, Mapping]) -> CustomRange:
    if isinstance(window, CustomRange):
        return window
    return CustomRange(start=parse_date(window.get("start")), end=parse_date(window.get("end")))


def resolve_window(window: Window, now: Union[datetime, date]) -> DateSpan:
    """Turn a window name or custom range into concrete inclusive bounds."""
    if isinstance(window, (CustomRange, Mapping)):
        custom = _custom_range(window)
        return DateSpan(custom.start, custom.end)

    today = _as_date(now)
    name = window.strip().lower() if isinstance(window, str) else window
    if name == THIS_MONTH:
        return _month_span(today.year, today.month)
    if name == LAST_MONTH:
        if today.month == 1:
            return _month_span(today.year - 1, 12)
        return _month_span(today.year, today.month - 1)
    if name == LAST_QUARTER:
        year, quarter = _previous_quarter(today)
        first_month = (quarter - 1) * 3 + 1
        start = _month_span(year, first_month).start
        end = _month_span(year, first_month + 2).end
        return DateSpan(start, end)
    if name == YTD:
        return DateSpan(date(today.year, 1, 1), today)
    if name == LAST_YEAR:
        return DateSpan(date(today.year - 1, 1, 1), date(today.year - 1, 12, 31))
    if name == ALL_TIME:
        return DateSpan(None, None)
    raise UnknownWindowError(window)


def in_window(deal: Deal, window: Window, now: Union[datetime, date]) -> bool:
    return resolve_window(window, now).contains(deal.deal_date)


def window_label(window: Window, now: Union[datetime, date]) -> str:
    """Human label for the dashboard header, e.g. "Q3 2026" or "Year to Date 2026"."""
    if isinstance(window, (CustomRange, Mapping)):
        custom = _custom_range(window)
        start = custom.start.isoformat() if custom.start else "beginning"
        end = custom.end.isoformat() if custom.end else "today"
        return f"{start} to {end}"

    today = _as_date(now)
    name = window.strip().lower() if isinstance(window, str) else window
    if name in (THIS_MONTH, LAST_MONTH):
        span = resolve_window(name, today)
        return f"{calendar.month_name[span.start.month]} {span.start.year}"
    if name == LAST_QUARTER:
        year, quarter = _previous_quarter(today)
        return f"Q{quarter} {year}"
    if name == YTD:
        return f"Year to Date {today.year}"
    if name == LAST_YEAR:
        return str(today.year - 1)
    if name == ALL_TIME:
        return "All Time"
    raise UnknownWindowError(window)


def describe_window(window: Any) -> str:
    """Stable text form of a window for cache keys and log lines."""
    if isinstance(window, (CustomRange, Mapping)):
        custom = _custom_range(window)
        return f"custom:{custom.start}:{custom.end}"
    return str(window)
