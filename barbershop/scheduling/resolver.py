# barbershop/scheduling/resolver.py
"""
Open windows for a barber on a given day.

A daily exception fully replaces the weekly pattern for its date:
  DAY_OFF → no windows
  CUSTOM  → only the exception's own intervals
Without an exception the active weekly record for that weekday is used.
"""

from datetime import date
from typing import Iterable, Optional

from sqlmodel import Session

from .times import ExceptionRecord, IntervalRecord, TimeWindow, WeeklyRecord, weekday_of, parse_hhmm
from . import store

DAY_OFF = "DAY_OFF"
CUSTOM = "CUSTOM"


def resolve_windows(
    exception: Optional[ExceptionRecord],
    weekly: Optional[WeeklyRecord],
) -> list[TimeWindow]:
    if exception is not None:
        if exception.type == DAY_OFF:
            return []
        if exception.type == CUSTOM:
            return _to_windows(exception.intervals)

    if weekly is None or not weekly.is_active or not weekly.intervals:
        return []

    return _to_windows(weekly.intervals)


def resolve_windows_for(session: Session, barber_email: str, day: date) -> list[TimeWindow]:
    exception = store.get_daily_exception(session, barber_email, day)
    if exception is not None and exception.type == DAY_OFF:
        return []

    weekly = None
    if exception is None:
        weekly = store.get_weekly_availability(session, barber_email, weekday_of(day))

    return resolve_windows(exception, weekly)


def _to_windows(intervals: Iterable[IntervalRecord]) -> list[TimeWindow]:
    windows = []
    for interval in intervals:
        start, end = parse_hhmm(interval.start_time), parse_hhmm(interval.end_time)
        if start >= end:
            continue
        windows.append(TimeWindow(start, end))

    # stable: equal starts keep their stored order
    windows.sort(key=lambda w: w.start)
    return windows
