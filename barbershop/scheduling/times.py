# barbershop/scheduling/times.py
"""
Time-of-day helpers and the value types the slot engine works on.

All engine arithmetic is done in integer minutes since midnight. "HH:MM"
strings only exist at the edges (storage rows and API responses).
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Optional

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")


class InvalidTimeError(ValueError):
    """Raised when a time string is not a zero-padded 24h "HH:MM"."""


def parse_hhmm(value: str) -> int:
    """Convert "HH:MM" into minutes since midnight. "24:00" is accepted as end of day."""
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidTimeError(f"Invalid time {value!r}, expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if minute > 59 or hour > 24 or (hour == 24 and minute != 0):
        raise InvalidTimeError(f"Invalid time {value!r}, expected HH:MM")
    return hour * 60 + minute


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_business_time(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    # naive datetimes are already local to the business zone
    if tz is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(tz)


def minutes_of_day(moment: datetime, tz: Optional[tzinfo] = None) -> int:
    local = to_business_time(moment, tz)
    return local.hour * 60 + local.minute


def business_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    return to_business_time(moment, tz).date()


def weekday_of(day: date) -> int:
    """Weekday with 0=Sunday ... 6=Saturday, the convention availability rows are stored in."""
    return day.isoweekday() % 7


def overlaps(start1, end1, start2, end2) -> bool:
    # open intervals: touching endpoints is not an overlap
    return start1 < end2 and start2 < end1


@dataclass(frozen=True)
class TimeWindow:
    start: int
    end: int

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(f"TimeWindow start must be before end, got {self.start}-{self.end}")

    @classmethod
    def from_strings(cls, start_time: str, end_time: str) -> "TimeWindow":
        return cls(parse_hhmm(start_time), parse_hhmm(end_time))

    def __str__(self) -> str:
        return f"{format_hhmm(self.start)}-{format_hhmm(self.end)}"


@dataclass(frozen=True)
class OccupiedInterval:
    start: int
    end: int
    booking_id: Optional[int] = None


# Snapshots handed over by the storage layer

@dataclass(frozen=True)
class IntervalRecord:
    start_time: str
    end_time: str


@dataclass(frozen=True)
class WeeklyRecord:
    is_active: bool
    intervals: list[IntervalRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ExceptionRecord:
    type: str  # "DAY_OFF" or "CUSTOM"
    intervals: list[IntervalRecord] = field(default_factory=list)


@dataclass(frozen=True)
class BookingRecord:
    id: Optional[int]
    starts_at: datetime
    service: Optional[str]
    status: str
    service_id: Optional[int] = None
