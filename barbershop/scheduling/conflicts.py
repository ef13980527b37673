# barbershop/scheduling/conflicts.py

from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

from .times import OccupiedInterval, business_date, minutes_of_day, overlaps


def filter_conflicts(
    candidates: Iterable[int],
    service_minutes: int,
    occupied: Iterable[OccupiedInterval],
    now: Optional[datetime] = None,
    day: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> list[int]:
    """
    Keep candidates that overlap no occupied interval.

    Back-to-back is allowed. When `day` is today (judged from `now` in the
    business zone) only starts strictly after the current minute survive;
    a day already behind `now` keeps nothing.
    """
    occupied = list(occupied)

    cutoff = None
    if now is not None and day is not None:
        today = business_date(now, tz)
        if day < today:
            return []
        if day == today:
            cutoff = minutes_of_day(now, tz)

    accepted = []
    for start in candidates:
        if cutoff is not None and start <= cutoff:
            continue

        end = start + service_minutes
        if any(overlaps(start, end, o.start, o.end) for o in occupied):
            continue

        accepted.append(start)

    return accepted
