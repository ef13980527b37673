# barbershop/scheduling/occupancy.py

from datetime import date, tzinfo
from typing import Callable, Iterable, Optional

from sqlmodel import Session

from .durations import ServiceCatalog
from .times import BookingRecord, OccupiedInterval, minutes_of_day
from . import store

CANCELED = "CANCELED"


def load_occupied_intervals(
    bookings: Iterable[BookingRecord],
    duration_of: Callable[[BookingRecord], int],
    exclude_booking_id: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> list[OccupiedInterval]:
    """
    Occupied spans of the given bookings, in minutes since midnight.

    Canceled bookings and the booking being edited (exclude_booking_id) are
    skipped. PENDING and DONE bookings both occupy time. Order is not
    guaranteed.
    """
    occupied = []
    for booking in bookings:
        if booking.status == CANCELED:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue

        start = minutes_of_day(booking.starts_at, tz)
        occupied.append(OccupiedInterval(start, start + duration_of(booking), booking.id))

    return occupied


def load_occupied_intervals_for(
    session: Session,
    barber_email: str,
    day: date,
    catalog: ServiceCatalog,
    exclude_booking_id: Optional[int] = None,
    tz: Optional[tzinfo] = None,
) -> list[OccupiedInterval]:
    bookings = store.get_bookings_for_day(session, barber_email, day)
    return load_occupied_intervals(
        bookings,
        lambda b: catalog.duration_for(b.service, service_id=b.service_id),
        exclude_booking_id=exclude_booking_id,
        tz=tz,
    )
