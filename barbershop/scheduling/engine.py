# barbershop/scheduling/engine.py
"""
Slot availability for a barber, a day and a service.

Pipeline:
  1. resolve open windows (exception over weekly pattern)
  2. load occupied intervals from existing bookings
  3. generate candidate starts that fit a window
  4. drop candidates that overlap a booking or are already past

An empty list means "nothing available", never an error.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from sqlmodel import Session

from ..config import Settings, get_settings
from .conflicts import filter_conflicts
from .generator import generate_candidates
from .occupancy import load_occupied_intervals_for
from .resolver import resolve_windows_for
from .times import format_hhmm
from . import store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotResult:
    duration_minutes: int
    starts: list[str]


def find_available_slots(
    session: Session,
    barber_email: str,
    day: date,
    service: Union[int, str, None],
    *,
    exclude_booking_id: Optional[int] = None,
    step_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> SlotResult:
    """
    Bookable "HH:MM" start times together with the service duration they were sized for.

    Args:
        service: catalog id or free-text description of the requested service
        exclude_booking_id: booking being edited, ignored when building occupancy
        step_minutes: grid step, defaults to the configured slot step
        now: reference instant; defaults to the current time in the business zone
    """
    settings = settings or get_settings()
    tz = ZoneInfo(settings.business_timezone)
    now = now or datetime.now(tz)
    step = step_minutes if step_minutes is not None else settings.slot_step_minutes

    catalog = store.load_service_catalog(session, settings.default_service_minutes)
    duration = catalog.duration_for(service)

    windows = resolve_windows_for(session, barber_email, day)
    if not windows:
        logger.debug("No availability windows for %s on %s", barber_email, day)
        return SlotResult(duration, [])

    occupied = load_occupied_intervals_for(
        session, barber_email, day, catalog,
        exclude_booking_id=exclude_booking_id,
        tz=tz,
    )
    candidates = generate_candidates(windows, duration, step)
    accepted = filter_conflicts(candidates, duration, occupied, now=now, day=day, tz=tz)

    logger.debug(
        "Slots for %s on %s: %d windows, %d occupied, %d candidates, %d accepted",
        barber_email, day, len(windows), len(occupied), len(candidates), len(accepted),
    )
    return SlotResult(duration, [format_hhmm(m) for m in accepted])


def compute_available_slots(session: Session, barber_email: str, day: date, service: Union[int, str, None], **kwargs) -> list[str]:
    """Bookable "HH:MM" start times; keyword arguments as for `find_available_slots`."""
    return find_available_slots(session, barber_email, day, service, **kwargs).starts


def available_barbers_on_date(session: Session, day: date):
    """Active barbers that have at least one open window on `day`."""
    result = []
    for barber in store.list_active_barbers(session):
        if resolve_windows_for(session, barber.email, day):
            result.append(barber)
    return result
