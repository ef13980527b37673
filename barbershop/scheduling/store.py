# barbershop/scheduling/store.py
"""
Read-only queries feeding the slot engine.

Rows are copied into plain records so the engine never touches the session.
Database errors are left to propagate.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from ..models import Appointment, DailyException, Service, User, WeeklyAvailability
from .durations import ServiceCatalog
from .times import BookingRecord, ExceptionRecord, IntervalRecord, WeeklyRecord


def get_daily_exception(session: Session, barber_email: str, day: date) -> Optional[ExceptionRecord]:
    row = session.exec(
        select(DailyException)
        .where(DailyException.barber_email == barber_email)
        .where(DailyException.date == day)
    ).first()
    if row is None:
        return None

    return ExceptionRecord(
        type=row.type,
        intervals=[IntervalRecord(i.start_time, i.end_time) for i in row.intervals],
    )


def get_weekly_availability(session: Session, barber_email: str, weekday: int) -> Optional[WeeklyRecord]:
    row = session.exec(
        select(WeeklyAvailability)
        .where(WeeklyAvailability.barber_email == barber_email)
        .where(WeeklyAvailability.weekday == weekday)
    ).first()
    if row is None:
        return None

    return WeeklyRecord(
        is_active=row.is_active,
        intervals=[IntervalRecord(i.start_time, i.end_time) for i in row.intervals],
    )


def get_bookings_for_day(session: Session, barber_email: str, day: date) -> list[BookingRecord]:
    # every status is fetched; the occupancy loader decides what occupies time
    day_start_dt = datetime.combine(day, datetime.min.time())
    day_end_dt = day_start_dt + timedelta(days=1)

    rows = session.exec(
        select(Appointment)
        .where(Appointment.barber_email == barber_email)
        .where(Appointment.starts_at >= day_start_dt)
        .where(Appointment.starts_at < day_end_dt)
    ).all()

    return [
        BookingRecord(
            id=a.id,
            starts_at=a.starts_at,
            service=a.service,
            status=a.status,
            service_id=a.service_id,
        )
        for a in rows
    ]


def load_service_catalog(session: Session, default_minutes: int) -> ServiceCatalog:
    # inactive services still size the bookings that were made with them
    services = session.exec(select(Service)).all()
    return ServiceCatalog(
        by_id={s.id: s.duration_minutes for s in services},
        by_name={s.name: s.duration_minutes for s in services},
        default_minutes=default_minutes,
    )


def list_active_barbers(session: Session) -> list[User]:
    return list(session.exec(
        select(User)
        .where(User.role == "barber")
        .where(User.is_active == True)  # noqa: E712
        .order_by(User.name, User.email)
    ).all())


def get_barber(session: Session, barber_email: str) -> Optional[User]:
    # deactivated barbers are neither bookable nor listed
    return session.exec(
        select(User)
        .where(User.email == barber_email)
        .where(User.role == "barber")
        .where(User.is_active == True)  # noqa: E712
    ).first()
