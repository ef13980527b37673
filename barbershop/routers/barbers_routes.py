# barbershop/routers/barbers_routes.py

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import DailyException, DailyTimeInterval, WeeklyAvailability, WeeklyTimeInterval
from barbershop.schemas import (
    AvailabilityResponse,
    BarberPublic,
    DailyExceptionCreate,
    DailyExceptionPublic,
    ExceptionMode,
    WeeklyAvailabilitySave,
    WeeklyDay,
)
from barbershop.auth import get_current_user
from barbershop.deps import require_role
from barbershop.scheduling import store
from barbershop.scheduling.engine import available_barbers_on_date, find_available_slots
from barbershop.scheduling.intervals import subtract_intervals
from barbershop.scheduling.resolver import CUSTOM, DAY_OFF
from barbershop.scheduling.times import format_hhmm, parse_hhmm, weekday_of

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)


# Weekly pattern

@router.put("/me/availability/weekly", response_model=List[WeeklyDay])
def save_weekly_availability(
    payload: WeeklyAvailabilitySave,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")
    email = current_user["email"]

    for day in payload.days:
        if day.active and not day.intervals:
            raise HTTPException(status_code=422, detail="Active days need at least one interval")

    existing = session.exec(
        select(WeeklyAvailability).where(WeeklyAvailability.barber_email == email)
    ).all()
    existing_by_weekday = {row.weekday: row for row in existing}

    for day in payload.days:
        row = existing_by_weekday.get(day.weekday)
        if row is None:
            row = WeeklyAvailability(barber_email=email, weekday=day.weekday)
            existing_by_weekday[day.weekday] = row

        # inactive days keep their row so the barber's choice is remembered
        row.is_active = day.active
        row.intervals = [
            WeeklyTimeInterval(start_time=i.start_time, end_time=i.end_time)
            for i in day.intervals
        ] if day.active else []
        session.add(row)

    session.commit()
    logger.info("Saved weekly availability for %s (%d days)", email, len(payload.days))

    return _weekly_days(existing_by_weekday.values())


@router.get("/me/availability/weekly", response_model=List[WeeklyDay])
def get_weekly_availability(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    rows = session.exec(
        select(WeeklyAvailability).where(WeeklyAvailability.barber_email == current_user["email"])
    ).all()
    return _weekly_days(rows)


# Daily exceptions

@router.put("/me/exceptions", response_model=DailyExceptionPublic)
def put_daily_exception(
    payload: DailyExceptionCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    """
    Create or replace the exception for a date.

    PARTIAL intervals are the spans the barber is NOT available; they are
    subtracted from that weekday's pattern and the remainder is stored as a
    CUSTOM exception. Nothing left over means a DAY_OFF.
    """
    require_role(current_user, "barber")
    email = current_user["email"]

    if payload.mode == ExceptionMode.custom and not payload.intervals:
        raise HTTPException(status_code=422, detail="CUSTOM exceptions need at least one interval")

    open_spans = []
    if payload.mode == ExceptionMode.custom:
        open_spans = [(parse_hhmm(i.start_time), parse_hhmm(i.end_time)) for i in payload.intervals]
    elif payload.mode == ExceptionMode.partial and payload.intervals:
        weekly = store.get_weekly_availability(session, email, weekday_of(payload.date))
        if weekly is not None and weekly.is_active:
            base = [(parse_hhmm(i.start_time), parse_hhmm(i.end_time)) for i in weekly.intervals]
            blocks = [(parse_hhmm(i.start_time), parse_hhmm(i.end_time)) for i in payload.intervals]
            open_spans = subtract_intervals(base, blocks)

    exception = session.exec(
        select(DailyException)
        .where(DailyException.barber_email == email)
        .where(DailyException.date == payload.date)
    ).first()
    if exception is None:
        exception = DailyException(barber_email=email, date=payload.date, type=DAY_OFF)

    exception.type = CUSTOM if open_spans else DAY_OFF
    exception.intervals = [
        DailyTimeInterval(start_time=format_hhmm(start), end_time=format_hhmm(end))
        for start, end in sorted(open_spans)
    ]

    session.add(exception)
    session.commit()
    session.refresh(exception)
    logger.info("Saved %s exception for %s on %s", exception.type, email, exception.date)

    return _exception_public(exception)


@router.get("/me/exceptions", response_model=List[DailyExceptionPublic])
def list_daily_exceptions(
    from_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    stmt = select(DailyException).where(DailyException.barber_email == current_user["email"])
    if from_date is not None:
        stmt = stmt.where(DailyException.date >= from_date)

    rows = session.exec(stmt.order_by(DailyException.date)).all()
    return [_exception_public(row) for row in rows]


@router.delete("/me/exceptions/{day}", status_code=204)
def delete_daily_exception(
    day: date,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")
    email = current_user["email"]

    exception = session.exec(
        select(DailyException)
        .where(DailyException.barber_email == email)
        .where(DailyException.date == day)
    ).first()

    # nothing to remove is still a success
    if exception is not None:
        session.delete(exception)
        session.commit()
        logger.info("Removed exception for %s on %s", email, day)

    return Response(status_code=204)


# Availability queries

@router.get("/available", response_model=List[BarberPublic])
def barbers_available_on(
    on_date: date = Query(..., alias="date"),
    session: Session = Depends(get_session),
):
    return [
        {"email": b.email, "name": b.name}
        for b in available_barbers_on_date(session, on_date)
    ]


@router.get("/{barber_email}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_email: str,
    service: str,
    on_date: date = Query(..., alias="date"),
    exclude_appointment_id: Optional[int] = None,
    step_minutes: Optional[int] = Query(default=None, gt=0),
    session: Session = Depends(get_session),
):
    if store.get_barber(session, barber_email) is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")

    result = find_available_slots(
        session,
        barber_email,
        on_date,
        service,
        exclude_booking_id=exclude_appointment_id,
        step_minutes=step_minutes,
    )

    return {
        "barber_email": barber_email,
        "date": on_date,
        "service": service,
        "duration_minutes": result.duration_minutes,
        "available_starts": result.starts,
    }


def _weekly_days(rows) -> List[dict]:
    return [
        {
            "weekday": row.weekday,
            "active": row.is_active,
            "intervals": [
                {"start_time": i.start_time, "end_time": i.end_time}
                for i in sorted(row.intervals, key=lambda i: i.start_time)
            ],
        }
        for row in sorted(rows, key=lambda r: r.weekday)
    ]


def _exception_public(exception: DailyException) -> dict:
    return {
        "id": exception.id,
        "barber_email": exception.barber_email,
        "date": exception.date,
        "type": exception.type,
        "intervals": [
            {"start_time": i.start_time, "end_time": i.end_time}
            for i in sorted(exception.intervals, key=lambda i: i.start_time)
        ],
    }
