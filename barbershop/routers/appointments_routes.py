# barbershop/routers/appointments_routes.py

import logging
from datetime import datetime, timedelta, date
from typing import Optional, List
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from sqlmodel import Session, select

from barbershop.config import Settings, get_settings
from barbershop.db import get_session
from barbershop.models import Appointment, Service
from barbershop.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
    ClientAppointmentCreate,
)
from barbershop.auth import get_current_user
from barbershop.deps import require_role
from barbershop.scheduling import store
from barbershop.scheduling.engine import compute_available_slots
from barbershop.scheduling.times import format_hhmm, minutes_of_day, parse_hhmm, to_business_time

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["appointments"],
)

STATUS_FILTERS = ("PENDING", "DONE", "CANCELED", "all")


def _resolve_service(session: Session, service: str) -> tuple[str, Optional[int]]:
    """Map the requested service onto the catalog; unknown text is kept as a legacy description."""
    key = service.strip()
    if not key:
        raise HTTPException(status_code=422, detail="Service is required")

    db_service = None
    if key.isdigit():
        db_service = session.get(Service, int(key))
    if db_service is None:
        db_service = session.exec(
            select(Service).where(func.lower(Service.name) == key.lower())
        ).first()

    if db_service is None:
        return key, None
    if not db_service.is_active:
        raise HTTPException(status_code=422, detail="Service not available")
    return db_service.name, db_service.id


def _validate_slot(
    session: Session,
    settings: Settings,
    barber_email: str,
    starts_at: datetime,
    service: str,
    exclude_id: Optional[int] = None,
) -> datetime:
    """Check a requested start against business rules and the live slot list; returns it as naive local time."""
    tz = ZoneInfo(settings.business_timezone)
    local_start = to_business_time(starts_at, tz).replace(tzinfo=None)
    now_local = datetime.now(tz).replace(tzinfo=None)

    # slots are whole minutes
    if local_start.second or local_start.microsecond:
        raise HTTPException(status_code=422, detail="Start time must be on the minute")

    # 1) Not in the past
    if local_start < now_local:
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # 2) Shop business hours
    start_minute = minutes_of_day(local_start)
    if not parse_hhmm(settings.business_open) <= start_minute <= parse_hhmm(settings.business_close):
        raise HTTPException(
            status_code=422,
            detail=f"Appointments must start between {settings.business_open} and {settings.business_close}",
        )

    # 3) Must be one of the barber's open slots right now
    available = compute_available_slots(
        session,
        barber_email,
        local_start.date(),
        service,
        exclude_booking_id=exclude_id,
        settings=settings,
    )
    if format_hhmm(start_minute) not in available:
        logger.info("Rejected %s for %s: slot not available", local_start, barber_email)
        raise HTTPException(status_code=409, detail="Time slot is not available")

    return local_start


def _commit_appointment(session: Session, appt: Appointment) -> Appointment:
    session.add(appt)
    try:
        session.commit()
    except IntegrityError:
        # another request took the same start between validation and insert
        session.rollback()
        raise HTTPException(status_code=409, detail="Appointment already exists for that start time")

    session.refresh(appt)
    return appt


def _get_appointment_or_404(session: Session, appt_id: int) -> Appointment:
    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return target


@router.post("/appointments", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber", "admin")

    if current_user["role"] == "barber":
        barber_email = current_user["email"]
    else:
        if not appt.barber_email:
            raise HTTPException(status_code=422, detail="barber_email is required")
        barber_email = appt.barber_email
        if store.get_barber(session, barber_email) is None:
            raise HTTPException(status_code=404, detail="Barber Not Found")

    description, service_id = _resolve_service(session, appt.service)
    starts_at = _validate_slot(session, settings, barber_email, appt.starts_at, description)

    db_appt = _commit_appointment(session, Appointment(
        starts_at=starts_at,
        client_email=appt.client_email,
        client_name=appt.client_name,
        phone=appt.phone,
        barber_email=barber_email,
        service=description,
        service_id=service_id,
        status=AppointmentStatus.pending.value,
    ))
    logger.info("Booked appointment %s for %s at %s", db_appt.id, barber_email, starts_at)
    return db_appt


@router.post("/barbers/{barber_email}/appointments", response_model=AppointmentPublic, status_code=201)
def client_create_appointment(
    barber_email: str,
    appt: ClientAppointmentCreate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    if store.get_barber(session, barber_email) is None:
        raise HTTPException(status_code=404, detail="Barber Not Found")

    description, service_id = _resolve_service(session, appt.service)
    starts_at = _validate_slot(session, settings, barber_email, appt.starts_at, description)

    db_appt = _commit_appointment(session, Appointment(
        starts_at=starts_at,
        client_email=current_user["email"],
        client_name=appt.client_name or current_user.get("name"),
        phone=appt.phone,
        barber_email=barber_email,
        service=description,
        service_id=service_id,
        status=AppointmentStatus.pending.value,
    ))
    logger.info("Client %s booked appointment %s with %s at %s",
                current_user["email"], db_appt.id, barber_email, starts_at)
    return db_appt


@router.patch("/appointments/{appt_id}", response_model=AppointmentPublic)
def update_appointment(
    appt_id: int,
    changes: AppointmentUpdate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(get_current_user),
):
    target = _get_appointment_or_404(session, appt_id)

    user_email = current_user["email"]
    if current_user["role"] != "admin" and user_email not in (target.client_email, target.barber_email):
        raise HTTPException(status_code=403, detail="Forbidden")

    if target.status != AppointmentStatus.pending.value:
        raise HTTPException(status_code=409, detail="Only pending appointments can be edited")

    if changes.client_name is not None:
        target.client_name = changes.client_name
    if changes.phone is not None:
        target.phone = changes.phone

    if changes.starts_at is not None or changes.service is not None:
        if changes.service is not None:
            description, service_id = _resolve_service(session, changes.service)
        else:
            description, service_id = target.service, target.service_id
        requested = changes.starts_at if changes.starts_at is not None else target.starts_at

        # the appointment's own interval must not block its new slot
        target.starts_at = _validate_slot(
            session, settings, target.barber_email, requested, description, exclude_id=target.id
        )
        target.service = description
        target.service_id = service_id

    db_appt = _commit_appointment(session, target)
    logger.info("Updated appointment %s", db_appt.id)
    return db_appt


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    target = _get_appointment_or_404(session, appt_id)

    if target.status == AppointmentStatus.canceled.value:
        raise HTTPException(status_code=409, detail="Appointment already canceled")

    # Authorization: client who booked, the barber, or an admin
    user_email = current_user["email"]
    if current_user["role"] != "admin" and user_email not in (target.client_email, target.barber_email):
        raise HTTPException(status_code=403, detail="Forbidden")

    target.status = AppointmentStatus.canceled.value
    session.add(target)
    session.commit()
    session.refresh(target)
    logger.info("Canceled appointment %s by %s", target.id, user_email)

    return target


@router.patch("/appointments/{appt_id}/done", response_model=AppointmentPublic)
def complete_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber", "admin")
    target = _get_appointment_or_404(session, appt_id)

    if current_user["role"] == "barber" and current_user["email"] != target.barber_email:
        raise HTTPException(status_code=403, detail="Forbidden")
    if target.status == AppointmentStatus.canceled.value:
        raise HTTPException(status_code=409, detail="Canceled appointments cannot be completed")

    target.status = AppointmentStatus.done.value
    session.add(target)
    session.commit()
    session.refresh(target)
    logger.info("Completed appointment %s", target.id)

    return target


@router.get("/barbers/me/appointments", response_model=List[AppointmentPublic])
def list_barber_appointments(
    status: Optional[str] = "PENDING",
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be 'PENDING', 'DONE', 'CANCELED', or 'all'")

    stmt = select(Appointment).where(Appointment.barber_email == current_user["email"])

    if on_date is not None:
        day_start_dt = datetime.combine(on_date, datetime.min.time())
        day_end_dt = day_start_dt + timedelta(days=1)
        stmt = stmt.where(Appointment.starts_at >= day_start_dt).where(Appointment.starts_at < day_end_dt)

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    return session.exec(stmt.order_by(Appointment.starts_at)).all()


@router.get("/clients/me/appointments", response_model=List[AppointmentPublic])
def list_my_appointments(
    status: Optional[str] = "PENDING",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be 'PENDING', 'DONE', 'CANCELED', or 'all'")

    stmt = select(Appointment).where(Appointment.client_email == current_user["email"])

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    return session.exec(stmt.order_by(Appointment.starts_at)).all()
