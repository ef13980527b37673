# barbershop/routers/services_routes.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Service
from barbershop.schemas import ServiceCreate, ServicePublic, ServiceUpdate
from barbershop.auth import get_current_user
from barbershop.deps import require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.get("", response_model=List[ServicePublic])
def list_services(
    active: Optional[bool] = None,
    session: Session = Depends(get_session),
):
    stmt = select(Service)
    if active is not None:
        stmt = stmt.where(Service.is_active == active)
    return session.exec(stmt.order_by(Service.name)).all()


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    service: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_service = Service(
        name=service.name.strip(),
        price=service.price,
        duration_minutes=service.duration_minutes,
        is_active=service.is_active,
    )
    session.add(db_service)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Service name already exists")

    session.refresh(db_service)
    logger.info("Created service %r (%d min)", db_service.name, db_service.duration_minutes)
    return db_service


@router.patch("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    changes: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    db_service = session.get(Service, service_id)
    if db_service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    for key, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
        if key == "name":
            value = value.strip()
        setattr(db_service, key, value)

    session.add(db_service)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Service name already exists")

    session.refresh(db_service)
    return db_service
