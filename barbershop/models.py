# barbershop/models.py

from typing import Optional, List
from datetime import datetime, date as Date

from sqlalchemy import Column, DateTime, Index, UniqueConstraint, text
from sqlmodel import SQLModel, Field, Relationship


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # barber, client or admin
    name: Optional[str] = None
    is_active: bool = True


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    duration_minutes: int
    price: float
    is_active: bool = True


class Appointment(SQLModel, table=True):
    # one live appointment per barber and start; canceled rows release the slot
    __table_args__ = (
        Index(
            "uq_barber_start_live",
            "barber_email",
            "starts_at",
            unique=True,
            sqlite_where=text("status != 'CANCELED'"),
            postgresql_where=text("status != 'CANCELED'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    # naive business-local time
    starts_at: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))
    barber_email: str = Field(index=True)
    client_email: str
    client_name: Optional[str] = None
    phone: Optional[str] = None
    # free-text description, kept for the legacy duration lookup
    service: str
    service_id: Optional[int] = Field(default=None, foreign_key="service.id")
    status: str = "PENDING"


class WeeklyAvailability(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("barber_email", "weekday", name="uq_barber_weekday"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_email: str = Field(index=True)
    weekday: int  # 0=Sun ... 6=Sat
    is_active: bool = True

    intervals: List["WeeklyTimeInterval"] = Relationship(
        back_populates="weekly_availability",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class WeeklyTimeInterval(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    weekly_availability_id: int = Field(foreign_key="weeklyavailability.id", index=True)
    start_time: str  # "HH:MM"
    end_time: str

    weekly_availability: Optional[WeeklyAvailability] = Relationship(back_populates="intervals")


class DailyException(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("barber_email", "date", name="uq_barber_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_email: str = Field(index=True)
    date: Date = Field(index=True)
    type: str  # "DAY_OFF" or "CUSTOM"

    intervals: List["DailyTimeInterval"] = Relationship(
        back_populates="daily_exception",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class DailyTimeInterval(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    daily_exception_id: int = Field(foreign_key="dailyexception.id", index=True)
    start_time: str
    end_time: str

    daily_exception: Optional[DailyException] = Relationship(back_populates="intervals")
