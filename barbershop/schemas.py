# barbershop/schemas.py

from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum
from datetime import datetime, date
from typing import List, Optional

from .scheduling.times import parse_hhmm


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    barber = "barber"
    client = "client"
    admin = "admin"


class AppointmentStatus(str, Enum):
    pending = "PENDING"
    done = "DONE"
    canceled = "CANCELED"


class ExceptionMode(str, Enum):
    full_day = "FULL_DAY"  # whole day off
    partial = "PARTIAL"    # intervals are blocked spans, subtracted from the weekly pattern
    custom = "CUSTOM"      # intervals are the open spans for the day


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole
    name: Optional[str] = None


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole
    name: Optional[str] = None


class BarberPublic(BaseModel):
    email: str
    name: Optional[str] = None


# Time intervals

class TimeInterval(BaseModel):
    start_time: str  # "HH:MM"
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def valid_hhmm(cls, value: str) -> str:
        parse_hhmm(value)
        return value

    @model_validator(mode="after")
    def start_before_end(self):
        if parse_hhmm(self.start_time) >= parse_hhmm(self.end_time):
            raise ValueError("start_time must be before end_time")
        return self


class WeeklyDay(BaseModel):
    weekday: int = Field(ge=0, le=6, description="0=Sun, 1=Mon, ..., 6=Sat")
    active: bool
    intervals: List[TimeInterval] = []


class WeeklyAvailabilitySave(BaseModel):
    days: List[WeeklyDay]

    @field_validator("days")
    @classmethod
    def unique_weekdays(cls, days: List[WeeklyDay]) -> List[WeeklyDay]:
        weekdays = [d.weekday for d in days]
        if len(weekdays) != len(set(weekdays)):
            raise ValueError("days cannot contain duplicate weekdays")
        return days


class DailyExceptionCreate(BaseModel):
    date: date
    mode: ExceptionMode
    intervals: List[TimeInterval] = []


class DailyExceptionPublic(BaseModel):
    id: int
    barber_email: str
    date: date
    type: str
    intervals: List[TimeInterval] = []


# Service catalog

class ServiceCreate(BaseModel):
    name: str = Field(min_length=2)
    price: float = Field(gt=0)
    duration_minutes: int = Field(gt=0)
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    price: Optional[float] = Field(default=None, gt=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class ServicePublic(BaseModel):
    id: int
    name: str
    price: float
    duration_minutes: int
    is_active: bool


# Appointments

class AppointmentCreate(BaseModel):
    starts_at: datetime
    client_email: str
    barber_email: Optional[str] = None  # required when an admin books
    client_name: Optional[str] = None
    phone: Optional[str] = None
    service: str


class ClientAppointmentCreate(BaseModel):
    starts_at: datetime
    service: str
    client_name: Optional[str] = None
    phone: Optional[str] = None


class AppointmentUpdate(BaseModel):
    starts_at: Optional[datetime] = None
    service: Optional[str] = None
    client_name: Optional[str] = None
    phone: Optional[str] = None


class AppointmentPublic(BaseModel):
    id: int
    starts_at: datetime
    client_email: str
    client_name: Optional[str] = None
    phone: Optional[str] = None
    barber_email: str
    service: str
    service_id: Optional[int] = None
    status: AppointmentStatus


class AvailabilityResponse(BaseModel):
    barber_email: str
    date: date
    service: str
    duration_minutes: int
    available_starts: List[str]
