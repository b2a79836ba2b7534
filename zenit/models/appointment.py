from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Index, text
from sqlmodel import Field, SQLModel

from zenit.models.common import utc_naive_now


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that hold their time slot
OCCUPYING_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)
OCCUPYING_STATUS_SQL = "status IN ('pending', 'confirmed')"

STATUS_LABELS = {
    AppointmentStatus.PENDING.value: "Pendente",
    AppointmentStatus.CONFIRMED.value: "Confirmado",
    AppointmentStatus.COMPLETED.value: "Concluído",
    AppointmentStatus.CANCELLED.value: "Cancelado",
}

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING.value: {AppointmentStatus.CONFIRMED.value, AppointmentStatus.CANCELLED.value},
    AppointmentStatus.CONFIRMED.value: {AppointmentStatus.COMPLETED.value, AppointmentStatus.CANCELLED.value},
    AppointmentStatus.COMPLETED.value: set(),
    AppointmentStatus.CANCELLED.value: set(),
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # One occupying appointment per start time, even under concurrent bookings
    __table_args__ = (
        Index(
            "uq_appointments_occupied_start",
            "start_time",
            unique=True,
            postgresql_where=text(OCCUPYING_STATUS_SQL),
            sqlite_where=text(OCCUPYING_STATUS_SQL),
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="profiles.id", index=True)
    service_id: int = Field(foreign_key="services.id", index=True)
    start_time: datetime = Field(index=True, sa_type=DateTime())  # naive UTC
    end_time: datetime = Field(sa_type=DateTime())  # naive UTC
    status: str = Field(default=AppointmentStatus.PENDING.value, max_length=20, index=True)
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_naive_now, sa_type=DateTime())
    updated_at: datetime = Field(default_factory=utc_naive_now, sa_type=DateTime())


class AppointmentCreate(SQLModel):
    service_id: int
    start_time: datetime
    notes: str | None = None


class AppointmentServiceInfo(SQLModel):
    name: str
    duration_minutes: int


class AppointmentPublic(SQLModel):
    id: int
    client_id: int
    service_id: int
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    status_label: str
    notes: str | None = None
    service: AppointmentServiceInfo
    created_at: datetime


class AppointmentTherapistPublic(AppointmentPublic):
    client_email: str
    client_full_name: str
    client_phone: str | None = None
