from datetime import datetime

from pydantic import BaseModel, Field

from zenit.models.appointment import AppointmentStatus


class SlotInfo(BaseModel):
    start: datetime
    end: datetime
    available: bool


class AvailableSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    service_id: int
    duration_minutes: int
    slots: list[SlotInfo]


class BookingDaysResponse(BaseModel):
    days: list[str]  # YYYY-MM-DD, tomorrow first


class BookAppointmentRequest(BaseModel):
    service_id: int
    start_time: datetime
    notes: str | None = Field(default=None, max_length=2000)


class UpdateStatusRequest(BaseModel):
    status: AppointmentStatus
