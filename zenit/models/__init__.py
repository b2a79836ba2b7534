from zenit.models.profile import Profile, ProfileCreate, ProfilePublic, Role
from zenit.models.refresh_token import RefreshToken
from zenit.models.service import Service, ServicePublic
from zenit.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentTherapistPublic,
)
from zenit.models.slot import BusinessHours, TimeSlot

__all__ = [
    "Profile",
    "ProfileCreate",
    "ProfilePublic",
    "Role",
    "RefreshToken",
    "Service",
    "ServicePublic",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
    "AppointmentTherapistPublic",
    "BusinessHours",
    "TimeSlot",
]
