import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.api.deps import get_current_profile, get_current_therapist, get_session
from zenit.api.schemas.appointment import BookAppointmentRequest, UpdateStatusRequest
from zenit.core.exceptions import SlotGenerationError
from zenit.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentServiceInfo,
    AppointmentStatus,
    AppointmentTherapistPublic,
    status_label,
)
from zenit.models.common import as_utc
from zenit.models.profile import Profile
from zenit.models.service import Service
from zenit.services.appointment_service import (
    booking_day,
    change_status,
    create_appointment,
    get_appointment,
    get_service_for_appointment,
    list_all_appointments_with_clients,
    list_appointments_for_client,
)
from zenit.services.catalog_service import get_active_service
from zenit.services.slot_service import is_bookable_day

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


def _public_fields(a: Appointment, service: Service) -> dict:
    return {
        "id": a.id,
        "client_id": a.client_id,
        "service_id": a.service_id,
        "start_time": as_utc(a.start_time),
        "end_time": as_utc(a.end_time),
        "status": a.status,
        "status_label": status_label(a.status),
        "notes": a.notes,
        "service": AppointmentServiceInfo(name=service.name, duration_minutes=service.duration_minutes),
        "created_at": as_utc(a.created_at),
    }


def _to_public(a: Appointment, service: Service) -> AppointmentPublic:
    return AppointmentPublic(**_public_fields(a, service))


def _to_therapist_public(a: Appointment, service: Service, client: Profile) -> AppointmentTherapistPublic:
    """Back-office shape with client contact details."""
    return AppointmentTherapistPublic(
        **_public_fields(a, service),
        client_email=client.email,
        client_full_name=client.full_name,
        client_phone=client.phone,
    )


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: BookAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    current_profile: Profile = Depends(get_current_profile),
) -> AppointmentPublic:
    service = await get_active_service(session, body.service_id)
    if not service:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    if not is_bookable_day(booking_day(body.start_time)):
        raise HTTPException(status_code=422, detail="Date is outside the booking window")
    data = AppointmentCreate(service_id=service.id, start_time=body.start_time, notes=body.notes)
    try:
        appointment = await create_appointment(session, current_profile.id, service, data)
    except SlotGenerationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Slot not available for this service.",
        )
    return _to_public(appointment, service)


@router.get("", response_model=list[AppointmentPublic])
async def list_my_appointments(
    from_date: date | None = Query(None, alias="from_date"),
    session: AsyncSession = Depends(get_session),
    current_profile: Profile = Depends(get_current_profile),
) -> list[AppointmentPublic]:
    rows = await list_appointments_for_client(session, current_profile.id, from_date=from_date)
    return [_to_public(a, s) for a, s in rows]


@router.get("/all", response_model=list[AppointmentTherapistPublic])
async def list_all_appointments(
    session: AsyncSession = Depends(get_session),
    current_profile: Profile = Depends(get_current_therapist),
) -> list[AppointmentTherapistPublic]:
    """Therapist back office: every appointment with client details."""
    rows = await list_all_appointments_with_clients(session)
    return [_to_therapist_public(a, s, p) for a, s, p in rows]


@router.post("/{appointment_id}/cancel", response_model=AppointmentPublic)
async def cancel_my_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_profile: Profile = Depends(get_current_profile),
) -> AppointmentPublic:
    appointment = await get_appointment(session, appointment_id, client_id=current_profile.id)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found or not yours",
        )
    if not await change_status(session, appointment, AppointmentStatus.CANCELLED.value):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Appointment is already {appointment.status}",
        )
    service = await get_service_for_appointment(session, appointment)
    return _to_public(appointment, service)


@router.patch("/{appointment_id}/status", response_model=AppointmentPublic)
async def update_appointment_status(
    appointment_id: int,
    body: UpdateStatusRequest,
    session: AsyncSession = Depends(get_session),
    current_profile: Profile = Depends(get_current_therapist),
) -> AppointmentPublic:
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    if not await change_status(session, appointment, body.status.value):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change status from {appointment.status} to {body.status.value}",
        )
    service = await get_service_for_appointment(session, appointment)
    return _to_public(appointment, service)
