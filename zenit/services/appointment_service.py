import logging
from datetime import date, datetime

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.core.config import settings
from zenit.models.appointment import ALLOWED_TRANSITIONS, Appointment, AppointmentCreate
from zenit.models.common import as_utc, to_naive_utc, utc_naive_now
from zenit.models.profile import Profile
from zenit.models.service import Service
from zenit.models.slot import BusinessHours
from zenit.services.slot_service import day_bounds_utc, find_slot, get_slots_for_service

logger = logging.getLogger(__name__)


def booking_day(start_time: datetime, business_hours: BusinessHours | None = None) -> date:
    """Calendar day (business timezone) a requested start falls on. Naive input is UTC."""
    hours = business_hours or settings.business_hours
    return as_utc(start_time).astimezone(hours.tzinfo).date()


async def _lock_booking_day(session: AsyncSession, day: date) -> None:
    """Serialize bookings for one business day until the transaction ends (Postgres only)."""
    conn = await session.connection()
    if conn.dialect.name != "postgresql":
        return
    await session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": int(day.strftime("%Y%m%d"))})


async def create_appointment(
    session: AsyncSession,
    client_id: int,
    service: Service,
    data: AppointmentCreate,
    business_hours: BusinessHours | None = None,
) -> Appointment | None:
    """Book `service` at `data.start_time`. Returns None when the start does not
    coincide with an available slot of that day, or when a concurrent booking
    took it first."""
    hours = business_hours or settings.business_hours
    start = as_utc(data.start_time)
    day = booking_day(start, hours)
    await _lock_booking_day(session, day)
    slots = await get_slots_for_service(session, day, service, hours)
    slot = find_slot(slots, start)
    if slot is None or not slot.available:
        return None
    service_id = service.id
    appointment = Appointment(
        client_id=client_id,
        service_id=service_id,
        start_time=to_naive_utc(slot.start),
        end_time=to_naive_utc(slot.end),
        notes=data.notes or None,
    )
    session.add(appointment)
    try:
        await session.flush()
    except IntegrityError:
        # partial unique index on occupied start times
        await session.rollback()
        logger.warning("Slot %s already taken for client=%s", slot.start.isoformat(), client_id)
        return None
    await session.refresh(appointment)
    logger.info(
        "Appointment %s booked: client=%s service=%s start=%s",
        appointment.id, client_id, service_id, slot.start.isoformat(),
    )
    return appointment


async def list_appointments_for_client(
    session: AsyncSession, client_id: int, from_date: date | None = None
) -> list[tuple[Appointment, Service]]:
    """Client dashboard rows, oldest first. `from_date` is a business-timezone day."""
    q = (
        select(Appointment, Service)
        .join(Service, Service.id == Appointment.service_id)
        .where(Appointment.client_id == client_id)
        .order_by(Appointment.start_time)
    )
    if from_date:
        day_start, _ = day_bounds_utc(from_date, settings.business_hours.tzinfo)
        q = q.where(Appointment.start_time >= day_start)
    result = await session.execute(q)
    return [(a, s) for a, s in result.all()]


async def list_all_appointments_with_clients(
    session: AsyncSession,
) -> list[tuple[Appointment, Service, Profile]]:
    result = await session.execute(
        select(Appointment, Service, Profile)
        .join(Service, Service.id == Appointment.service_id)
        .join(Profile, Profile.id == Appointment.client_id)
        .order_by(Appointment.start_time)
    )
    return [(a, s, p) for a, s, p in result.all()]


async def get_appointment(
    session: AsyncSession, appointment_id: int, client_id: int | None = None
) -> Appointment | None:
    """Appointment by id; restricted to `client_id`'s own appointments when given."""
    q = select(Appointment).where(Appointment.id == appointment_id)
    if client_id is not None:
        q = q.where(Appointment.client_id == client_id)
    result = await session.execute(q)
    return result.scalar_one_or_none()


async def get_service_for_appointment(session: AsyncSession, appointment: Appointment) -> Service:
    result = await session.execute(select(Service).where(Service.id == appointment.service_id))
    return result.scalar_one()


async def change_status(session: AsyncSession, appointment: Appointment, new_status: str) -> bool:
    """Move `appointment` to `new_status`. False when the transition is not allowed."""
    if new_status not in ALLOWED_TRANSITIONS.get(appointment.status, set()):
        return False
    old_status = appointment.status
    appointment.status = new_status
    appointment.updated_at = utc_naive_now()
    session.add(appointment)
    await session.flush()
    logger.info("Appointment %s status %s -> %s", appointment.id, old_status, new_status)
    return True
