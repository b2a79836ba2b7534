from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.api.schemas.appointment import AvailableSlotsResponse, BookingDaysResponse, SlotInfo
from zenit.core.db import get_session
from zenit.core.exceptions import SlotGenerationError
from zenit.services.catalog_service import get_active_service
from zenit.services.slot_service import business_today, get_slots_for_service, is_bookable_day, upcoming_booking_days

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/days", response_model=BookingDaysResponse)
async def booking_days() -> BookingDaysResponse:
    """Dates open for booking, starting tomorrow (business timezone)."""
    return BookingDaysResponse(days=[d.isoformat() for d in upcoming_booking_days(business_today())])


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    date_param: date = Query(..., alias="date"),
    service_id: int = Query(...),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsResponse:
    """Return every slot of the day for the service's duration. Each slot has start, end, and available (bool)."""
    service = await get_active_service(session, service_id)
    if not service:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    if not is_bookable_day(date_param):
        raise HTTPException(
            status_code=422,
            detail="Date is outside the booking window",
        )
    try:
        slots = await get_slots_for_service(session, date_param, service)
    except SlotGenerationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return AvailableSlotsResponse(
        date=date_param.isoformat(),
        service_id=service.id,
        duration_minutes=service.duration_minutes,
        slots=[SlotInfo(start=s.start, end=s.end, available=s.available) for s in slots],
    )
