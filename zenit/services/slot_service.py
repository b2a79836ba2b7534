import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zenit.core.config import settings
from zenit.core.exceptions import InvalidDuration, InvalidInterval
from zenit.models.appointment import OCCUPYING_STATUSES, Appointment
from zenit.models.common import as_utc, to_naive_utc
from zenit.models.service import Service
from zenit.models.slot import BusinessHours, TimeSlot

logger = logging.getLogger(__name__)


def _normalize_day(day: date | datetime, tz: ZoneInfo) -> date:
    """Calendar date of `day` in the business timezone; time of day is discarded."""
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(tz)
        return day.date()
    return day


def _parse_timestamp(value: Any, tz: ZoneInfo) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value)
    else:
        raise TypeError(f"expected ISO timestamp, got {type(value).__name__}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _interval_bounds(interval: Any) -> tuple[Any, Any]:
    if isinstance(interval, Mapping):
        return interval["start_time"], interval["end_time"]
    return interval.start_time, interval.end_time


def _parse_intervals(intervals: Iterable[Any], tz: ZoneInfo) -> list[tuple[datetime, datetime]]:
    parsed: list[tuple[datetime, datetime]] = []
    for interval in intervals:
        try:
            raw_start, raw_end = _interval_bounds(interval)
            start = _parse_timestamp(raw_start, tz)
            end = _parse_timestamp(raw_end, tz)
        except (KeyError, AttributeError, TypeError, ValueError) as e:
            raise InvalidInterval(f"Unparsable interval {interval!r}: {e}") from e
        if start >= end:
            raise InvalidInterval(f"Interval start {start.isoformat()} is not before end {end.isoformat()}")
        parsed.append((start, end))
    return parsed


def _overlaps(slot_start: datetime, slot_end: datetime, start: datetime, end: datetime) -> bool:
    # Open-interval test: touching boundaries never overlap, so back-to-back bookings stay possible.
    return (
        (start < slot_start < end)
        or (start < slot_end < end)
        or (slot_start < start and slot_end > end)
        or (slot_start == start and slot_end == end)
    )


def generate_time_slots(
    day: date | datetime,
    duration_minutes: int,
    existing_intervals: Iterable[Any],
    business_hours: BusinessHours | None = None,
) -> list[TimeSlot]:
    """Carve business hours of `day` into consecutive slots of `duration_minutes`.

    Each slot is flagged unavailable when it overlaps one of `existing_intervals`
    (mappings or objects with ISO `start_time`/`end_time`). A trailing slot that
    would end after closing time is dropped, not truncated.

    Raises InvalidDuration for a non-positive duration and InvalidInterval for a
    malformed or inverted existing interval.
    """
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise InvalidDuration(f"Slot duration must be a positive number of minutes, got {duration_minutes!r}")
    hours = business_hours or settings.business_hours
    tz = hours.tzinfo
    booked = _parse_intervals(existing_intervals, tz)

    midnight = datetime.combine(_normalize_day(day, tz), time.min, tzinfo=tz)
    opening = midnight + timedelta(hours=hours.start_hour)
    closing = midnight + timedelta(hours=hours.end_hour)
    step = timedelta(minutes=duration_minutes)

    slots: list[TimeSlot] = []
    current = opening
    while current < closing:
        slot_end = current + step
        if slot_end > closing:
            break
        available = not any(_overlaps(current, slot_end, start, end) for start, end in booked)
        slots.append(TimeSlot(start=current, end=slot_end, available=available))
        current = slot_end
    return slots


def upcoming_booking_days(today: date, count: int | None = None) -> list[date]:
    """Bookable dates: the `count` days following `today`."""
    if count is None:
        count = settings.booking_window_days
    return [today + timedelta(days=i) for i in range(1, count + 1)]


def business_today(business_hours: BusinessHours | None = None) -> date:
    hours = business_hours or settings.business_hours
    return datetime.now(hours.tzinfo).date()


def is_bookable_day(d: date, business_hours: BusinessHours | None = None) -> bool:
    return d in upcoming_booking_days(business_today(business_hours))


def day_bounds_utc(d: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """[midnight, next midnight) of `d` in the business timezone, as naive UTC."""
    start = datetime.combine(d, time.min, tzinfo=tz)
    end = datetime.combine(d + timedelta(days=1), time.min, tzinfo=tz)
    return to_naive_utc(start), to_naive_utc(end)


async def get_occupied_intervals(
    session: AsyncSession, d: date, business_hours: BusinessHours | None = None
) -> list[dict[str, str]]:
    """Appointments starting on `d` that still hold their slot, as ISO interval dicts."""
    hours = business_hours or settings.business_hours
    start_inclusive, end_exclusive = day_bounds_utc(d, hours.tzinfo)
    result = await session.execute(
        select(Appointment.start_time, Appointment.end_time).where(
            Appointment.start_time >= start_inclusive,
            Appointment.start_time < end_exclusive,
            Appointment.status.in_(OCCUPYING_STATUSES),
        )
    )
    return [
        {"start_time": as_utc(start).isoformat(), "end_time": as_utc(end).isoformat()}
        for start, end in result.all()
    ]


async def get_slots_for_service(
    session: AsyncSession,
    d: date,
    service: Service,
    business_hours: BusinessHours | None = None,
) -> list[TimeSlot]:
    hours = business_hours or settings.business_hours
    occupied = await get_occupied_intervals(session, d, hours)
    slots = generate_time_slots(d, service.duration_minutes, occupied, hours)
    logger.debug(
        "Generated %d slot(s) for service %s on %s (%d occupied interval(s))",
        len(slots), service.id, d.isoformat(), len(occupied),
    )
    return slots


def find_slot(slots: list[TimeSlot], start: datetime) -> TimeSlot | None:
    """Slot whose start coincides with `start` (naive values are taken as UTC)."""
    target = as_utc(start) if start.tzinfo is None else start
    for slot in slots:
        if slot.start == target:
            return slot
    return None
