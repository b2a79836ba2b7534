from datetime import UTC, date, datetime, timedelta
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from zenit.core.exceptions import InvalidDuration, InvalidInterval, SlotGenerationError
from zenit.models.slot import BusinessHours
from zenit.services.slot_service import find_slot, generate_time_slots, upcoming_booking_days

DAY = date(2026, 3, 10)
UTC_HOURS = BusinessHours(start_hour=9, end_hour=18, timezone="UTC")


def _at(hour: int, minute: int = 0, tz=UTC) -> datetime:
    return datetime(DAY.year, DAY.month, DAY.day, hour, minute, tzinfo=tz)


def _interval(start: datetime, end: datetime) -> dict[str, str]:
    return {"start_time": start.isoformat(), "end_time": end.isoformat()}


def _by_start(slots) -> dict[tuple[int, int], bool]:
    return {(s.start.hour, s.start.minute): s.available for s in slots}


def test_slots_are_contiguous_and_within_business_hours():
    slots = generate_time_slots(DAY, 60, [], UTC_HOURS)

    assert len(slots) == 9
    assert slots[0].start == _at(9)
    assert slots[-1].end == _at(18)
    for prev, nxt in zip(slots, slots[1:]):
        assert prev.end == nxt.start
        assert prev.start < nxt.start
    for slot in slots:
        assert slot.end - slot.start == timedelta(minutes=60)


def test_trailing_slot_past_closing_is_dropped_not_truncated():
    slots = generate_time_slots(DAY, 50, [], UTC_HOURS)

    assert len(slots) == 10
    assert slots[-1].start == _at(16, 30)
    assert slots[-1].end == _at(17, 20)
    starts = {s.start for s in slots}
    assert _at(17, 20) not in starts
    assert _at(17, 30) not in starts
    assert all(s.end <= _at(18) for s in slots)


def test_empty_existing_intervals_leaves_every_slot_available():
    slots = generate_time_slots(DAY, 30, [], UTC_HOURS)

    assert len(slots) == 18
    assert all(s.available for s in slots)


def test_boundary_touch_does_not_block_adjacent_slots():
    slots = generate_time_slots(DAY, 60, [_interval(_at(10), _at(11))], UTC_HOURS)
    availability = _by_start(slots)

    assert availability[(9, 0)] is True
    assert availability[(10, 0)] is False
    assert availability[(11, 0)] is True


def test_full_day_interval_blocks_every_slot():
    slots = generate_time_slots(DAY, 30, [_interval(_at(9), _at(18))], UTC_HOURS)

    assert slots
    assert not any(s.available for s in slots)


def test_partial_overlap_on_either_edge_blocks_slot():
    existing = [_interval(_at(10, 30), _at(11, 30))]
    availability = _by_start(generate_time_slots(DAY, 60, existing, UTC_HOURS))

    assert availability[(10, 0)] is False  # slot end inside existing
    assert availability[(11, 0)] is False  # slot start inside existing
    assert availability[(12, 0)] is True


def test_existing_interval_strictly_inside_slot_blocks_it():
    existing = [_interval(_at(14, 15), _at(14, 45))]
    availability = _by_start(generate_time_slots(DAY, 60, existing, UTC_HOURS))

    assert availability[(14, 0)] is False
    assert availability[(13, 0)] is True
    assert availability[(15, 0)] is True


def test_shorter_interval_sharing_slot_start_is_not_flagged():
    # Open-interval rule: [10:00, 10:30) inside [10:00, 11:00) matches none of the clauses
    existing = [_interval(_at(10), _at(10, 30))]
    availability = _by_start(generate_time_slots(DAY, 60, existing, UTC_HOURS))

    assert availability[(10, 0)] is True


def test_unavailable_slots_are_kept_in_order():
    existing = [_interval(_at(9), _at(10)), _interval(_at(12), _at(13))]
    slots = generate_time_slots(DAY, 60, existing, UTC_HOURS)

    assert [s.start.hour for s in slots] == list(range(9, 18))
    assert [s.available for s in slots][:4] == [False, True, True, False]


def test_result_is_independent_of_interval_order_and_repeatable():
    existing = [
        _interval(_at(9, 30), _at(10, 15)),
        _interval(_at(15), _at(16)),
        _interval(_at(15), _at(16)),
        _interval(_at(12, 10), _at(12, 20)),
    ]
    first = generate_time_slots(DAY, 45, existing, UTC_HOURS)
    again = generate_time_slots(DAY, 45, existing, UTC_HOURS)
    reversed_order = generate_time_slots(DAY, 45, list(reversed(existing)), UTC_HOURS)

    assert first == again == reversed_order


def test_time_of_day_is_discarded():
    from_date = generate_time_slots(DAY, 60, [], UTC_HOURS)
    from_datetime = generate_time_slots(datetime(2026, 3, 10, 16, 45), 60, [], UTC_HOURS)

    assert from_date == from_datetime


def test_aware_day_is_read_in_business_timezone():
    hours = BusinessHours(timezone="America/Sao_Paulo")
    # 01:00 UTC on the 11th is still the 10th in Sao Paulo
    slots = generate_time_slots(datetime(2026, 3, 11, 1, 0, tzinfo=UTC), 60, [], hours)

    assert slots[0].start == datetime(2026, 3, 10, 9, 0, tzinfo=ZoneInfo("America/Sao_Paulo"))


def test_intervals_in_other_offsets_are_compared_as_instants():
    hours = BusinessHours(timezone="America/Sao_Paulo")
    # 13:00-14:00 UTC is 10:00-11:00 in Sao Paulo
    existing = [{"start_time": "2026-03-10T13:00:00Z", "end_time": "2026-03-10T14:00:00Z"}]
    availability = _by_start(generate_time_slots(DAY, 60, existing, hours))

    assert availability[(9, 0)] is True
    assert availability[(10, 0)] is False
    assert availability[(11, 0)] is True


def test_naive_intervals_use_business_timezone():
    hours = BusinessHours(timezone="America/Sao_Paulo")
    existing = [{"start_time": "2026-03-10T10:00:00", "end_time": "2026-03-10T11:00:00"}]
    availability = _by_start(generate_time_slots(DAY, 60, existing, hours))

    assert availability[(10, 0)] is False


def test_intervals_may_be_objects_or_datetimes():
    existing = [SimpleNamespace(start_time=_at(10), end_time=_at(11))]
    availability = _by_start(generate_time_slots(DAY, 60, existing, UTC_HOURS))

    assert availability[(10, 0)] is False


def test_duration_longer_than_business_hours_yields_no_slots():
    assert generate_time_slots(DAY, 600, [], UTC_HOURS) == []


def test_custom_business_hours():
    hours = BusinessHours(start_hour=8, end_hour=12, timezone="UTC")
    slots = generate_time_slots(DAY, 60, [], hours)

    assert [s.start.hour for s in slots] == [8, 9, 10, 11]


@pytest.mark.parametrize("duration", [0, -30])
def test_non_positive_duration_is_rejected(duration):
    with pytest.raises(InvalidDuration):
        generate_time_slots(DAY, duration, [], UTC_HOURS)


def test_inverted_interval_is_rejected():
    with pytest.raises(InvalidInterval):
        generate_time_slots(DAY, 60, [_interval(_at(11), _at(10))], UTC_HOURS)


def test_zero_length_interval_is_rejected():
    with pytest.raises(InvalidInterval):
        generate_time_slots(DAY, 60, [_interval(_at(11), _at(11))], UTC_HOURS)


@pytest.mark.parametrize(
    "interval",
    [
        {"start_time": "not-a-date", "end_time": "2026-03-10T11:00:00Z"},
        {"start_time": "2026-03-10T10:00:00Z"},
        {"start_time": None, "end_time": "2026-03-10T11:00:00Z"},
    ],
)
def test_malformed_interval_is_rejected(interval):
    with pytest.raises(InvalidInterval):
        generate_time_slots(DAY, 60, [interval], UTC_HOURS)


def test_slot_errors_are_value_errors():
    assert issubclass(InvalidDuration, SlotGenerationError)
    assert issubclass(InvalidInterval, ValueError)


def test_time_slots_are_immutable():
    slot = generate_time_slots(DAY, 60, [], UTC_HOURS)[0]

    with pytest.raises(ValidationError):
        slot.available = False


def test_business_hours_validation():
    with pytest.raises(ValidationError):
        BusinessHours(start_hour=18, end_hour=9)
    with pytest.raises(ValidationError):
        BusinessHours(timezone="Mars/Olympus_Mons")


def test_find_slot_matches_same_instant():
    slots = generate_time_slots(DAY, 60, [], UTC_HOURS)

    assert find_slot(slots, _at(10)).start == _at(10)
    assert find_slot(slots, datetime(2026, 3, 10, 10, 0)).start == _at(10)
    assert find_slot(slots, _at(10, 15)) is None


def test_upcoming_booking_days_start_tomorrow():
    days = upcoming_booking_days(date(2026, 1, 1), 7)

    assert days[0] == date(2026, 1, 2)
    assert days[-1] == date(2026, 1, 8)
    assert len(days) == 7
