from datetime import timedelta
from types import SimpleNamespace

from courtbook.core.enums import SlotStatus
from courtbook.services.overlap import blocking_status, can_start_flags, classify_slot, overlaps
from courtbook.services.slot_grid import closing_instant, generate_slots
from tests._utils.helpers import TEST_DAY, local

NOW = local(8, 0)


def _booking(start, end, status="CONFIRMED", hold_expires_at=None):
    return SimpleNamespace(
        start_at=start, end_at=end, status=status, hold_expires_at=hold_expires_at
    )


def test_ranges_are_half_open():
    assert overlaps(local(10), local(11), local(10, 30), local(11, 30))
    assert not overlaps(local(10), local(11), local(11), local(12))
    assert not overlaps(local(11), local(12), local(10), local(11))


def test_blocking_status_by_booking_state():
    assert blocking_status(_booking(local(10), local(11)), NOW) is SlotStatus.TAKEN
    assert blocking_status(_booking(local(10), local(11), "COMPLETED"), NOW) is SlotStatus.TAKEN
    assert blocking_status(_booking(local(10), local(11), "NO_SHOW"), NOW) is SlotStatus.TAKEN
    assert blocking_status(_booking(local(10), local(11), "CANCELLED"), NOW) is None


def test_holds_block_until_they_expire():
    live = _booking(local(10), local(11), "HOLD", hold_expires_at=NOW + timedelta(minutes=1))
    expired = _booking(local(10), local(11), "HOLD", hold_expires_at=NOW)
    open_ended = _booking(local(10), local(11), "HOLD", hold_expires_at=None)

    assert blocking_status(live, NOW) is SlotStatus.HOLD
    assert blocking_status(expired, NOW) is None
    assert blocking_status(open_ended, NOW) is SlotStatus.HOLD


def test_taken_wins_over_hold():
    bookings = [
        _booking(local(10), local(11), "HOLD", hold_expires_at=NOW + timedelta(minutes=5)),
        _booking(local(10, 30), local(11, 30)),
    ]
    assert classify_slot(local(10, 30), local(11), bookings, NOW) is SlotStatus.TAKEN
    assert classify_slot(local(10), local(10, 30), bookings, NOW) is SlotStatus.HOLD
    assert classify_slot(local(11, 30), local(12), bookings, NOW) is SlotStatus.AVAILABLE


def _flags(policy, bookings):
    slots = list(generate_slots(TEST_DAY, policy))
    statuses = [classify_slot(s.start, s.end, bookings, NOW) for s in slots]
    flags = can_start_flags(
        slots,
        statuses,
        min_booking_minutes=policy.min_booking_minutes,
        close_at=closing_instant(TEST_DAY, policy),
    )
    return {slot.start: flag for slot, flag in zip(slots, flags)}


def test_can_start_needs_room_before_closing(policy):
    flags = _flags(policy, [])
    assert flags[local(21, 0)] is True
    assert flags[local(21, 30)] is False
    assert flags[local(20, 0)] is True


def test_can_start_needs_the_following_slots_free(policy):
    flags = _flags(policy, [_booking(local(10), local(11))])

    assert flags[local(9, 0)] is True
    assert flags[local(9, 30)] is False
    assert flags[local(10, 0)] is False
    assert flags[local(10, 30)] is False
    assert flags[local(11, 0)] is True
