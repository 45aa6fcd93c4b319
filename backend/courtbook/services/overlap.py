# backend/courtbook/services/overlap.py
"""
Overlap resolution for the availability grid.

Ranges are half-open ``[start, end)``: a booking that ends exactly when
another starts does not collide with it.
"""

from datetime import datetime, timedelta
from typing import Any, Iterable, List, Optional, Sequence

from ..core.enums import BookingStatus, SlotStatus
from .slot_grid import Slot

# Statuses that make a slot TAKEN. Captured attendance keeps the court occupied.
TAKEN_STATUSES = frozenset(
    {
        BookingStatus.CONFIRMED.value,
        BookingStatus.COMPLETED.value,
        BookingStatus.NO_SHOW.value,
    }
)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def blocking_status(booking: Any, now: datetime) -> Optional[SlotStatus]:
    """
    How a booking blocks the grid at ``now``.

    Returns TAKEN for confirmed (or attended) bookings, HOLD for holds that have
    not expired (a missing expiry never expires), and None otherwise.
    """
    status = getattr(booking.status, "value", booking.status)
    if status in TAKEN_STATUSES:
        return SlotStatus.TAKEN
    if status == BookingStatus.HOLD.value:
        expires_at = booking.hold_expires_at
        if expires_at is None or expires_at > now:
            return SlotStatus.HOLD
    return None


def classify_slot(
    start: datetime, end: datetime, bookings: Iterable[Any], now: datetime
) -> SlotStatus:
    """TAKEN beats HOLD beats AVAILABLE."""
    held = False
    for booking in bookings:
        if not overlaps(start, end, booking.start_at, booking.end_at):
            continue
        state = blocking_status(booking, now)
        if state is SlotStatus.TAKEN:
            return SlotStatus.TAKEN
        if state is SlotStatus.HOLD:
            held = True
    return SlotStatus.HOLD if held else SlotStatus.AVAILABLE


def can_start_flags(
    slots: Sequence[Slot],
    statuses: Sequence[SlotStatus],
    *,
    min_booking_minutes: int,
    close_at: datetime,
) -> List[bool]:
    """
    Whether each slot can begin a booking of the minimum length.

    A start qualifies when the minimum booking fits before closing and every
    grid slot inside ``[start, start + minimum)`` is available.
    """
    minimum = timedelta(minutes=min_booking_minutes)
    flags: List[bool] = []
    for index, slot in enumerate(slots):
        needed_until = slot.start + minimum
        if needed_until > close_at or statuses[index] is not SlotStatus.AVAILABLE:
            flags.append(False)
            continue
        flags.append(
            all(
                statuses[j] is SlotStatus.AVAILABLE
                for j in range(index, len(slots))
                if slots[j].start < needed_until
            )
        )
    return flags
