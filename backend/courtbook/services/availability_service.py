# backend/courtbook/services/availability_service.py
"""
Availability Service.

Builds the per-court slot grid for one local day and classifies every slot
against the bookings that intersect that day. Nothing here is persisted.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import SlotStatus
from ..core.facility import FacilityPolicy
from ..core.timezone_utils import day_window
from ..models.booking import Booking
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock
from .overlap import can_start_flags, classify_slot
from .slot_grid import closing_instant, generate_slots

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotAvailability:
    start_at: datetime
    end_at: datetime
    status: SlotStatus
    can_start: bool

    @property
    def available(self) -> bool:
        return self.status is SlotStatus.AVAILABLE


@dataclass(frozen=True)
class CourtAvailability:
    court_id: str
    court_name: str
    slots: List[SlotAvailability]


@dataclass(frozen=True)
class DayAvailability:
    date: date
    utc_offset: str
    step_minutes: int
    open_hour: int
    close_hour: int
    courts: List[CourtAvailability]


class AvailabilityService(BaseService):
    def __init__(self, db: Session, policy: FacilityPolicy, now: Optional[Clock] = None):
        super().__init__(db, now)
        self.policy = policy
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.court_repository = RepositoryFactory.create_court_repository(db)

    @BaseService.measure_operation("get_availability")
    def get_availability(self, day: date) -> DayAvailability:
        """
        Slot grid of every active court for ``day``.

        A slot is TAKEN by confirmed (or attended) bookings, HOLD by unexpired
        holds, and AVAILABLE otherwise. ``can_start`` tells whether the minimum
        booking fits from that slot without hitting a block or closing time.
        """
        courts = self.court_repository.list_active()
        window_start, window_end = day_window(day, day, self.policy.tz)
        bookings = self.booking_repository.get_blocking_in_window(window_start, window_end)

        by_court: Dict[str, List[Booking]] = defaultdict(list)
        for booking in bookings:
            by_court[booking.court_id].append(booking)

        now = self.now()
        slots = list(generate_slots(day, self.policy))
        close_at = closing_instant(day, self.policy)

        result: List[CourtAvailability] = []
        for court in courts:
            court_bookings = by_court.get(court.id, [])
            statuses = [classify_slot(s.start, s.end, court_bookings, now) for s in slots]
            flags = can_start_flags(
                slots,
                statuses,
                min_booking_minutes=self.policy.min_booking_minutes,
                close_at=close_at,
            )
            result.append(
                CourtAvailability(
                    court_id=court.id,
                    court_name=court.name,
                    slots=[
                        SlotAvailability(
                            start_at=slot.start, end_at=slot.end, status=status, can_start=flag
                        )
                        for slot, status, flag in zip(slots, statuses, flags)
                    ],
                )
            )

        return DayAvailability(
            date=day,
            utc_offset=self.policy.utc_offset,
            step_minutes=self.policy.step_minutes,
            open_hour=self.policy.open_hour,
            close_hour=self.policy.close_hour,
            courts=result,
        )
