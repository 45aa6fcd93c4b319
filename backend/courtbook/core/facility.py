"""Facility operating policy handed to the booking services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta, timezone
from typing import TYPE_CHECKING

from .timezone_utils import parse_utc_offset

if TYPE_CHECKING:
    from .config import Settings


@dataclass(frozen=True)
class FacilityPolicy:
    """Operating hours, grid step and hold lifetime of the facility."""

    tz: timezone
    open_hour: int = 7
    close_hour: int = 22
    step_minutes: int = 30
    min_booking_minutes: int = 60
    hold_ttl_minutes: int = 10
    arrival_tolerance_minutes: int = 15
    name: str = "Sacré Pádel"

    @property
    def hold_ttl(self) -> timedelta:
        return timedelta(minutes=self.hold_ttl_minutes)

    @property
    def utc_offset(self) -> str:
        total = int(self.tz.utcoffset(None).total_seconds() // 60)
        sign = "-" if total < 0 else "+"
        hours, minutes = divmod(abs(total), 60)
        return f"{sign}{hours:02d}:{minutes:02d}"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "FacilityPolicy":
        return cls(
            tz=parse_utc_offset(settings.facility_utc_offset),
            open_hour=settings.open_hour,
            close_hour=settings.close_hour,
            step_minutes=settings.slot_step_minutes,
            min_booking_minutes=settings.min_booking_minutes,
            hold_ttl_minutes=settings.hold_ttl_minutes,
            arrival_tolerance_minutes=settings.arrival_tolerance_minutes,
            name=settings.facility_name,
        )
