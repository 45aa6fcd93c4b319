# backend/courtbook/schemas/availability.py
"""Availability grid responses."""

from datetime import date, datetime
from typing import List

from ..core.enums import SlotStatus
from ._strict_base import StrictModel


class SlotResponse(StrictModel):
    start_at: datetime
    end_at: datetime
    status: SlotStatus
    available: bool
    can_start: bool


class CourtAvailabilityResponse(StrictModel):
    court_id: str
    court_name: str
    slots: List[SlotResponse]


class AvailabilityResponse(StrictModel):
    """Per-court slot grid for one local day."""

    date: date
    utc_offset: str
    step_minutes: int
    open_hour: int
    close_hour: int
    courts: List[CourtAvailabilityResponse]
