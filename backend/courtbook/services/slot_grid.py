# backend/courtbook/services/slot_grid.py
"""
Slot grid generation.

The grid is rebuilt on every availability query and never stored. Slots are
contiguous, all exactly one step long, and the last one ends at closing time;
a trailing remainder shorter than a step is not offered.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterator

from ..core.facility import FacilityPolicy
from ..core.timezone_utils import local_instant


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime


def generate_slots(day: date, policy: FacilityPolicy) -> Iterator[Slot]:
    """
    Yield the bookable slots of ``day`` in order.

    Args:
        day: Local calendar date
        policy: Operating hours, step, and UTC offset of the facility

    Yields:
        Slot with timezone-qualified start and end
    """
    step = policy.step_minutes
    open_minute = policy.open_hour * 60
    close_minute = policy.close_hour * 60

    for minute in range(open_minute, close_minute - step + 1, step):
        yield Slot(
            start=local_instant(day, minute, policy.tz),
            end=local_instant(day, minute + step, policy.tz),
        )


def closing_instant(day: date, policy: FacilityPolicy) -> datetime:
    return local_instant(day, policy.close_hour * 60, policy.tz)
