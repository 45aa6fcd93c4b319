# backend/courtbook/services/pricing.py
"""
Tariff calculation.

The hourly rate is a step function of the local hour: the day rate applies
before the switch hour and the evening rate from it on. Charges accumulate
minute by minute so bookings that straddle the switch get a blended price.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Dict

from ..core.timezone_utils import parse_utc_offset, to_local

if TYPE_CHECKING:
    from ..core.config import Settings

_ONE_MINUTE = timedelta(minutes=1)
_SECONDS_PER_HOUR = Decimal(3600)
_QUANTUM = {"cent": Decimal("0.01"), "unit": Decimal("1")}


@dataclass(frozen=True)
class RateTable:
    day_rate: Decimal
    evening_rate: Decimal
    switch_hour: int
    tz: tzinfo
    rounding: str = "cent"

    def rate_at(self, instant: datetime) -> Decimal:
        local = to_local(instant, self.tz)
        return self.evening_rate if local.hour >= self.switch_hour else self.day_rate

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RateTable":
        return cls(
            day_rate=Decimal(settings.day_rate),
            evening_rate=Decimal(settings.evening_rate),
            switch_hour=settings.rate_switch_hour,
            tz=parse_utc_offset(settings.facility_utc_offset),
            rounding=settings.price_rounding,
        )


def _next_minute(instant: datetime) -> datetime:
    return instant.replace(second=0, microsecond=0) + _ONE_MINUTE


def compute_charge(start: datetime, end: datetime, rates: RateTable) -> Decimal:
    """
    Total charge for ``[start, end)``.

    Args:
        start: Aware start instant
        end: Aware end instant, after ``start``
        rates: Tariff to apply

    Returns:
        Decimal rounded half-up to the table's quantum (cent or whole unit)

    Raises:
        ValueError: If the range is empty or inverted
    """
    if end <= start:
        raise ValueError("end must be after start")

    seconds_by_rate: Dict[Decimal, Decimal] = defaultdict(Decimal)
    cursor = start
    while cursor < end:
        boundary = min(_next_minute(cursor), end)
        elapsed = Decimal(str((boundary - cursor).total_seconds()))
        seconds_by_rate[rates.rate_at(cursor)] += elapsed
        cursor = boundary

    total = sum(
        (rate * seconds / _SECONDS_PER_HOUR for rate, seconds in seconds_by_rate.items()),
        Decimal(0),
    )
    return total.quantize(_QUANTUM[rates.rounding], rounding=ROUND_HALF_UP)
