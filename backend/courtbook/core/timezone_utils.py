"""
Timezone utilities for the court reservation backend.

The facility runs on a fixed UTC offset. Wall-clock times are always
qualified with that offset before they are compared or stored, so
instants coming from different clients stay comparable.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Tuple


def parse_utc_offset(offset: str) -> timezone:
    """
    Build a fixed-offset timezone from a ``±HH:MM`` string.

    Args:
        offset: Offset such as ``-06:00``

    Returns:
        datetime.timezone with that offset
    """
    sign = -1 if offset.startswith("-") else 1
    hours, _, minutes = offset.lstrip("+-").partition(":")
    delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return timezone(sign * delta, name=offset)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime, tz: tzinfo) -> datetime:
    """Qualify a naive wall-clock datetime with the facility offset."""
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=tz)
    return dt


def to_local(dt: datetime, tz: tzinfo) -> datetime:
    """Convert an instant to facility wall-clock time (naive input is treated as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def local_instant(day: date, minutes_after_midnight: int, tz: tzinfo) -> datetime:
    """Instant for ``day`` at the given number of minutes after local midnight."""
    midnight = datetime.combine(day, time(0, 0), tzinfo=tz)
    return midnight + timedelta(minutes=minutes_after_midnight)


def day_window(first_day: date, last_day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """
    Half-open instant window covering whole local days.

    Args:
        first_day: First local day included
        last_day: Last local day included

    Returns:
        (start, end) where end is local midnight after ``last_day``
    """
    start = local_instant(first_day, 0, tz)
    end = local_instant(last_day + timedelta(days=1), 0, tz)
    return start, end


def format_local(dt: datetime, tz: tzinfo) -> dict:
    """
    Format an instant for display in facility time.

    Returns:
        Dictionary with ISO instant, local date (DD/MM/YYYY) and local time (HH:MM)
    """
    local = to_local(dt, tz)
    return {
        "iso": local.isoformat(),
        "date": local.strftime("%d/%m/%Y"),
        "time": local.strftime("%H:%M"),
    }
