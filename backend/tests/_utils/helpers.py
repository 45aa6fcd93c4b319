"""Plain helpers shared by the fixtures and the tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from courtbook.core.timezone_utils import parse_utc_offset
from courtbook.models import Booking
from courtbook.services.email import NotificationResult

FACILITY_TZ = parse_utc_offset("-06:00")
TEST_DAY = date(2026, 10, 20)

RECEPTION_HEADERS = {"X-User-Id": "staff-1", "X-User-Role": "reception"}


def local(hour: int, minute: int = 0, day: date = TEST_DAY) -> datetime:
    """Facility wall-clock time on the test day."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=FACILITY_TZ)


class FrozenClock:
    """Callable clock that only moves when a test says so."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: Any) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@dataclass
class RecordingNotifier:
    sent: List[Dict[str, str]] = field(default_factory=list)
    ok: bool = True

    def send(self, recipient: str, subject: str, html: str, text: str) -> NotificationResult:
        self.sent.append({"recipient": recipient, "subject": subject, "html": html, "text": text})
        if self.ok:
            return NotificationResult(ok=True)
        return NotificationResult(ok=False, error="mailbox unavailable")


class ExplodingNotifier:
    def send(self, recipient: str, subject: str, html: str, text: str) -> NotificationResult:
        raise RuntimeError("provider timeout")


def booking_exists(db: Session, booking_id: str) -> bool:
    return db.query(Booking.id).filter(Booking.id == booking_id).first() is not None
