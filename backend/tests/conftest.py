"""
Shared fixtures for the court reservation test-suite.

Every test gets a private in-memory SQLite database with the range
exclusion triggers installed, a frozen clock it can move forward, and
courts seeded the way the facility configures them.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import os
from typing import Any, Dict, Iterator

# Settings are read at import time; pin them before the app is imported
os.environ.setdefault("CI", "1")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["IS_TESTING"] = "true"
os.environ.pop("RESEND_API_KEY", None)

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from courtbook.core.enums import BookingSource, BookingStatus, PaymentStatus  # noqa: E402
from courtbook.core.facility import FacilityPolicy  # noqa: E402
from courtbook.database import build_engine, init_db  # noqa: E402
from courtbook.models import Booking, Court, Customer  # noqa: E402
from courtbook.services.pricing import RateTable  # noqa: E402
from tests._utils.helpers import FACILITY_TZ, FrozenClock, RecordingNotifier  # noqa: E402


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Iterator[Session]:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def policy() -> FacilityPolicy:
    return FacilityPolicy(tz=FACILITY_TZ, name="Sacré Pádel")


@pytest.fixture
def rates() -> RateTable:
    return RateTable(
        day_rate=Decimal("350"),
        evening_rate=Decimal("400"),
        switch_hour=18,
        tz=FACILITY_TZ,
    )


@pytest.fixture
def clock() -> FrozenClock:
    # 08:00 local on the test day
    return FrozenClock(datetime(2026, 10, 20, 14, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def courts(db: Session) -> Dict[str, Court]:
    seeded = {
        "one": Court(name="Cancha 1", is_active=True),
        "two": Court(name="Cancha 2", is_active=True),
        "retired": Court(name="Cancha 0", is_active=False),
    }
    db.add_all(seeded.values())
    db.commit()
    return seeded


@pytest.fixture
def make_customer(db: Session):
    def _make(full_name: str = "Ana López", phone_e164: str = "+525512345678", **kwargs: Any):
        customer = Customer(full_name=full_name, phone_e164=phone_e164, **kwargs)
        db.add(customer)
        db.commit()
        return customer

    return _make


@pytest.fixture
def make_booking(db: Session, clock: FrozenClock):
    """Insert a booking row directly, bypassing the hold workflow."""

    def _make(
        court: Court,
        start_at: datetime,
        end_at: datetime,
        status: BookingStatus = BookingStatus.CONFIRMED,
        **kwargs: Any,
    ) -> Booking:
        values: Dict[str, Any] = {
            "source": BookingSource.RECEPTION.value,
            "payment_status": PaymentStatus.UNPAID.value,
        }
        if status is BookingStatus.HOLD:
            values["source"] = BookingSource.WEB.value
            values["hold_expires_at"] = clock() + timedelta(minutes=10)
        values.update(kwargs)
        booking = Booking(
            court_id=court.id,
            start_at=start_at,
            end_at=end_at,
            status=status.value,
            **values,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def client(
    db: Session, courts, clock: FrozenClock, notifier: RecordingNotifier
) -> Iterator[TestClient]:
    """API client bound to the test session, clock, and notifier."""
    from courtbook.api.dependencies.database import get_db
    from courtbook.api.dependencies.services import get_clock, get_notifier
    from courtbook.main import app

    def _get_db() -> Iterator[Session]:
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
