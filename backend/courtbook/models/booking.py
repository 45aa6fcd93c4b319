# backend/courtbook/models/booking.py
"""
Booking model for the court reservation system.

A booking is a half-open interval [start_at, end_at) on one court. Holds,
confirmed bookings, and captured attendance (completed / no-show) all occupy
the court; cancelled bookings free it. The no-overlap rule is enforced by the
store itself:

- PostgreSQL: an exclusion constraint over ``tstzrange(start_at, end_at, '[)')``
- SQLite: insert/update triggers that abort with the same constraint name
"""

import logging
from typing import Any

from sqlalchemy import (
    DDL,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Numeric,
    String,
    event,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import BOOKING_OVERLAP_CONSTRAINT
from ..core.enums import (
    EXCLUSION_STATUSES,
    BookingKind,
    BookingSource,
    BookingStatus,
    CancelledBy,
    PaymentMethod,
    PaymentStatus,
)
from ..database import Base
from .types import TimestampMixin, UTCDateTime

logger = logging.getLogger(__name__)


def _in_list(values: Any) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


class Booking(Base, TimestampMixin):
    """
    One court occupancy interval.

    Attributes:
        id: ULID primary key
        court_id: Court being used
        customer_id: Customer attached at confirmation (or by reception)
        user_id: Authenticated user who confirmed, when known
        start_at / end_at: UTC instants, half-open
        status: HOLD -> CONFIRMED -> COMPLETED | NO_SHOW, or CANCELLED
        source: Channel that created the booking
        hold_expires_at: Only meaningful while status is HOLD
        payment_status / paid_amount / payment_method / paid_at: Single-shot payment capture
        cancelled_by: Actor recorded on cancellation
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    court_id = Column(String(26), ForeignKey("courts.id"), nullable=False)
    customer_id = Column(String(26), ForeignKey("customers.id"), nullable=True)
    user_id = Column(String(64), nullable=True, index=True)

    start_at = Column(UTCDateTime(), nullable=False)
    end_at = Column(UTCDateTime(), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.HOLD.value)
    source = Column(String(20), nullable=False, default=BookingSource.WEB.value)
    kind = Column(String(20), nullable=False, default=BookingKind.STANDARD.value)
    hold_expires_at = Column(UTCDateTime(), nullable=True)

    payment_status = Column(String(20), nullable=False, default=PaymentStatus.UNPAID.value)
    paid_amount = Column(Numeric(10, 2), nullable=True)
    payment_method = Column(String(20), nullable=True)
    paid_at = Column(UTCDateTime(), nullable=True)

    cancelled_by = Column(String(20), nullable=True)

    court = relationship("Court", lazy="joined")
    customer = relationship("Customer", lazy="joined")

    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_bookings_valid_range"),
        CheckConstraint(f"status IN ({_in_list(BookingStatus)})", name="ck_bookings_status"),
        CheckConstraint(f"source IN ({_in_list(BookingSource)})", name="ck_bookings_source"),
        CheckConstraint(
            f"payment_status IN ({_in_list(PaymentStatus)})", name="ck_bookings_payment_status"
        ),
        CheckConstraint(
            f"payment_method IS NULL OR payment_method IN ({_in_list(PaymentMethod)})",
            name="ck_bookings_payment_method",
        ),
        CheckConstraint(
            f"cancelled_by IS NULL OR cancelled_by IN ({_in_list(CancelledBy)})",
            name="ck_bookings_cancelled_by",
        ),
        CheckConstraint(
            "paid_amount IS NULL OR paid_amount >= 0", name="ck_bookings_paid_amount_nonneg"
        ),
        Index("idx_bookings_court_start", "court_id", "start_at"),
        Index("idx_bookings_status_hold_expiry", "status", "hold_expires_at"),
    )

    @property
    def is_hold(self) -> bool:
        return self.status == BookingStatus.HOLD.value

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: court={self.court_id} "
            f"{self.start_at}-{self.end_at} {self.status}>"
        )


# ---------------------------------------------------------------------------
# Range exclusion guard
# ---------------------------------------------------------------------------

_EXCLUDED = _in_list(EXCLUSION_STATUSES)

_pg_extension = DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(
    dialect="postgresql"
)

_pg_exclusion = DDL(
    f"ALTER TABLE bookings ADD CONSTRAINT {BOOKING_OVERLAP_CONSTRAINT} "
    "EXCLUDE USING gist ("
    "court_id WITH =, "
    "tstzrange(start_at, end_at, '[)') WITH &&"
    f") WHERE (status IN ({_EXCLUDED}))"
).execute_if(dialect="postgresql")


def _sqlite_overlap_trigger(event_name: str, row_filter: str) -> DDL:
    return DDL(
        f"CREATE TRIGGER IF NOT EXISTS {BOOKING_OVERLAP_CONSTRAINT}_{event_name.lower()} "
        f"BEFORE {event_name} ON bookings "
        f"WHEN NEW.status IN ({_EXCLUDED}) "
        "BEGIN "
        "SELECT RAISE(ABORT, "
        f"'{BOOKING_OVERLAP_CONSTRAINT}: court range overlaps an existing booking') "
        "WHERE EXISTS ("
        "SELECT 1 FROM bookings AS other "
        "WHERE other.court_id = NEW.court_id "
        f"AND other.status IN ({_EXCLUDED}) "
        "AND other.start_at < NEW.end_at "
        "AND NEW.start_at < other.end_at"
        f"{row_filter}"
        "); "
        "END"
    ).execute_if(dialect="sqlite")


_sqlite_insert_guard = _sqlite_overlap_trigger("INSERT", "")
_sqlite_update_guard = _sqlite_overlap_trigger("UPDATE", " AND other.id <> NEW.id")

event.listen(Booking.__table__, "before_create", _pg_extension)
event.listen(Booking.__table__, "after_create", _pg_exclusion)
event.listen(Booking.__table__, "after_create", _sqlite_insert_guard)
event.listen(Booking.__table__, "after_create", _sqlite_update_guard)
