"""
Core enums for the court reservation backend.

Values are stored verbatim in the bookings table and checked by
constraints, so they must stay upper-case strings.
"""

from enum import Enum


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    HOLD = "HOLD"  # Provisional web claim with expiry
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    COMPLETED = "COMPLETED"


class BookingSource(str, Enum):
    """Who created the booking."""

    WEB = "WEB"
    WHATSAPP = "WHATSAPP"
    RECEPTION = "RECEPTION"


class BookingKind(str, Enum):
    STANDARD = "STANDARD"


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"


class CancelledBy(str, Enum):
    RECEPTION = "RECEPTION"


class SlotStatus(str, Enum):
    """Classification of a grid slot in the availability view."""

    AVAILABLE = "AVAILABLE"
    HOLD = "HOLD"
    TAKEN = "TAKEN"


# Rows in these states take part in the range exclusion constraint.
EXCLUSION_STATUSES = (
    BookingStatus.HOLD,
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
    BookingStatus.NO_SHOW,
)

# Attendance already captured: the booking can no longer be cancelled.
ATTENDANCE_STATUSES = (BookingStatus.COMPLETED, BookingStatus.NO_SHOW)

# Payment can be registered only in these states.
PAYABLE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
