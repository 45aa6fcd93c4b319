# backend/courtbook/schemas/booking.py
"""
Booking schemas: holds, confirmation, and reception operations.

Request bodies reject unknown fields and enforce enum domains before any
service is invoked.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, field_serializer

from ..core.enums import BookingSource, BookingStatus, PaymentMethod
from ._strict_base import StrictModel, StrictRequestModel
from .customer import CustomerResponse


class BookingResponse(StrictModel):
    id: str
    court_id: str
    customer_id: Optional[str] = None
    user_id: Optional[str] = None
    start_at: datetime
    end_at: datetime
    status: BookingStatus
    source: str
    kind: str
    hold_expires_at: Optional[datetime] = None
    payment_status: str
    paid_amount: Optional[Decimal] = None
    payment_method: Optional[str] = None
    paid_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None

    @field_serializer("paid_amount")
    def _serialize_amount(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None


# ---------------------------------------------------------------------------
# Holds
# ---------------------------------------------------------------------------


class HoldCreateRequest(StrictRequestModel):
    """Claim a court range; naive times are read as facility local time."""

    court_id: str = Field(..., min_length=1, description="Court to hold")
    start_at: datetime = Field(..., description="Range start (inclusive)")
    end_at: datetime = Field(..., description="Range end (exclusive)")
    source: BookingSource = Field(BookingSource.WEB, description="Channel that placed the hold")


class HoldExtendRequest(StrictRequestModel):
    end_at: datetime = Field(..., description="New range end (exclusive)")


class HoldReleaseResponse(StrictModel):
    released: bool


class ConfirmHoldRequest(StrictRequestModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=40)
    email: Optional[str] = Field(
        None, max_length=255, description="Confirmation email for guests (ignored when invalid)"
    )


class EmailOutcomeResponse(StrictModel):
    status: Literal["sent", "failed", "skipped"]
    recipient: Optional[str] = None
    error: Optional[str] = None


class ConfirmHoldResponse(StrictModel):
    booking: BookingResponse
    customer: CustomerResponse
    total: Decimal
    email: EmailOutcomeResponse

    @field_serializer("total")
    def _serialize_total(self, value: Decimal) -> float:
        return float(value)


# ---------------------------------------------------------------------------
# Reception
# ---------------------------------------------------------------------------


class SetStatusRequest(StrictRequestModel):
    status: Literal["CANCELLED", "COMPLETED", "NO_SHOW"]


class MarkPaidRequest(StrictRequestModel):
    paid_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_method: PaymentMethod


class AttachCustomerRequest(StrictRequestModel):
    customer_id: str = Field(..., min_length=1)


class BoardBookingResponse(BookingResponse):
    court_name: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


class BoardResponse(StrictModel):
    start_date: date
    end_date: date
    bookings: List[BoardBookingResponse]
