"""Customer schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_serializer

from ._strict_base import StrictModel, StrictRequestModel


class CustomerResponse(StrictModel):
    id: str
    full_name: str
    phone_e164: str
    email: Optional[str] = None
    notes: Optional[str] = None
    birthday: Optional[date] = None
    player_notes: Optional[str] = None
    sex: Optional[str] = None
    division: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class CustomerSearchResponse(StrictModel):
    customers: List[CustomerResponse]


class ProfileSyncResponse(StrictModel):
    action: Literal["updated_by_booking", "updated_by_phone", "inserted"]
    customer: CustomerResponse


# ---------------------------------------------------------------------------
# Reception customer management
# ---------------------------------------------------------------------------


class CustomerCreateRequest(StrictRequestModel):
    """Register a walk-in customer; an existing phone reuses that customer."""

    full_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=40)
    email: Optional[EmailStr] = None
    notes: Optional[str] = Field(None, max_length=2000)
    birthday: Optional[date] = None
    player_notes: Optional[str] = Field(None, max_length=2000)


class CustomerNotesUpdate(StrictRequestModel):
    """Only the fields present in the body are changed; null clears a field."""

    notes: Optional[str] = Field(None, max_length=2000)
    birthday: Optional[date] = None
    player_notes: Optional[str] = Field(None, max_length=2000)


class CustomerBookingResponse(StrictModel):
    id: str
    court_id: str
    court_name: Optional[str] = None
    start_at: datetime
    end_at: datetime
    status: str
    source: str
    kind: str
    payment_status: str
    paid_amount: Optional[Decimal] = None
    expected_amount: Decimal
    payment_method: Optional[str] = None
    paid_at: Optional[datetime] = None

    @field_serializer("paid_amount", "expected_amount")
    def _serialize_amount(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None


class CustomerStatsResponse(StrictModel):
    total_visits: int
    total_paid: Decimal
    last_visit_at: Optional[datetime] = None

    @field_serializer("total_paid")
    def _serialize_total(self, value: Decimal) -> float:
        return float(value)


class PaginationResponse(StrictModel):
    limit: int
    offset: int
    total: int
    has_more: bool


class CustomerDetailResponse(StrictModel):
    customer: CustomerResponse
    stats: CustomerStatsResponse
    bookings: List[CustomerBookingResponse]
    pagination: PaginationResponse
