# backend/courtbook/schemas/__init__.py
"""
Pydantic request/response schemas for the HTTP surface.
"""

from .availability import AvailabilityResponse, CourtAvailabilityResponse, SlotResponse
from .booking import (
    AttachCustomerRequest,
    BoardBookingResponse,
    BoardResponse,
    BookingResponse,
    ConfirmHoldRequest,
    ConfirmHoldResponse,
    EmailOutcomeResponse,
    HoldCreateRequest,
    HoldExtendRequest,
    HoldReleaseResponse,
    MarkPaidRequest,
    SetStatusRequest,
)
from .customer import CustomerResponse, CustomerSearchResponse, ProfileSyncResponse

__all__ = [
    "AttachCustomerRequest",
    "AvailabilityResponse",
    "BoardBookingResponse",
    "BoardResponse",
    "BookingResponse",
    "ConfirmHoldRequest",
    "ConfirmHoldResponse",
    "CourtAvailabilityResponse",
    "CustomerResponse",
    "CustomerSearchResponse",
    "EmailOutcomeResponse",
    "HoldCreateRequest",
    "HoldExtendRequest",
    "HoldReleaseResponse",
    "MarkPaidRequest",
    "ProfileSyncResponse",
    "SetStatusRequest",
    "SlotResponse",
]
