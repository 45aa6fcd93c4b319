# backend/courtbook/routes/v1/reception.py
"""
Reception routes - API v1

All endpoints require an identity with the owner or reception role.

Endpoints:
    GET /reception/bookings - Booking board for a date or date range
    POST /reception/bookings/{booking_id}/status - Cancel or capture attendance
    POST /reception/bookings/{booking_id}/payment - Register payment
    POST /reception/bookings/{booking_id}/customer - Attach an existing customer
    GET /reception/customers?q= - Customer search
    POST /reception/customers - Register a customer (or reuse one by phone)
    GET /reception/customers/{customer_id} - Customer with booking history and totals
    PATCH /reception/customers/{customer_id} - Update notes, birthday, player notes
"""

import asyncio
from datetime import date
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response, status

from ...api.dependencies import (
    get_booking_status_service,
    get_customer_service,
    require_reception,
)
from ...core.enums import BookingStatus
from ...core.exceptions import DomainException
from ...principal import Identity
from ...schemas.booking import (
    AttachCustomerRequest,
    BoardBookingResponse,
    BoardResponse,
    BookingResponse,
    MarkPaidRequest,
    SetStatusRequest,
)
from ...schemas.customer import (
    CustomerBookingResponse,
    CustomerCreateRequest,
    CustomerDetailResponse,
    CustomerNotesUpdate,
    CustomerResponse,
    CustomerSearchResponse,
    CustomerStatsResponse,
    PaginationResponse,
)
from ...services.booking_status_service import BoardEntry, BookingStatusService
from ...services.customer_service import CustomerDetail, CustomerHistoryEntry, CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reception-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _board_row(entry: BoardEntry) -> BoardBookingResponse:
    row = BoardBookingResponse.model_validate(entry.booking)
    row.court_name = entry.court_name
    row.customer_name = entry.customer_name
    row.customer_phone = entry.customer_phone
    return row


def _history_row(entry: CustomerHistoryEntry) -> CustomerBookingResponse:
    booking = entry.booking
    return CustomerBookingResponse(
        id=booking.id,
        court_id=booking.court_id,
        court_name=entry.court_name,
        start_at=booking.start_at,
        end_at=booking.end_at,
        status=booking.status,
        source=booking.source,
        kind=booking.kind,
        payment_status=booking.payment_status,
        paid_amount=booking.paid_amount,
        expected_amount=entry.expected_amount,
        payment_method=booking.payment_method,
        paid_at=booking.paid_at,
    )


def _detail_response(detail: CustomerDetail) -> CustomerDetailResponse:
    return CustomerDetailResponse(
        customer=CustomerResponse.model_validate(detail.customer),
        stats=CustomerStatsResponse(
            total_visits=detail.total_visits,
            total_paid=detail.total_paid,
            last_visit_at=detail.last_visit_at,
        ),
        bookings=[_history_row(entry) for entry in detail.history],
        pagination=PaginationResponse(
            limit=detail.limit,
            offset=detail.offset,
            total=detail.total_visits,
            has_more=detail.has_more,
        ),
    )


# ============================================================================
# Static routes
# ============================================================================


@router.get("/bookings", response_model=BoardResponse)
async def list_bookings(
    day: Optional[date] = Query(None, alias="date", description="Single local date"),
    start: Optional[date] = Query(None, description="First local date of a range"),
    end: Optional[date] = Query(None, description="Last local date of a range"),
    _: Identity = Depends(require_reception),
    service: BookingStatusService = Depends(get_booking_status_service),
) -> BoardResponse:
    """Bookings intersecting the requested local days, ordered by start."""
    first_day = day or start
    if first_day is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Provide date or start/end", "code": "MISSING_DATE"},
        )
    last_day = end if day is None and end is not None else first_day

    try:
        entries: List[BoardEntry] = await asyncio.to_thread(
            service.list_board, first_day, last_day
        )
        return BoardResponse(
            start_date=first_day,
            end_date=last_day,
            bookings=[_board_row(entry) for entry in entries],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/customers", response_model=CustomerSearchResponse)
async def search_customers(
    q: str = Query("", max_length=100, description="Name fragment or phone"),
    _: Identity = Depends(require_reception),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerSearchResponse:
    """Up to 8 customers, newest first. Queries shorter than 2 characters return nothing."""
    try:
        customers = await asyncio.to_thread(service.search, q)
        return CustomerSearchResponse(
            customers=[CustomerResponse.model_validate(c) for c in customers]
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/customers", response_model=CustomerResponse)
async def register_customer(
    response: Response,
    payload: CustomerCreateRequest = Body(...),
    _: Identity = Depends(require_reception),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    """
    Register a customer at reception.

    Returns 201 when a new customer was created. An existing phone returns
    that customer (200) with its name refreshed.
    """
    try:
        customer, created = await asyncio.to_thread(
            service.register_customer,
            full_name=payload.full_name,
            phone=payload.phone,
            email=payload.email,
            notes=payload.notes,
            birthday=payload.birthday,
            player_notes=payload.player_notes,
        )
        if created:
            response.status_code = status.HTTP_201_CREATED
        return CustomerResponse.model_validate(customer)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# Dynamic routes (with path parameters)
# ============================================================================


@router.post("/bookings/{booking_id}/status", response_model=BookingResponse)
async def set_booking_status(
    booking_id: str = Path(..., description="Booking id"),
    payload: SetStatusRequest = Body(...),
    _: Identity = Depends(require_reception),
    service: BookingStatusService = Depends(get_booking_status_service),
) -> BookingResponse:
    """
    Cancel a booking or mark attendance.

    Paid bookings cannot be cancelled; attendance requires payment first.
    """
    try:
        booking = await asyncio.to_thread(
            service.set_status, booking_id, BookingStatus(payload.status)
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/bookings/{booking_id}/payment", response_model=BookingResponse)
async def mark_booking_paid(
    booking_id: str = Path(..., description="Booking id"),
    payload: MarkPaidRequest = Body(...),
    _: Identity = Depends(require_reception),
    service: BookingStatusService = Depends(get_booking_status_service),
) -> BookingResponse:
    """Register the payment once; a second attempt is a 409 ``ALREADY_PAID``."""
    try:
        booking = await asyncio.to_thread(
            service.mark_paid, booking_id, payload.paid_amount, payload.payment_method
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/bookings/{booking_id}/customer", response_model=BookingResponse)
async def attach_booking_customer(
    booking_id: str = Path(..., description="Booking id"),
    payload: AttachCustomerRequest = Body(...),
    _: Identity = Depends(require_reception),
    service: BookingStatusService = Depends(get_booking_status_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            service.attach_customer, booking_id, payload.customer_id
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/customers/{customer_id}", response_model=CustomerDetailResponse)
async def get_customer(
    customer_id: str = Path(..., description="Customer id"),
    limit: int = Query(200, description="History page size (clamped to 1..200)"),
    offset: int = Query(0, description="History offset (clamped to 0..5000)"),
    _: Identity = Depends(require_reception),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerDetailResponse:
    """Customer profile, booking history (latest first), and lifetime totals."""
    try:
        detail = await asyncio.to_thread(service.get_detail, customer_id, limit, offset)
        return _detail_response(detail)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/customers/{customer_id}", response_model=CustomerResponse)
async def update_customer_notes(
    customer_id: str = Path(..., description="Customer id"),
    payload: CustomerNotesUpdate = Body(...),
    _: Identity = Depends(require_reception),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    """Update reception notes, birthday, or player notes. An empty body is a 400."""
    try:
        customer = await asyncio.to_thread(
            service.update_notes, customer_id, payload.model_dump(exclude_unset=True)
        )
        return CustomerResponse.model_validate(customer)
    except DomainException as e:
        handle_domain_exception(e)
