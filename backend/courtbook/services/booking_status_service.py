# backend/courtbook/services/booking_status_service.py
"""
Booking State Machine.

    HOLD -> CONFIRMED -> COMPLETED | NO_SHOW | CANCELLED
    UNPAID -> PAID (once, while CONFIRMED or COMPLETED)

Guards are part of each UPDATE's WHERE clause. When an update matches no
row, the booking is re-read only to explain which rule blocked it:

- cancelling is refused once paid or once attendance was captured
- attendance (COMPLETED / NO_SHOW) requires a paid, CONFIRMED booking
- payment is accepted exactly once
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import (
    ATTENDANCE_STATUSES,
    BookingStatus,
    CancelledBy,
    PaymentMethod,
)
from ..core.exceptions import (
    AlreadyPaidException,
    ConflictException,
    InvalidStatusTransitionException,
    NotFoundException,
    PaymentRequiredException,
    ValidationException,
)
from ..core.facility import FacilityPolicy
from ..core.timezone_utils import day_window
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock

logger = logging.getLogger(__name__)

SETTABLE_STATUSES = (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW)
MAX_BOARD_DAYS = 31


@dataclass(frozen=True)
class BoardEntry:
    """One row of the reception board."""

    booking: Booking
    court_name: Optional[str]
    customer_name: Optional[str]
    customer_phone: Optional[str]


class BookingStatusService(BaseService):
    """Reception-side transitions: status, payment, and customer binding."""

    def __init__(self, db: Session, policy: FacilityPolicy, now: Optional[Clock] = None):
        super().__init__(db, now)
        self.policy = policy
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.customer_repository = RepositoryFactory.create_customer_repository(db)

    @BaseService.measure_operation("set_status")
    def set_status(self, booking_id: str, new_status: BookingStatus) -> Booking:
        """
        Cancel a booking or capture attendance.

        Raises:
            ValidationException: status cannot be set directly
            NotFoundException: unknown booking
            ConflictException: cancellation of a paid booking
            PaymentRequiredException: attendance before payment
            InvalidStatusTransitionException: any other forbidden transition
        """
        new_status = BookingStatus(new_status)
        if new_status not in SETTABLE_STATUSES:
            raise ValidationException(
                f"Status {new_status.value} cannot be set directly",
                code="INVALID_STATUS",
                details={"allowed": [s.value for s in SETTABLE_STATUSES]},
            )

        with self.transaction():
            if new_status is BookingStatus.CANCELLED:
                updated = self.booking_repository.cancel_unpaid(booking_id, CancelledBy.RECEPTION)
            else:
                updated = self.booking_repository.record_attendance(booking_id, new_status)

        booking = self._reload(booking_id)
        if updated == 0:
            raise self._explain_status_refusal(booking, new_status)

        self.log_operation("set_status", booking_id=booking_id, new_status=new_status.value)
        return booking

    @BaseService.measure_operation("mark_paid")
    def mark_paid(self, booking_id: str, amount: Decimal, method: PaymentMethod) -> Booking:
        """
        Register the payment of a confirmed or completed booking.

        Raises:
            ValidationException: non-positive amount
            NotFoundException: unknown booking
            AlreadyPaidException: payment was already registered
            InvalidStatusTransitionException: booking is not payable in its status
        """
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationException(
                "paid_amount must be greater than zero", details={"field": "paid_amount"}
            )
        method = PaymentMethod(method)

        with self.transaction():
            updated = self.booking_repository.mark_paid(
                booking_id, amount=amount, method=method, paid_at=self.now()
            )

        booking = self._reload(booking_id)
        if updated == 0:
            if booking.is_paid:
                prometheus_metrics.inc_booking_conflict("ALREADY_PAID")
                raise AlreadyPaidException(booking_id)
            prometheus_metrics.inc_booking_conflict("INVALID_STATUS_TRANSITION")
            raise InvalidStatusTransitionException(
                "Payment can only be registered for confirmed or completed bookings.",
                current_status=booking.status,
                requested_status="PAID",
            )

        self.log_operation(
            "mark_paid", booking_id=booking_id, paid_amount=str(amount), method=method.value
        )
        return booking

    @BaseService.measure_operation("attach_customer")
    def attach_customer(self, booking_id: str, customer_id: str) -> Booking:
        if self.customer_repository.get_by_id(customer_id) is None:
            raise NotFoundException("Customer not found", details={"customer_id": customer_id})

        with self.transaction():
            updated = self.booking_repository.attach_customer(booking_id, customer_id)
        if updated == 0:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})

        self.log_operation("attach_customer", booking_id=booking_id, customer_id=customer_id)
        return self._reload(booking_id)

    @BaseService.measure_operation("list_board")
    def list_board(self, first_day: date, last_day: Optional[date] = None) -> List[BoardEntry]:
        """Bookings intersecting the local days ``first_day..last_day``, ordered by start."""
        last_day = last_day or first_day
        if last_day < first_day:
            raise ValidationException("end date must not be before start date")
        if last_day - first_day >= timedelta(days=MAX_BOARD_DAYS):
            raise ValidationException(f"Date range is limited to {MAX_BOARD_DAYS} days")

        window_start, window_end = day_window(first_day, last_day, self.policy.tz)
        bookings = self.booking_repository.get_board_bookings(window_start, window_end)
        return [
            BoardEntry(
                booking=booking,
                court_name=booking.court.name if booking.court else None,
                customer_name=booking.customer.full_name if booking.customer else None,
                customer_phone=booking.customer.phone_e164 if booking.customer else None,
            )
            for booking in bookings
        ]

    # ------------------------------------------------------------------

    def _reload(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id, fresh=True)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    def _explain_status_refusal(
        self, booking: Booking, new_status: BookingStatus
    ) -> ConflictException:
        current = booking.status
        attended = {s.value for s in ATTENDANCE_STATUSES}

        if new_status is BookingStatus.CANCELLED:
            if current in attended:
                reason = InvalidStatusTransitionException(
                    "Attendance was already captured; the booking cannot be cancelled.",
                    current_status=current,
                    requested_status=new_status.value,
                )
            elif booking.is_paid:
                reason = ConflictException(
                    "Paid bookings cannot be cancelled.",
                    code="BOOKING_PAID",
                    details={"booking_id": booking.id},
                )
            else:
                reason = InvalidStatusTransitionException(
                    f"A {current} booking cannot be cancelled.",
                    current_status=current,
                    requested_status=new_status.value,
                )
        elif current != BookingStatus.CONFIRMED.value:
            reason = InvalidStatusTransitionException(
                f"Attendance can only be captured for confirmed bookings (current: {current}).",
                current_status=current,
                requested_status=new_status.value,
            )
        elif not booking.is_paid:
            reason = PaymentRequiredException(booking.id)
        else:
            reason = InvalidStatusTransitionException(
                "Status changed concurrently, reload and try again.",
                current_status=current,
                requested_status=new_status.value,
            )

        prometheus_metrics.inc_booking_conflict(reason.code)
        return reason
