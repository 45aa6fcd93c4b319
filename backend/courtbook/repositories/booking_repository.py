# backend/courtbook/repositories/booking_repository.py
"""
Booking Repository for the court reservation backend.

Every state change here is a single conditional statement: the expected
prior state is part of the WHERE clause and the caller inspects the number
of matched rows. Nothing reads a row, decides, and then writes it back.

Statements run with ``synchronize_session=False``; callers that need the
row afterwards must reload it with ``get_by_id(..., fresh=True)``.
"""

from datetime import datetime
from decimal import Decimal
import logging
from typing import List, NamedTuple, Optional

from sqlalchemy import and_, delete, func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import (
    EXCLUSION_STATUSES,
    PAYABLE_STATUSES,
    BookingSource,
    BookingStatus,
    CancelledBy,
    PaymentMethod,
    PaymentStatus,
)
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CustomerBookingTotals(NamedTuple):
    bookings: int
    paid: Decimal
    last_start_at: Optional[datetime]


_WEB_HOLD = and_(
    Booking.status == BookingStatus.HOLD.value,
    Booking.source == BookingSource.WEB.value,
)


def _unexpired(now: datetime):
    # A hold without an expiry never lapses
    return or_(Booking.hold_expires_at.is_(None), Booking.hold_expires_at > now)


def _values(statuses) -> List[str]:
    return [s.value for s in statuses]


class BookingRepository(BaseRepository[Booking]):
    """Data access for bookings, holds, and their conditional transitions."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    # ------------------------------------------------------------------
    # Holds
    # ------------------------------------------------------------------

    def sweep_expired_web_holds(self, now: datetime) -> int:
        """Delete every web hold whose expiry has passed. Returns rows removed."""
        stmt = (
            delete(Booking)
            .where(_WEB_HOLD, Booking.hold_expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    def extend_web_hold(
        self, hold_id: str, *, new_end: datetime, new_expiry: datetime, now: datetime
    ) -> int:
        """Move the end of a live web hold and refresh its expiry."""
        stmt = (
            update(Booking)
            .where(
                Booking.id == hold_id,
                _WEB_HOLD,
                _unexpired(now),
                Booking.start_at < new_end,
            )
            .values(end_at=new_end, hold_expires_at=new_expiry)
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    def delete_web_hold(self, hold_id: str) -> int:
        """Delete a booking only while it is still a web hold."""
        stmt = (
            delete(Booking)
            .where(Booking.id == hold_id, _WEB_HOLD)
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    def delete_expired_web_hold(self, hold_id: str, now: datetime) -> int:
        """Delete one web hold if, and only if, it has expired."""
        stmt = (
            delete(Booking)
            .where(Booking.id == hold_id, _WEB_HOLD, Booking.hold_expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    def confirm_web_hold(
        self,
        hold_id: str,
        *,
        customer_id: str,
        user_id: Optional[str],
        now: datetime,
    ) -> int:
        """HOLD -> CONFIRMED for an unexpired web hold; binds the customer and user."""
        stmt = (
            update(Booking)
            .where(Booking.id == hold_id, _WEB_HOLD, _unexpired(now))
            .values(
                status=BookingStatus.CONFIRMED.value,
                customer_id=customer_id,
                user_id=user_id,
                hold_expires_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    # ------------------------------------------------------------------
    # Status and payment
    # ------------------------------------------------------------------

    def cancel_unpaid(self, booking_id: str, cancelled_by: CancelledBy) -> int:
        """Cancel a hold or confirmed booking that has not been paid."""
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status.in_(
                    [BookingStatus.HOLD.value, BookingStatus.CONFIRMED.value]
                ),
                Booking.payment_status == PaymentStatus.UNPAID.value,
            )
            .values(
                status=BookingStatus.CANCELLED.value,
                cancelled_by=cancelled_by.value,
                hold_expires_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    def record_attendance(self, booking_id: str, new_status: BookingStatus) -> int:
        """CONFIRMED -> COMPLETED / NO_SHOW, only once the booking is paid."""
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status == BookingStatus.CONFIRMED.value,
                Booking.payment_status == PaymentStatus.PAID.value,
            )
            .values(status=new_status.value, cancelled_by=None)
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    def mark_paid(
        self,
        booking_id: str,
        *,
        amount: Decimal,
        method: PaymentMethod,
        paid_at: datetime,
    ) -> int:
        """UNPAID -> PAID for confirmed or completed bookings, exactly once."""
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status.in_(_values(PAYABLE_STATUSES)),
                Booking.payment_status == PaymentStatus.UNPAID.value,
            )
            .values(
                payment_status=PaymentStatus.PAID.value,
                paid_amount=amount,
                payment_method=method.value,
                paid_at=paid_at,
            )
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    def attach_customer(self, booking_id: str, customer_id: str) -> int:
        stmt = (
            update(Booking)
            .where(Booking.id == booking_id)
            .values(customer_id=customer_id)
            .execution_options(synchronize_session=False)
        )
        return self._execute_rowcount(stmt)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_blocking_in_window(
        self, window_start: datetime, window_end: datetime
    ) -> List[Booking]:
        """
        Bookings in a blocking status whose range intersects the window.

        Expired holds are returned too; callers classify them against their clock.
        """
        query = (
            self._build_query()
            .filter(
                Booking.status.in_(_values(EXCLUSION_STATUSES)),
                Booking.start_at < window_end,
                Booking.end_at > window_start,
            )
            .order_by(Booking.court_id, Booking.start_at)
        )
        return self._execute_query(query)

    def get_board_bookings(self, window_start: datetime, window_end: datetime) -> List[Booking]:
        """
        Reception board rows for a window, ordered by start.

        Cancelled bookings are shown only when reception cancelled them.
        """
        query = (
            self._build_query()
            .filter(
                Booking.start_at < window_end,
                Booking.end_at > window_start,
                or_(
                    Booking.status != BookingStatus.CANCELLED.value,
                    Booking.cancelled_by == CancelledBy.RECEPTION.value,
                ),
            )
            .order_by(Booking.start_at, Booking.court_id)
        )
        return self._execute_query(query)

    def latest_customer_id_for_user(self, user_id: str) -> Optional[str]:
        """Customer bound to the user's most recent booking, if any."""
        try:
            row = (
                self.db.query(Booking.customer_id)
                .filter(Booking.user_id == user_id, Booking.customer_id.isnot(None))
                .order_by(Booking.created_at.desc())
                .first()
            )
            return row[0] if row else None
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading latest customer for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load latest customer: {str(e)}")

    def get_customer_history(self, customer_id: str, *, limit: int, offset: int) -> List[Booking]:
        """A customer's bookings, most recent start first."""
        query = (
            self._build_query()
            .filter(Booking.customer_id == customer_id)
            .order_by(Booking.start_at.desc(), Booking.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return self._execute_query(query)

    def get_customer_totals(self, customer_id: str) -> CustomerBookingTotals:
        """Booking count, amount paid, and latest start across all of a customer's bookings."""
        try:
            bookings, last_start_at = (
                self.db.query(func.count(Booking.id), func.max(Booking.start_at))
                .filter(Booking.customer_id == customer_id)
                .one()
            )
            paid = (
                self.db.query(func.coalesce(func.sum(Booking.paid_amount), 0))
                .filter(
                    Booking.customer_id == customer_id,
                    Booking.payment_status == PaymentStatus.PAID.value,
                )
                .scalar()
            )
            return CustomerBookingTotals(
                bookings=int(bookings or 0),
                paid=Decimal(str(paid or 0)),
                last_start_at=last_start_at,
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading totals for customer {customer_id}: {str(e)}")
            raise RepositoryException(f"Failed to load customer totals: {str(e)}")
