# backend/courtbook/services/hold_service.py
"""
Hold Manager.

Holds are soft locks with a TTL: a web visitor claims a court range for a
few minutes while choosing a duration and filling in their details.
Exclusivity is delegated to the storage layer: the range exclusion guard
rejects overlapping inserts/updates, and every transition is a conditional
statement. Expired web holds are removed lazily, right before a new claim.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import HOLD_EXPIRED_MESSAGE, HOLD_NOT_ACTIVE_MESSAGE, SLOT_TAKEN_MESSAGE
from ..core.enums import BookingKind, BookingSource, BookingStatus
from ..core.exceptions import (
    ConflictException,
    HoldExpiredException,
    HoldNotActiveException,
    NotFoundException,
    ServiceException,
    SlotUnavailableException,
    ValidationException,
)
from ..core.facility import FacilityPolicy
from ..core.timezone_utils import ensure_aware
from ..database.session_utils import is_overlap_violation
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


class HoldService(BaseService):
    """Create, extend, and release short-lived web holds."""

    def __init__(self, db: Session, policy: FacilityPolicy, now: Optional[Clock] = None):
        super().__init__(db, now)
        self.policy = policy
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.court_repository = RepositoryFactory.create_court_repository(db)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_hold")
    def create_hold(
        self,
        court_id: str,
        start_at: datetime,
        end_at: datetime,
        source: BookingSource = BookingSource.WEB,
    ) -> Booking:
        """
        Claim ``[start_at, end_at)`` on a court for ``hold_ttl`` minutes.

        Raises:
            ValidationException: end is not after start
            NotFoundException: unknown or inactive court
            SlotUnavailableException: the range overlaps an active booking
        """
        start_at = ensure_aware(start_at, self.policy.tz)
        end_at = ensure_aware(end_at, self.policy.tz)
        if end_at <= start_at:
            raise ValidationException(
                "end_at must be after start_at", code="INVALID_RANGE", details={"field": "end_at"}
            )

        if self.court_repository.get_active(court_id) is None:
            raise NotFoundException("Court not found", details={"court_id": court_id})

        now = self.now()
        self.sweep_expired_holds(now)

        try:
            with self.transaction():
                hold = self.booking_repository.create(
                    court_id=court_id,
                    start_at=start_at,
                    end_at=end_at,
                    status=BookingStatus.HOLD.value,
                    source=source.value,
                    kind=BookingKind.STANDARD.value,
                    hold_expires_at=now + self.policy.hold_ttl,
                )
        except IntegrityError as e:
            raise self._integrity_to_domain(e, court_id, start_at, end_at) from e

        self.log_operation(
            "create_hold", booking_id=hold.id, court_id=court_id, start_at=start_at.isoformat()
        )
        return hold

    @BaseService.measure_operation("extend_hold")
    def extend_hold(self, hold_id: str, new_end: datetime) -> Booking:
        """
        Move the end of a live web hold and restart its TTL.

        Raises:
            NotFoundException: no such booking
            HoldNotActiveException: booking is not a web hold anymore
            HoldExpiredException: hold expired (it is discarded)
            ValidationException: new end is not after the hold start
            SlotUnavailableException: the longer range collides with another booking
        """
        new_end = ensure_aware(new_end, self.policy.tz)
        now = self.now()

        hold = self.require_live_web_hold(hold_id, now)
        if new_end <= hold.start_at:
            raise ValidationException(
                "end_at must be after start_at", code="INVALID_RANGE", details={"field": "end_at"}
            )
        court_id, start_at = hold.court_id, hold.start_at

        self.sweep_expired_holds(now)

        try:
            with self.transaction():
                updated = self.booking_repository.extend_web_hold(
                    hold_id,
                    new_end=new_end,
                    new_expiry=now + self.policy.hold_ttl,
                    now=now,
                )
        except IntegrityError as e:
            raise self._integrity_to_domain(e, court_id, start_at, new_end) from e

        if updated == 0:
            # Lost a race between the check above and the update
            self.require_live_web_hold(hold_id, now)
            raise ConflictException("Hold could not be extended", code="HOLD_CONFLICT")

        self.log_operation("extend_hold", booking_id=hold_id, end_at=new_end.isoformat())
        return self.booking_repository.get_by_id(hold_id, fresh=True)

    @BaseService.measure_operation("release_hold")
    def release_hold(self, hold_id: str) -> bool:
        """
        Delete a web hold. Releasing a hold that is already gone is not an error.

        Returns:
            True if a row was deleted
        """
        with self.transaction():
            released = self.booking_repository.delete_web_hold(hold_id) > 0

        self.log_operation("release_hold", booking_id=hold_id, released=released)
        return released

    # ------------------------------------------------------------------
    # Shared guards
    # ------------------------------------------------------------------

    def sweep_expired_holds(self, now: datetime) -> int:
        """Remove expired web holds so they stop blocking the exclusion guard."""
        with self.transaction():
            swept = self.booking_repository.sweep_expired_web_holds(now)
        if swept:
            self.logger.info(f"Swept {swept} expired web hold(s)")
            prometheus_metrics.inc_expired_holds_swept(swept)
        return swept

    def require_live_web_hold(self, hold_id: str, now: datetime) -> Booking:
        """
        Reload a booking and insist it is an unexpired web hold.

        An expired hold is deleted before HoldExpiredException is raised, so it
        can never be reused.
        """
        booking = self.booking_repository.get_by_id(hold_id, fresh=True)
        if booking is None:
            raise NotFoundException("Hold not found", details={"hold_id": hold_id})

        if not booking.is_hold or booking.source != BookingSource.WEB.value:
            prometheus_metrics.inc_booking_conflict("HOLD_NOT_ACTIVE")
            raise HoldNotActiveException(
                HOLD_NOT_ACTIVE_MESSAGE,
                details={"hold_id": hold_id, "status": booking.status, "source": booking.source},
            )

        if booking.hold_expires_at is not None and booking.hold_expires_at <= now:
            self.discard_expired_hold(hold_id, now)
            prometheus_metrics.inc_booking_conflict("HOLD_EXPIRED")
            raise HoldExpiredException(HOLD_EXPIRED_MESSAGE, details={"hold_id": hold_id})

        return booking

    def discard_expired_hold(self, hold_id: str, now: datetime) -> None:
        with self.transaction():
            removed = self.booking_repository.delete_expired_web_hold(hold_id, now)
        if removed:
            self.logger.info(f"Discarded expired hold {hold_id}")

    def _integrity_to_domain(
        self, error: IntegrityError, court_id: str, start_at: datetime, end_at: datetime
    ) -> Exception:
        if is_overlap_violation(error):
            prometheus_metrics.inc_booking_conflict("SLOT_UNAVAILABLE")
            self.logger.info(
                f"Range {start_at.isoformat()}-{end_at.isoformat()} on court {court_id} "
                "is already taken"
            )
            return SlotUnavailableException(
                SLOT_TAKEN_MESSAGE,
                details={
                    "court_id": court_id,
                    "start_at": start_at.isoformat(),
                    "end_at": end_at.isoformat(),
                },
            )
        self.logger.error(f"Unexpected integrity error for court {court_id}: {error.orig}")
        return ServiceException("Could not save the hold")
