# backend/courtbook/services/confirmation_service.py
"""
Confirmation Workflow.

Turns a live web hold into a confirmed booking bound to a customer:

1. Re-validate the hold (web, HOLD, unexpired); expired holds are destroyed.
2. Resolve the customer by canonical phone, refreshing or creating it.
3. Flip HOLD -> CONFIRMED with a conditional update, so a racing second
   confirmation loses instead of applying twice.
4. Price the confirmed range.
5. Send the confirmation email after commit. Delivery is best effort and
   its outcome is reported, never raised.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from jinja2 import TemplateError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import HOLD_NOT_ACTIVE_MESSAGE
from ..core.exceptions import ConflictException, HoldNotActiveException, ValidationException
from ..core.facility import FacilityPolicy
from ..core.timezone_utils import format_local
from ..models.booking import Booking
from ..models.customer import Customer
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Identity
from .base import BaseService, Clock
from .customer_service import CustomerService, profile_values
from .email import Notifier
from .hold_service import HoldService
from .pricing import RateTable, compute_charge
from .template_service import TemplateService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailOutcome:
    status: str  # sent | failed | skipped
    recipient: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ConfirmationResult:
    booking: Booking
    customer: Customer
    total: Decimal
    email: EmailOutcome


class _HoldNoLongerConfirmable(Exception):
    """The conditional HOLD -> CONFIRMED update matched no row."""


def pick_recipient(identity: Optional[Identity], presented: Optional[str]) -> Optional[str]:
    """The authenticated email when valid, else the presented one when valid."""
    for candidate in (identity.email if identity else None, presented):
        if not candidate:
            continue
        try:
            return validate_email(candidate.strip(), check_deliverability=False).normalized
        except EmailNotValidError:
            continue
    return None


class ConfirmationService(BaseService):
    """Confirm web holds for guests and authenticated users."""

    def __init__(
        self,
        db: Session,
        policy: FacilityPolicy,
        rates: RateTable,
        notifier: Notifier,
        templates: Optional[TemplateService] = None,
        default_country_code: str = "52",
        now: Optional[Clock] = None,
    ):
        super().__init__(db, now)
        self.policy = policy
        self.rates = rates
        self.notifier = notifier
        self.templates = templates or TemplateService()
        self.holds = HoldService(db, policy, now=self._clock)
        self.customers = CustomerService(db, default_country_code, now=self._clock)
        self.booking_repository = self.holds.booking_repository

    @BaseService.measure_operation("confirm_hold")
    def confirm(
        self,
        hold_id: str,
        *,
        full_name: str,
        phone: str,
        email: Optional[str] = None,
        identity: Optional[Identity] = None,
    ) -> ConfirmationResult:
        """
        Confirm a hold for the presented customer.

        Profile fields of an authenticated identity override the presented
        name and phone, and the booking is bound to the identity's user id.

        Raises:
            ValidationException: missing name or invalid phone
            NotFoundException: unknown hold
            HoldExpiredException: hold expired (it no longer exists afterwards)
            HoldNotActiveException: hold already confirmed, cancelled, or not a web hold
        """
        name = ((identity.full_name if identity else None) or full_name or "").strip()
        if not name:
            raise ValidationException(
                "full_name is required", code="NAME_REQUIRED", details={"field": "full_name"}
            )
        phone_e164 = self.customers.canonical_phone((identity.phone if identity else None) or phone)
        recipient = pick_recipient(identity, email)
        user_id = identity.user_id if identity else None

        self.holds.require_live_web_hold(hold_id, self.now())

        try:
            with self.transaction():
                customer = self.customers.resolve_or_create(
                    full_name=name,
                    phone_e164=phone_e164,
                    email=recipient,
                    profile=profile_values(identity),
                )
                updated = self.booking_repository.confirm_web_hold(
                    hold_id, customer_id=customer.id, user_id=user_id, now=self.now()
                )
                if updated == 0:
                    raise _HoldNoLongerConfirmable(hold_id)
        except _HoldNoLongerConfirmable:
            # Expired or consumed in the meantime; report the precise reason
            self.holds.require_live_web_hold(hold_id, self.now())
            prometheus_metrics.inc_booking_conflict("HOLD_NOT_ACTIVE")
            raise HoldNotActiveException(HOLD_NOT_ACTIVE_MESSAGE, details={"hold_id": hold_id})
        except IntegrityError as e:
            # A concurrent confirmation created the same customer phone first
            self.logger.warning(f"Customer upsert raced for hold {hold_id}: {e.orig}")
            raise ConflictException(
                "Could not confirm right now, please try again.", code="CUSTOMER_CONFLICT"
            ) from e

        booking = self.booking_repository.get_by_id(hold_id, fresh=True)
        total = compute_charge(booking.start_at, booking.end_at, self.rates)

        self.log_operation(
            "confirm_hold",
            booking_id=hold_id,
            customer_id=customer.id,
            user_id=user_id,
            total=str(total),
        )

        outcome = self._send_confirmation_email(booking, customer, total, recipient)
        return ConfirmationResult(booking=booking, customer=customer, total=total, email=outcome)

    def _send_confirmation_email(
        self,
        booking: Booking,
        customer: Customer,
        total: Decimal,
        recipient: Optional[str],
    ) -> EmailOutcome:
        if not recipient:
            prometheus_metrics.inc_confirmation_email("skipped")
            return EmailOutcome(status="skipped")

        start = format_local(booking.start_at, self.policy.tz)
        end = format_local(booking.end_at, self.policy.tz)
        context = {
            "facility_name": self.policy.name,
            "full_name": customer.full_name,
            "court_name": booking.court.name if booking.court else booking.court_id,
            "date_local": start["date"],
            "start_time_local": start["time"],
            "end_time_local": end["time"],
            "tolerance_minutes": self.policy.arrival_tolerance_minutes,
            "total": total,
        }
        subject = f"Confirmación de reserva - {self.policy.name}"

        try:
            html = self.templates.render("email/booking_confirmation.html", context)
            text = self.templates.render("email/booking_confirmation.txt", context)
        except (TemplateError, OSError) as e:
            self.logger.warning(f"Confirmation email for {booking.id} could not be built: {e}")
            prometheus_metrics.inc_confirmation_email("failed")
            return EmailOutcome(status="failed", recipient=recipient, error=str(e))

        try:
            result = self.notifier.send(recipient, subject, html, text)
        except Exception as e:
            # The booking is already committed; delivery problems are only reported
            self.logger.warning(f"Notifier raised for booking {booking.id}: {e}")
            prometheus_metrics.inc_confirmation_email("failed")
            return EmailOutcome(
                status="failed", recipient=recipient, error=str(e) or type(e).__name__
            )

        if result.ok:
            prometheus_metrics.inc_confirmation_email("sent")
            return EmailOutcome(status="sent", recipient=recipient)

        self.logger.warning(f"Confirmation email for {booking.id} failed: {result.error}")
        prometheus_metrics.inc_confirmation_email("failed")
        return EmailOutcome(status="failed", recipient=recipient, error=result.error)
