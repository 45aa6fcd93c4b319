# backend/courtbook/services/customer_service.py
"""
Customer Service.

Customers are keyed by canonical phone. They are resolved (found and
refreshed, or created) during confirmation, synced from an authenticated
user's profile, and managed by reception: search, registration, notes, and
a detail view with priced booking history.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import (
    CUSTOMER_HISTORY_MAX_LIMIT,
    CUSTOMER_HISTORY_MAX_OFFSET,
    CUSTOMER_SEARCH_LIMIT,
    MIN_CUSTOMER_QUERY_LENGTH,
    MIN_PHONE_QUERY_DIGITS,
)
from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    ServiceException,
    ValidationException,
)
from ..models.booking import Booking
from ..models.customer import Customer
from ..principal import Identity
from ..repositories.factory import RepositoryFactory
from ..utils.phone import digits_only, normalize_phone, require_e164
from .base import BaseService, Clock
from .pricing import RateTable, compute_charge

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("birthday", "player_notes", "sex", "division")
RECEPTION_NOTE_FIELDS = ("notes", "birthday", "player_notes")


@dataclass(frozen=True)
class ProfileSyncResult:
    action: str  # updated_by_booking | updated_by_phone | inserted
    customer: Customer


@dataclass(frozen=True)
class CustomerHistoryEntry:
    booking: Booking
    court_name: Optional[str]
    expected_amount: Decimal


@dataclass(frozen=True)
class CustomerDetail:
    """A customer with one page of booking history and lifetime totals."""

    customer: Customer
    history: List[CustomerHistoryEntry]
    total_visits: int
    total_paid: Decimal
    last_visit_at: Optional[datetime]
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.history) < self.total_visits


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def profile_values(identity: Optional[Identity]) -> dict:
    """Customer profile columns carried by an identity."""
    if identity is None:
        return {}
    return {
        "birthday": identity.birthday,
        "player_notes": identity.notes,
        "sex": identity.sex,
        "division": identity.division,
    }


class CustomerService(BaseService):
    """Lookup, resolution, and profile sync of customers."""

    def __init__(
        self,
        db: Session,
        default_country_code: str = "52",
        now: Optional[Clock] = None,
        rates: Optional[RateTable] = None,
    ):
        super().__init__(db, now)
        self.default_country_code = default_country_code
        self.rates = rates
        self.customer_repository = RepositoryFactory.create_customer_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    def canonical_phone(self, raw: Optional[str]) -> str:
        return require_e164(raw, self.default_country_code)

    def resolve_or_create(
        self,
        *,
        full_name: str,
        phone_e164: str,
        email: Optional[str] = None,
        profile: Optional[dict] = None,
    ) -> Customer:
        """
        Find the customer by canonical phone and refresh it, or insert a new one.

        Runs inside the caller's transaction. Last write wins: the name always
        replaces the stored one, email only when given, and profile columns
        only when a profile is supplied.
        """
        changes = {"full_name": full_name}
        if email:
            changes["email"] = email
        if profile:
            changes.update({key: profile.get(key) for key in PROFILE_FIELDS})

        customer = self.customer_repository.get_by_phone(phone_e164)
        if customer is not None:
            return self.customer_repository.update(customer, **changes)

        return self.customer_repository.create(phone_e164=phone_e164, is_active=True, **changes)

    @BaseService.measure_operation("search_customers")
    def search(self, query: str) -> List[Customer]:
        """
        Reception search: phone-like queries match the canonical phone exactly,
        anything else is a case-insensitive substring match on the name.
        """
        term = (query or "").strip()
        if len(term) < MIN_CUSTOMER_QUERY_LENGTH:
            return []

        if len(digits_only(term)) >= MIN_PHONE_QUERY_DIGITS:
            phone = normalize_phone(term, self.default_country_code)
            if phone is not None:
                return self.customer_repository.search_by_phone(phone, CUSTOMER_SEARCH_LIMIT)

        return self.customer_repository.search_by_name(term, CUSTOMER_SEARCH_LIMIT)

    @BaseService.measure_operation("sync_profile")
    def sync_profile(self, identity: Identity) -> ProfileSyncResult:
        """
        Push an authenticated user's profile onto their customer record.

        The customer of the user's latest booking wins, then the customer with
        the profile phone; otherwise a new customer is created.
        """
        full_name = (identity.full_name or "").strip()
        if not full_name:
            raise ValidationException(
                "Your profile needs a name.", code="PROFILE_NAME_REQUIRED", details={"field": "full_name"}
            )

        raw_phone = (identity.phone or "").strip()
        phone_e164 = self.canonical_phone(raw_phone) if raw_phone else None
        changes = {"full_name": full_name, **profile_values(identity)}

        try:
            with self.transaction():
                customer_id = self.booking_repository.latest_customer_id_for_user(identity.user_id)
                customer = (
                    self.customer_repository.get_by_id(customer_id) if customer_id else None
                )
                if customer is not None:
                    action = "updated_by_booking"
                    self.customer_repository.update(customer, **changes)
                elif phone_e164 is None:
                    raise ValidationException(
                        "No booking is linked to this user and the profile has no phone.",
                        code="PROFILE_PHONE_REQUIRED",
                        details={"field": "phone"},
                    )
                else:
                    customer = self.customer_repository.get_by_phone(phone_e164)
                    if customer is not None:
                        action = "updated_by_phone"
                        self.customer_repository.update(customer, **changes)
                    else:
                        action = "inserted"
                        customer = self.customer_repository.create(
                            phone_e164=phone_e164, is_active=True, **changes
                        )
        except IntegrityError as e:
            # Another request created the same phone first
            raise ConflictException(
                "Customer was modified concurrently, please retry.", code="CUSTOMER_CONFLICT"
            ) from e

        self.log_operation("sync_profile", user_id=identity.user_id, action=action)
        return ProfileSyncResult(action=action, customer=customer)

    # ------------------------------------------------------------------
    # Reception customer management
    # ------------------------------------------------------------------

    @BaseService.measure_operation("register_customer")
    def register_customer(
        self,
        *,
        full_name: str,
        phone: str,
        email: Optional[str] = None,
        notes: Optional[str] = None,
        birthday: Optional[date] = None,
        player_notes: Optional[str] = None,
    ) -> Tuple[Customer, bool]:
        """
        Create a customer at reception, or reuse the one with the same phone.

        A reused customer only gets its name refreshed; the other fields are
        taken on creation.

        Returns:
            The customer and whether it was created
        """
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationException(
                "full_name is required", code="NAME_REQUIRED", details={"field": "full_name"}
            )
        phone_e164 = self.canonical_phone(phone)

        try:
            with self.transaction():
                customer = self.customer_repository.get_by_phone(phone_e164)
                if customer is not None:
                    if customer.full_name != full_name:
                        self.customer_repository.update(customer, full_name=full_name)
                    created = False
                else:
                    customer = self.customer_repository.create(
                        full_name=full_name,
                        phone_e164=phone_e164,
                        email=email or None,
                        notes=_blank_to_none(notes),
                        birthday=birthday,
                        player_notes=_blank_to_none(player_notes),
                        is_active=True,
                    )
                    created = True
        except IntegrityError as e:
            raise ConflictException(
                "Customer was modified concurrently, please retry.", code="CUSTOMER_CONFLICT"
            ) from e

        self.log_operation("register_customer", customer_id=customer.id, created=created)
        return customer, created

    @BaseService.measure_operation("get_customer_detail")
    def get_detail(
        self,
        customer_id: str,
        limit: int = CUSTOMER_HISTORY_MAX_LIMIT,
        offset: int = 0,
    ) -> CustomerDetail:
        """
        A customer with a page of bookings (latest start first) and totals.

        ``limit`` is clamped to 1..200 and ``offset`` to 0..5000. Every history
        row carries the tariff price of its range.
        """
        customer = self.customer_repository.get_by_id(customer_id)
        if customer is None:
            raise NotFoundException("Customer not found", details={"customer_id": customer_id})
        if self.rates is None:
            raise ServiceException("No tariff configured for booking history")

        limit = _clamp(limit, 1, CUSTOMER_HISTORY_MAX_LIMIT)
        offset = _clamp(offset, 0, CUSTOMER_HISTORY_MAX_OFFSET)

        bookings = self.booking_repository.get_customer_history(
            customer_id, limit=limit, offset=offset
        )
        totals = self.booking_repository.get_customer_totals(customer_id)
        history = [
            CustomerHistoryEntry(
                booking=booking,
                court_name=booking.court.name if booking.court else None,
                expected_amount=compute_charge(booking.start_at, booking.end_at, self.rates),
            )
            for booking in bookings
        ]
        return CustomerDetail(
            customer=customer,
            history=history,
            total_visits=totals.bookings,
            total_paid=totals.paid,
            last_visit_at=totals.last_start_at,
            limit=limit,
            offset=offset,
        )

    @BaseService.measure_operation("update_customer_notes")
    def update_notes(self, customer_id: str, changes: Dict[str, Any]) -> Customer:
        """
        Patch reception notes, birthday, and player notes.

        Only the keys present in ``changes`` are touched; blank notes clear the
        stored value.

        Raises:
            ValidationException: nothing to update
            NotFoundException: unknown customer
        """
        patch = {key: changes[key] for key in RECEPTION_NOTE_FIELDS if key in changes}
        if not patch:
            raise ValidationException("Nothing to update", code="NOTHING_TO_UPDATE")
        for key in ("notes", "player_notes"):
            if key in patch:
                patch[key] = _blank_to_none(patch[key])

        with self.transaction():
            customer = self.customer_repository.get_by_id(customer_id)
            if customer is None:
                raise NotFoundException("Customer not found", details={"customer_id": customer_id})
            self.customer_repository.update(customer, **patch)

        self.log_operation("update_customer_notes", customer_id=customer_id, fields=sorted(patch))
        return customer


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None
