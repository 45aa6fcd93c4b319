# backend/courtbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Settings are read here, at the edge; services receive plain values
(FacilityPolicy, RateTable, a Notifier, a clock) through their constructors.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.facility import FacilityPolicy
from ...core.timezone_utils import utc_now
from ...services.availability_service import AvailabilityService
from ...services.base import Clock
from ...services.booking_status_service import BookingStatusService
from ...services.confirmation_service import ConfirmationService
from ...services.customer_service import CustomerService
from ...services.email import Notifier, build_notifier
from ...services.hold_service import HoldService
from ...services.pricing import RateTable
from ...services.template_service import TemplateService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_facility_policy() -> FacilityPolicy:
    return FacilityPolicy.from_settings(settings)


@lru_cache(maxsize=1)
def get_rate_table() -> RateTable:
    return RateTable.from_settings(settings)


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    """Resend when an API key is configured (and not under test), otherwise a no-op notifier."""
    api_key = settings.resend_api_key.get_secret_value() if settings.resend_api_key else None
    if settings.is_testing:
        api_key = None
    notifier = build_notifier(api_key, settings.from_email, settings.facility_name)
    logger.info("Email notifier: %s", type(notifier).__name__)
    return notifier


@lru_cache(maxsize=1)
def get_template_service() -> TemplateService:
    return TemplateService()


def get_clock() -> Clock:
    return utc_now


def get_availability_service(
    db: Session = Depends(get_db),
    policy: FacilityPolicy = Depends(get_facility_policy),
    clock: Clock = Depends(get_clock),
) -> AvailabilityService:
    return AvailabilityService(db, policy, now=clock)


def get_hold_service(
    db: Session = Depends(get_db),
    policy: FacilityPolicy = Depends(get_facility_policy),
    clock: Clock = Depends(get_clock),
) -> HoldService:
    return HoldService(db, policy, now=clock)


def get_confirmation_service(
    db: Session = Depends(get_db),
    policy: FacilityPolicy = Depends(get_facility_policy),
    rates: RateTable = Depends(get_rate_table),
    notifier: Notifier = Depends(get_notifier),
    templates: TemplateService = Depends(get_template_service),
    clock: Clock = Depends(get_clock),
) -> ConfirmationService:
    """
    Get confirmation service instance with all dependencies.

    Returns:
        ConfirmationService wired with pricing, templates, and the notifier
    """
    return ConfirmationService(
        db,
        policy,
        rates,
        notifier,
        templates=templates,
        default_country_code=settings.default_phone_country_code,
        now=clock,
    )


def get_booking_status_service(
    db: Session = Depends(get_db),
    policy: FacilityPolicy = Depends(get_facility_policy),
    clock: Clock = Depends(get_clock),
) -> BookingStatusService:
    return BookingStatusService(db, policy, now=clock)


def get_customer_service(
    db: Session = Depends(get_db),
    rates: RateTable = Depends(get_rate_table),
    clock: Clock = Depends(get_clock),
) -> CustomerService:
    return CustomerService(db, settings.default_phone_country_code, now=clock, rates=rates)
