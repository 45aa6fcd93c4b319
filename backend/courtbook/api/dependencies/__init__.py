# backend/courtbook/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_identity, require_identity, require_reception
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_status_service,
    get_clock,
    get_confirmation_service,
    get_customer_service,
    get_facility_policy,
    get_hold_service,
    get_notifier,
)

__all__ = [
    # Auth
    "get_identity",
    "require_identity",
    "require_reception",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_booking_status_service",
    "get_clock",
    "get_confirmation_service",
    "get_customer_service",
    "get_facility_policy",
    "get_hold_service",
    "get_notifier",
]
