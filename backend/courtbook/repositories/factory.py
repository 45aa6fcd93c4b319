# backend/courtbook/repositories/factory.py
"""
Repository Factory for the court reservation backend.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .court_repository import CourtRepository
    from .customer_repository import CustomerRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_court_repository(db: Session) -> "CourtRepository":
        """Create repository for court reference data."""
        from .court_repository import CourtRepository

        return CourtRepository(db)

    @staticmethod
    def create_customer_repository(db: Session) -> "CustomerRepository":
        """Create repository for customer records."""
        from .customer_repository import CustomerRepository

        return CustomerRepository(db)
