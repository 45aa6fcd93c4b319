# backend/courtbook/repositories/__init__.py
"""
Repository layer: data access for bookings, courts, and customers.
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .court_repository import CourtRepository
from .customer_repository import CustomerRepository
from .factory import RepositoryFactory

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "CourtRepository",
    "CustomerRepository",
    "RepositoryFactory",
]
