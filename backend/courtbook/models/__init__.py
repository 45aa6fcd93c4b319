# backend/courtbook/models/__init__.py
"""
SQLAlchemy models for the court booking store.
"""

from .booking import Booking
from .court import Court
from .customer import Customer

__all__ = ["Booking", "Court", "Customer"]
