# backend/courtbook/models/customer.py
"""
Customer model.

Customers are keyed by their canonical (E.164) phone number. They are created
or refreshed when a hold is confirmed and are never deleted by the core.
"""

from sqlalchemy import Boolean, Column, Date, String, Text
import ulid

from ..database import Base
from .types import TimestampMixin


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    full_name = Column(String(200), nullable=False)
    phone_e164 = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)

    # Reception notes about the customer
    notes = Column(Text, nullable=True)

    # Optional player profile
    birthday = Column(Date, nullable=True)
    player_notes = Column(Text, nullable=True)
    sex = Column(String(20), nullable=True)
    division = Column(String(50), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Customer {self.id}: {self.full_name} {self.phone_e164}>"
