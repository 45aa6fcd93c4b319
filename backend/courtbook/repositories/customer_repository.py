# backend/courtbook/repositories/customer_repository.py
"""
Customer Repository.

Customers are looked up by canonical phone; reception searches by name or
phone fragment.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.customer import Customer
from .base_repository import BaseRepository


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CustomerRepository(BaseRepository[Customer]):
    def __init__(self, db: Session):
        super().__init__(db, Customer)

    def get_by_phone(self, phone_e164: str) -> Optional[Customer]:
        return self.find_one_by(phone_e164=phone_e164)

    def search_by_phone(self, phone_e164: str, limit: int) -> List[Customer]:
        query = (
            self._build_query()
            .filter(Customer.phone_e164 == phone_e164)
            .order_by(Customer.created_at.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def search_by_name(self, term: str, limit: int) -> List[Customer]:
        """Case-insensitive substring match on full name, newest first."""
        pattern = f"%{_escape_like(term)}%"
        query = (
            self._build_query()
            .filter(Customer.full_name.ilike(pattern, escape="\\"))
            .order_by(Customer.created_at.desc())
            .limit(limit)
        )
        return self._execute_query(query)
