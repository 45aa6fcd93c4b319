# backend/courtbook/repositories/court_repository.py
"""Read access to court reference data."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.court import Court
from .base_repository import BaseRepository


class CourtRepository(BaseRepository[Court]):
    def __init__(self, db: Session):
        super().__init__(db, Court)

    def list_active(self) -> List[Court]:
        """Active courts ordered by display name."""
        query = self._build_query().filter(Court.is_active.is_(True)).order_by(Court.name)
        return self._execute_query(query)

    def get_active(self, court_id: str) -> Optional[Court]:
        court = self.get_by_id(court_id)
        if court is None or not court.is_active:
            return None
        return court
