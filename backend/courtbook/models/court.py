# backend/courtbook/models/court.py
"""Court reference data. Owned by facility configuration; the core only reads it."""

from sqlalchemy import Boolean, Column, String
import ulid

from ..database import Base
from .types import TimestampMixin


class Court(Base, TimestampMixin):
    __tablename__ = "courts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Court {self.id}: {self.name} active={self.is_active}>"
