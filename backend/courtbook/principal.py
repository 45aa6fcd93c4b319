"""Identity of the caller, as asserted by the upstream auth proxy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .core.constants import RECEPTION_ROLES


@dataclass(frozen=True)
class Identity:
    """Authenticated user plus the profile fields usable during confirmation."""

    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    birthday: Optional[date] = None
    notes: Optional[str] = None
    sex: Optional[str] = None
    division: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return (self.role or "").lower() in RECEPTION_ROLES
