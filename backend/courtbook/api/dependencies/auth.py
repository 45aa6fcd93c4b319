# backend/courtbook/api/dependencies/auth.py
"""
Identity dependencies.

Authentication happens upstream: the auth proxy forwards the verified user
as ``X-User-*`` headers. Requests without ``X-User-Id`` are guests.
"""

from datetime import date
import logging
from typing import Optional

from fastapi import Depends, Header

from ...core.exceptions import ForbiddenException, UnauthorizedException, ValidationException
from ...principal import Identity

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_birthday(value: Optional[str]) -> Optional[date]:
    value = _clean(value)
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationException(
            "X-User-Birthday must be a YYYY-MM-DD date", details={"header": "X-User-Birthday"}
        )


def get_identity(
    user_id: Optional[str] = Header(None, alias="X-User-Id"),
    email: Optional[str] = Header(None, alias="X-User-Email"),
    full_name: Optional[str] = Header(None, alias="X-User-Name"),
    phone: Optional[str] = Header(None, alias="X-User-Phone"),
    birthday: Optional[str] = Header(None, alias="X-User-Birthday"),
    notes: Optional[str] = Header(None, alias="X-User-Notes"),
    sex: Optional[str] = Header(None, alias="X-User-Sex"),
    division: Optional[str] = Header(None, alias="X-User-Division"),
    role: Optional[str] = Header(None, alias="X-User-Role"),
) -> Optional[Identity]:
    """Identity of the caller, or None for guests."""
    user_id = _clean(user_id)
    if user_id is None:
        return None
    return Identity(
        user_id=user_id,
        email=_clean(email),
        full_name=_clean(full_name),
        phone=_clean(phone),
        birthday=_parse_birthday(birthday),
        notes=_clean(notes),
        sex=_clean(sex),
        division=_clean(division),
        role=_clean(role),
    )


def require_identity(identity: Optional[Identity] = Depends(get_identity)) -> Identity:
    if identity is None:
        raise UnauthorizedException("Authentication required", code="NOT_AUTHENTICATED")
    return identity


def require_reception(identity: Identity = Depends(require_identity)) -> Identity:
    """Only owner and reception roles may operate the booking board."""
    if not identity.is_staff:
        logger.info("Reception access denied for user %s (role=%s)", identity.user_id, identity.role)
        raise ForbiddenException("Reception access required", code="FORBIDDEN")
    return identity
