"""
Helpers for interpreting storage errors in a dialect-agnostic way.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from courtbook.core.constants import BOOKING_OVERLAP_CONSTRAINT


def violated_constraint_name(error: IntegrityError) -> str:
    """Return the constraint name PostgreSQL reports through ``diag``, if any."""
    orig = getattr(error, "orig", None)
    diag = getattr(orig, "diag", None)
    if diag is None:
        return ""
    return getattr(diag, "constraint_name", "") or ""


def is_overlap_violation(error: IntegrityError) -> bool:
    """
    Tell whether an IntegrityError came from the court range exclusion guard.

    PostgreSQL reports the constraint name through ``diag``; the SQLite
    triggers abort with a message that starts with the same name.
    """
    if violated_constraint_name(error).startswith(BOOKING_OVERLAP_CONSTRAINT):
        return True
    orig = getattr(error, "orig", None)
    return BOOKING_OVERLAP_CONSTRAINT in str(orig if orig is not None else error)
