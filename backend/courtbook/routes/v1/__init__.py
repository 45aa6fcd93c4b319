# backend/courtbook/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import availability, customers, health, holds, reception

__all__ = [
    "availability",
    "customers",
    "health",
    "holds",
    "reception",
]
