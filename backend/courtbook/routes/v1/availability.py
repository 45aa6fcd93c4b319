# backend/courtbook/routes/v1/availability.py
"""
Availability routes - API v1

Endpoints:
    GET /availability?date=YYYY-MM-DD - Slot grid of every active court
"""

import asyncio
from datetime import date
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies import get_availability_service
from ...core.exceptions import DomainException
from ...schemas.availability import AvailabilityResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=AvailabilityResponse)
async def get_availability(
    day: date = Query(..., alias="date", description="Local date (YYYY-MM-DD)"),
    service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    """Slots for ``date`` with AVAILABLE / HOLD / TAKEN status and can-start flags."""
    try:
        result = await asyncio.to_thread(service.get_availability, day)
        return AvailabilityResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)
