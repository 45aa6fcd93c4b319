# backend/courtbook/routes/v1/holds.py
"""
Web hold routes - API v1

Endpoints:
    POST /holds - Place a hold on a court range
    PATCH /holds/{hold_id} - Change the end of a hold and refresh its expiry
    DELETE /holds/{hold_id} - Release a hold (idempotent)
    POST /holds/{hold_id}/confirm - Confirm a hold for a customer
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, status

from ...api.dependencies import get_confirmation_service, get_hold_service, get_identity
from ...core.exceptions import DomainException
from ...principal import Identity
from ...schemas.booking import (
    BookingResponse,
    ConfirmHoldRequest,
    ConfirmHoldResponse,
    HoldCreateRequest,
    HoldExtendRequest,
    HoldReleaseResponse,
)
from ...services.confirmation_service import ConfirmationService
from ...services.hold_service import HoldService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["holds-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_hold(
    payload: HoldCreateRequest = Body(...),
    service: HoldService = Depends(get_hold_service),
) -> BookingResponse:
    """
    Hold a court range for a few minutes.

    409 ``SLOT_UNAVAILABLE`` means someone else just took the range.
    """
    try:
        hold = await asyncio.to_thread(
            service.create_hold,
            payload.court_id,
            payload.start_at,
            payload.end_at,
            payload.source,
        )
        return BookingResponse.model_validate(hold)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{hold_id}", response_model=BookingResponse)
async def extend_hold(
    hold_id: str = Path(..., description="Hold id"),
    payload: HoldExtendRequest = Body(...),
    service: HoldService = Depends(get_hold_service),
) -> BookingResponse:
    try:
        hold = await asyncio.to_thread(service.extend_hold, hold_id, payload.end_at)
        return BookingResponse.model_validate(hold)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{hold_id}", response_model=HoldReleaseResponse)
async def release_hold(
    hold_id: str = Path(..., description="Hold id"),
    service: HoldService = Depends(get_hold_service),
) -> HoldReleaseResponse:
    """Release a hold. Releasing an expired or missing hold is not an error."""
    try:
        released = await asyncio.to_thread(service.release_hold, hold_id)
        return HoldReleaseResponse(released=released)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{hold_id}/confirm", response_model=ConfirmHoldResponse)
async def confirm_hold(
    hold_id: str = Path(..., description="Hold id"),
    payload: ConfirmHoldRequest = Body(...),
    identity: Optional[Identity] = Depends(get_identity),
    service: ConfirmationService = Depends(get_confirmation_service),
) -> ConfirmHoldResponse:
    """
    Confirm a hold for a guest or an authenticated user.

    The email outcome is reported in the response; a failed delivery does
    not undo the confirmation.
    """
    try:
        result = await asyncio.to_thread(
            service.confirm,
            hold_id,
            full_name=payload.full_name,
            phone=payload.phone,
            email=payload.email,
            identity=identity,
        )
        return ConfirmHoldResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)
