# backend/courtbook/routes/v1/customers.py
"""
Customer routes - API v1

Endpoints:
    POST /customers/sync-profile - Push the caller's profile onto their customer record
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...api.dependencies import get_customer_service, require_identity
from ...core.exceptions import DomainException
from ...principal import Identity
from ...schemas.customer import CustomerResponse, ProfileSyncResponse
from ...services.customer_service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["customers-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("/sync-profile", response_model=ProfileSyncResponse)
async def sync_profile(
    response: Response,
    identity: Identity = Depends(require_identity),
    service: CustomerService = Depends(get_customer_service),
) -> ProfileSyncResponse:
    """
    Sync the authenticated profile to a customer.

    Returns 201 when a new customer was created, 200 when one was updated.
    """
    try:
        result = await asyncio.to_thread(service.sync_profile, identity)
        if result.action == "inserted":
            response.status_code = status.HTTP_201_CREATED
        return ProfileSyncResponse(
            action=result.action, customer=CustomerResponse.model_validate(result.customer)
        )
    except DomainException as e:
        handle_domain_exception(e)
