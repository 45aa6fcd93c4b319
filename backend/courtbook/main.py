# backend/courtbook/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Response

from . import __version__
from .core.config import settings
from .core.constants import BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import availability, customers, health, holds, reception

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


logger = logging.getLogger(__name__)

API_TITLE = f"{BRAND_NAME} Reservations API"
API_DESCRIPTION = "Court availability, web holds, confirmations, and the reception board."


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(
        f"Environment: {settings.environment} "
        f"(offset={settings.facility_utc_offset}, hours={settings.open_hour}-{settings.close_hour})"
    )
    init_db()
    if not settings.email_enabled:
        logger.warning("RESEND_API_KEY is not set; confirmation emails will be skipped")
    yield
    logger.info(f"{BRAND_NAME} API shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )

    # Register unified problem-document handlers
    register_error_handlers(app)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(availability.router, prefix="/availability")
    api_v1.include_router(holds.router, prefix="/holds")
    api_v1.include_router(customers.router, prefix="/customers")
    api_v1.include_router(reception.router, prefix="/reception")
    api_v1.include_router(health.router)
    app.include_router(api_v1)

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    return app


app = create_app()
