"""FastAPI application setup and configuration."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cinema_booking_platform.config import Settings, get_settings, settings as app_settings
from cinema_booking_platform.api import api_router
from cinema_booking_platform.clients.catalog_client import CatalogClient
from cinema_booking_platform.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from cinema_booking_platform.services.booking_session_service import BookingSessionService
from cinema_booking_platform.services.session_store import SessionStore
from cinema_booking_platform.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info(f"Starting Cinema Booking Platform against {app.state.catalog_client.base_url}")
    yield
    logger.info("Shutting down Cinema Booking Platform")
    await app.state.catalog_client.close()
    logger.info("Catalog client closed")


def create_app(
    settings: Optional[Settings] = None,
    catalog_client: Optional[CatalogClient] = None,
    session_store: Optional[SessionStore] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use instead of the environment
        catalog_client: Client for the remote catalog service
        session_store: Registry for booking sessions
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Cinema Booking Platform API",
        description="""
    ## Cinema Booking Platform

    Seat selection and reservation workflow for movie showtimes.

    ### Flow

    1. Start a session for a movie (`POST /api/v1/sessions`)
    2. Pick a date, then a show time
    3. Toggle seats on the seat map
    4. Proceed to checkout and submit your details
    5. Fetch the confirmation and its scannable ticket code
    """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "catalog", "description": "Movies and theatres now showing"},
            {"name": "sessions", "description": "Seat selection and reservation workflow"},
            {"name": "health", "description": "System health endpoints"},
        ],
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.catalog_client = catalog_client or CatalogClient(
        base_url=settings.catalog_base_url,
        timeout=settings.catalog_timeout_seconds,
        cache_ttl_seconds=settings.catalog_cache_ttl_seconds,
    )
    app.state.session_service = BookingSessionService(
        app.state.catalog_client,
        session_store or SessionStore(
            ttl_seconds=settings.session_ttl_minutes * 60,
            max_sessions=settings.max_sessions,
        ),
        settings=settings,
    )

    # Last added runs first: logging wraps error handling so error responses carry request ids.
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.debug)
    if settings.enable_request_logging:
        app.add_middleware(LoggingMiddleware)

    if settings.debug:
        cors_origins = ["*"]
        cors_allow_credentials = False
    else:
        cors_origins = settings.cors_origins
        cors_allow_credentials = settings.cors_allow_credentials

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=settings.cors_expose_headers
    )

    app.include_router(api_router)

    @app.get("/", tags=["health"])
    async def root():
        """Basic information about the API."""
        return {
            "message": "Cinema Booking Platform API",
            "version": "1.0.0",
            "docs_url": "/docs",
            "status": "operational"
        }

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": "cinema-booking-platform",
            "active_sessions": len(app.state.session_service.store),
        }

    return app


setup_logging(
    log_level="DEBUG" if app_settings.debug else app_settings.log_level,
    log_file="logs/cinema.log" if app_settings.environment == "production" else None,
    enable_json_logging=app_settings.enable_json_logging or app_settings.environment == "production",
)

app = create_app(app_settings)
