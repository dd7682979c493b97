"""
FastAPI dependencies for the catalog client and booking session service.
"""

from fastapi import Request

from ..clients.catalog_client import CatalogClient
from ..services.booking_session_service import BookingSessionService


def get_catalog_client(request: Request) -> CatalogClient:
    """Get the catalog client bound to the application."""
    return request.app.state.catalog_client


def get_session_service(request: Request) -> BookingSessionService:
    """Get the booking session service bound to the application."""
    return request.app.state.session_service
