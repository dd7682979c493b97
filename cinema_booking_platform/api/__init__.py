"""API endpoints for the Cinema Booking Platform."""

from fastapi import APIRouter
from .catalog import router as catalog_router
from .sessions import router as sessions_router

# Create main API router
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(catalog_router)
api_router.include_router(sessions_router)

__all__ = ["api_router"]
