"""API routes."""

from .health import router as health_router
from .auth_routes import router as auth_router
from .listing import router as listing_router
from .objects import router as objects_router

__all__ = [
    "health_router",
    "auth_router",
    "listing_router",
    "objects_router",
]
