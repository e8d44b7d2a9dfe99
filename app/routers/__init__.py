"""API routers."""

from app.routers.admin import router as admin_router
from app.routers.auth import router as auth_router

__all__ = ["auth_router", "admin_router"]
