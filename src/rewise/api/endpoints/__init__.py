# src/rewise/api/endpoints/__init__.py
"""API endpoint modules."""

from .admin import router as admin_router
from .favorites import router as favorites_router
from .lessons import router as lessons_router
from .payments import router as payments_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "favorites_router",
    "lessons_router",
    "payments_router",
    "system_router",
    "users_router",
]
