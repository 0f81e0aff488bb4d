# src/rewise/api/__init__.py
"""HTTP API routers."""

from .endpoints import (
    admin_router,
    favorites_router,
    lessons_router,
    payments_router,
    system_router,
    users_router,
)

__all__ = [
    "admin_router",
    "favorites_router",
    "lessons_router",
    "payments_router",
    "system_router",
    "users_router",
]
