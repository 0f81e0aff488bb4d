"""System endpoints: root banner, health check and public configuration."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from rewise.api.dependencies import SessionDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/")
async def root(settings: SettingsDep) -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "message": "Rewise server is running",
        "docs": "/docs",
    }


@router.get("/health")
async def health_check(db: SessionDep) -> dict[str, str]:
    """Health check endpoint to verify the service and its database."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.error("Health check database probe failed: %s", exc)
        database = "unavailable"
    return {"status": "ok", "database": database}


@router.get("/api/config")
async def get_public_config(settings: SettingsDep) -> dict[str, Any]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {"name": settings.app_name, "version": settings.app_version},
        "premium": {
            "amount": settings.premium_price_amount,
            "currency": settings.premium_price_currency,
            "product": settings.premium_product_name,
            "checkoutEnabled": settings.checkout_enabled,
        },
    }
