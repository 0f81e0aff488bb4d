# src/rewise/main.py
"""Main entry point for the Rewise application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from rewise.api import (
    admin_router,
    favorites_router,
    lessons_router,
    payments_router,
    system_router,
    users_router,
)
from rewise.core.errors import MissingField, RewiseError
from rewise.core.settings import Settings
from rewise.core.settings import settings as default_settings
from rewise.db.session import Database
from rewise.services.identity import IdentityResolver, IdentityVerifier
from rewise.services.payments import CheckoutClient, load_checkout_config

logger = logging.getLogger(__name__)


def _validation_payload(exc: RequestValidationError) -> dict[str, object]:
    errors = exc.errors()
    if any(error.get("type") == "missing" for error in errors):
        reason = MissingField.reason
        detail = MissingField.default_message
    else:
        reason = "InvalidInput"
        detail = "Invalid request data"
    fields = [".".join(str(part) for part in error.get("loc", ())) for error in errors]
    return {"detail": detail, "reason": reason, "fields": fields}


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain errors and request validation failures as JSON."""

    @app.exception_handler(RewiseError)
    async def handle_rewise_error(request: Request, exc: RewiseError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content=_validation_payload(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "reason": "InternalError"},
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application and its process-wide resources.

    The database handle, identity resolver and checkout client are created
    here and stored on ``app.state``; request handlers reach them through
    dependencies rather than module globals.
    """
    settings = settings or default_settings
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        description="Life-lessons sharing platform API",
        version=settings.app_version,
    )

    app.state.settings = settings
    app.state.database = Database(settings.database_url, echo=settings.sql_debug)
    app.state.identity_resolver = IdentityResolver(IdentityVerifier(settings))
    app.state.checkout_client = CheckoutClient(load_checkout_config(settings))

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add GZip middleware for compression
    app.add_middleware(GZipMiddleware)

    register_exception_handlers(app)

    # Include API routers
    app.include_router(system_router)
    app.include_router(users_router, prefix="/api")
    app.include_router(lessons_router, prefix="/api")
    app.include_router(favorites_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(payments_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup() -> None:
        if settings.auto_create_tables:
            app.state.database.create_tables()
        if not app.state.identity_resolver.verifier.configured:
            logger.warning("Identity verification is not configured; all tokens will be rejected")
        if not settings.checkout_enabled:
            logger.warning("Payment provider is not configured; checkout is disabled")
        logger.info("%s %s started", settings.app_name, settings.app_version)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await app.state.checkout_client.close()
        app.state.database.dispose()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("rewise.main:app", host="0.0.0.0", port=8000, reload=default_settings.debug)
