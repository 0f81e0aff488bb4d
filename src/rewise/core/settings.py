"""Application settings and configuration.

This module defines all configuration options for the Rewise API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files. Tests
    construct their own instance and pass it to ``create_app``.
    """

    # Application metadata
    app_name: str = Field(default="Rewise API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./rewise.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Identity provider (ID token verification)
    identity_jwks_url: str | None = Field(default=None, alias="IDENTITY_JWKS_URL")
    identity_audience: str | None = Field(default=None, alias="IDENTITY_AUDIENCE")
    identity_issuer: str | None = Field(default=None, alias="IDENTITY_ISSUER")
    identity_shared_secret: str | None = Field(default=None, alias="IDENTITY_SHARED_SECRET")
    identity_jwt_algorithms: list[str] = Field(
        default=["RS256"],
        alias="IDENTITY_JWT_ALGORITHMS",
    )
    identity_jwks_ttl_seconds: int = Field(default=3600, alias="IDENTITY_JWKS_TTL_SECONDS")
    identity_jwks_min_refresh_seconds: int = Field(
        default=60,
        alias="IDENTITY_JWKS_MIN_REFRESH_SECONDS",
    )
    identity_http_timeout_seconds: float = Field(
        default=5.0,
        alias="IDENTITY_HTTP_TIMEOUT_SECONDS",
    )

    # Payment provider (hosted checkout)
    payment_api_base_url: str = Field(
        default="https://api.stripe.com",
        alias="PAYMENT_API_BASE_URL",
    )
    payment_secret_key: str | None = Field(default=None, alias="PAYMENT_SECRET_KEY")
    payment_webhook_secret: str | None = Field(default=None, alias="PAYMENT_WEBHOOK_SECRET")
    payment_webhook_tolerance_seconds: int = Field(
        default=300,
        alias="PAYMENT_WEBHOOK_TOLERANCE_SECONDS",
    )
    payment_http_timeout_seconds: float = Field(
        default=10.0,
        alias="PAYMENT_HTTP_TIMEOUT_SECONDS",
    )
    premium_price_amount: int = Field(default=1500, alias="PREMIUM_PRICE_AMOUNT")
    premium_price_currency: str = Field(default="usd", alias="PREMIUM_PRICE_CURRENCY")
    premium_product_name: str = Field(
        default="Rewise Premium (lifetime)",
        alias="PREMIUM_PRODUCT_NAME",
    )
    checkout_success_url: str = Field(
        default="http://localhost:5173/payment/success",
        alias="CHECKOUT_SUCCESS_URL",
    )
    checkout_cancel_url: str = Field(
        default="http://localhost:5173/payment/cancel",
        alias="CHECKOUT_CANCEL_URL",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def checkout_enabled(self) -> bool:
        """Return True when the payment provider credentials are configured."""
        return bool(self.payment_secret_key)


settings = Settings()
