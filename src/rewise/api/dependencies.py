"""Shared API dependencies for authentication and common functionality.

The bearer credential is resolved exactly once per request by
``get_current_identity`` (or ``get_optional_identity``); handlers receive the
resulting ``CallerIdentity`` as a parameter instead of re-reading the header.
"""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from rewise.core.errors import Unauthenticated
from rewise.core.settings import Settings
from rewise.db.session import get_db
from rewise.services.access_policy import CallerIdentity, ensure_admin
from rewise.services.identity import IdentityResolver, extract_bearer_token
from rewise.services.payments import CheckoutClient

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""
    return request.app.state.settings


def get_identity_resolver(request: Request) -> IdentityResolver:
    """Return the application's identity resolver."""
    return request.app.state.identity_resolver


def get_checkout_client(request: Request) -> CheckoutClient:
    """Return the application's checkout client."""
    return request.app.state.checkout_client


SettingsDep = Annotated[Settings, Depends(get_settings)]
ResolverDep = Annotated[IdentityResolver, Depends(get_identity_resolver)]
CheckoutClientDep = Annotated[CheckoutClient, Depends(get_checkout_client)]


def get_current_identity(
    db: SessionDep,
    resolver: ResolverDep,
    authorization: Annotated[str | None, Header()] = None,
) -> CallerIdentity:
    """Resolve the caller from the ``Authorization: Bearer`` header.

    Raises:
        Unauthenticated: If the header is missing or the token is invalid.
    """
    token = extract_bearer_token(authorization)
    return resolver.resolve(db, token)


def get_optional_identity(
    db: SessionDep,
    resolver: ResolverDep,
    authorization: Annotated[str | None, Header()] = None,
) -> CallerIdentity | None:
    """Resolve the caller when a credential is present.

    A missing or unverifiable credential yields ``None``: the request is
    served as anonymous and the access policy reports its usual denial.
    """
    if not authorization:
        return None
    try:
        return resolver.resolve(db, extract_bearer_token(authorization))
    except Unauthenticated:
        return None


def require_admin(
    caller: Annotated[CallerIdentity, Depends(get_current_identity)],
) -> CallerIdentity:
    """Resolve the caller and require the admin role."""
    ensure_admin(caller)
    return caller


# Type aliases for identity dependencies
CurrentIdentityDep = Annotated[CallerIdentity, Depends(get_current_identity)]
OptionalIdentityDep = Annotated[CallerIdentity | None, Depends(get_optional_identity)]
AdminDep = Annotated[CallerIdentity, Depends(require_admin)]
