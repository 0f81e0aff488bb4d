"""Identity verification and local profile resolution.

``IdentityVerifier`` checks an ID token issued by the external identity
provider and returns its claims. ``IdentityResolver`` turns those claims into
a ``CallerIdentity`` by looking up (or lazily creating) the local user row.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any

import httpx
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rewise.core.errors import Unauthenticated
from rewise.core.settings import Settings
from rewise.models.user import ROLE_USER, User
from rewise.services.access_policy import CallerIdentity

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class VerifiedClaims:
    """Claims of a verified ID token that the application consumes."""

    email: str
    subject_id: str | None
    display_name: str | None = None
    picture_url: str | None = None


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        Unauthenticated: If the header is missing, uses another scheme or
            carries an empty token.
    """
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        raise Unauthenticated("Unauthorized - No token provided")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated("Unauthorized - No token provided")
    return token


def claims_from_payload(payload: dict[str, Any]) -> VerifiedClaims:
    """Build ``VerifiedClaims`` from a decoded token payload."""
    email = payload.get("email")
    if not email or not isinstance(email, str):
        raise Unauthenticated("Unauthorized - Token has no email claim")
    return VerifiedClaims(
        email=email.strip().lower(),
        subject_id=payload.get("sub") or payload.get("user_id"),
        display_name=payload.get("name"),
        picture_url=payload.get("picture"),
    )


class IdentityVerifier:
    """Verify ID tokens with python-jose.

    With ``identity_jwks_url`` configured, tokens are verified against the
    provider's published signing keys (refetched after
    ``identity_jwks_ttl_seconds``). Otherwise ``identity_shared_secret`` is used
    as an HMAC key, which is how local development and tests mint tokens.
    """

    def __init__(self, settings: Settings, http_client: httpx.Client | None = None) -> None:
        self.jwks_url = settings.identity_jwks_url
        self.shared_secret = settings.identity_shared_secret
        self.audience = settings.identity_audience
        self.issuer = settings.identity_issuer
        self.algorithms = list(settings.identity_jwt_algorithms)
        if not self.jwks_url and self.shared_secret:
            self.algorithms = ["HS256"]
        self.jwks_ttl_seconds = settings.identity_jwks_ttl_seconds
        self.jwks_min_refresh_seconds = settings.identity_jwks_min_refresh_seconds
        self._http_client = http_client
        self._timeout = settings.identity_http_timeout_seconds
        self._jwks: list[dict[str, Any]] = []
        self._jwks_fetched_at = 0.0
        self._jwks_lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.jwks_url or self.shared_secret)

    def _fetch_jwks(self) -> list[dict[str, Any]]:
        client = self._http_client or httpx.Client(timeout=self._timeout)
        try:
            response = client.get(self.jwks_url or "")
            response.raise_for_status()
            keys = response.json().get("keys", [])
        finally:
            if self._http_client is None:
                client.close()
        logger.info("Loaded %d identity provider signing keys", len(keys))
        return keys

    def _signing_keys(self, *, refresh: bool = False) -> list[dict[str, Any]]:
        with self._jwks_lock:
            age = time.monotonic() - self._jwks_fetched_at
            expired = age > self.jwks_ttl_seconds
            # Unknown kids may force a refetch at most once per interval.
            forced = refresh and age >= self.jwks_min_refresh_seconds
            if forced or expired or not self._jwks:
                self._jwks = self._fetch_jwks()
                self._jwks_fetched_at = time.monotonic()
            return self._jwks

    def _resolve_key(self, token: str) -> Any:
        if not self.jwks_url:
            return self.shared_secret

        kid = jwt.get_unverified_header(token).get("kid")
        for refresh in (False, True):
            for key in self._signing_keys(refresh=refresh):
                if key.get("kid") == kid:
                    return key
        raise Unauthenticated("Unauthorized - Unknown signing key")

    def verify(self, token: str) -> VerifiedClaims:
        """Verify ``token`` and return its claims.

        Raises:
            Unauthenticated: If the token is malformed, expired, signed with an
                unknown key or fails audience/issuer checks.
        """
        if not self.configured:
            logger.error("Identity verification is not configured")
            raise Unauthenticated()

        try:
            key = self._resolve_key(token)
            payload = jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as err:
            raise Unauthenticated("Unauthorized - Invalid token") from err
        except httpx.HTTPError as err:
            logger.warning("Could not fetch identity provider keys: %s", err)
            raise Unauthenticated("Unauthorized - Invalid token") from err

        return claims_from_payload(payload)


class IdentityResolver:
    """Resolve bearer tokens to caller identities backed by local profiles."""

    def __init__(self, verifier: IdentityVerifier) -> None:
        self.verifier = verifier

    def resolve(self, db: Session, token: str) -> CallerIdentity:
        """Verify ``token`` and return the merged caller identity.

        Creates the local profile on first sight of an email. Two concurrent
        first requests for the same new email may both try to insert; the
        loser hits the unique constraint and falls back to the winner's row.
        """
        claims = self.verifier.verify(token)
        user = get_or_create_user(db, claims)
        return to_caller_identity(user, claims.subject_id)


def get_or_create_user(db: Session, claims: VerifiedClaims) -> User:
    """Return the user for ``claims.email``, creating it with defaults if absent."""
    user = db.query(User).filter(User.email == claims.email).first()
    if user is not None:
        return user

    user = User(
        email=claims.email,
        external_subject_id=claims.subject_id,
        name=claims.display_name or "Anonymous",
        photo=claims.picture_url or "",
        role=ROLE_USER,
        is_premium=False,
        favorite_lesson_ids=[],
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = db.query(User).filter(User.email == claims.email).first()
        if existing is None:
            raise
        return existing
    db.refresh(user)
    logger.info("Created local profile for %s", claims.email)
    return user


def to_caller_identity(user: User, subject_id: str | None = None) -> CallerIdentity:
    """Merge a local profile with the token subject into a ``CallerIdentity``."""
    return CallerIdentity(
        email=user.email,
        subject_id=subject_id or user.external_subject_id,
        role=user.role,
        is_premium=user.is_premium,
        name=user.name,
        photo=user.photo,
        user_id=user.id,
    )
