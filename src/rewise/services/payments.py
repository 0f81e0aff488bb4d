"""Premium upgrade through a hosted checkout provider.

Outbound, ``CheckoutClient`` asks the provider (a Stripe-compatible REST API)
for a one-time payment session. Inbound, ``handle_payment_event`` verifies the
signed callback and flips ``is_premium`` for the paying user.

Webhook signatures use the ``t=<unix>,v1=<hex>`` header scheme: ``v1`` is the
HMAC-SHA256 of ``"<t>.<raw body>"`` keyed with the shared webhook secret.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from sqlalchemy.orm import Session

from rewise.core.errors import AlreadyPremium, InvalidSignature, PaymentProviderError
from rewise.core.settings import Settings
from rewise.db.time import utcnow
from rewise.models.user import User
from rewise.services.access_policy import CallerIdentity

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Stripe-Signature"
CHECKOUT_COMPLETED = "checkout.session.completed"
METADATA_EMAIL_KEY = "userEmail"

HTTP_OK = 200


@dataclass(frozen=True)
class CheckoutConfig:
    """Immutable configuration for checkout sessions."""

    base_url: str
    secret_key: str | None
    amount: int
    currency: str
    product_name: str
    success_url: str
    cancel_url: str
    timeout_seconds: float


def load_checkout_config(settings: Settings) -> CheckoutConfig:
    """Build configuration object from settings."""
    return CheckoutConfig(
        base_url=settings.payment_api_base_url,
        secret_key=settings.payment_secret_key,
        amount=settings.premium_price_amount,
        currency=settings.premium_price_currency,
        product_name=settings.premium_product_name,
        success_url=settings.checkout_success_url,
        cancel_url=settings.checkout_cancel_url,
        timeout_seconds=float(settings.payment_http_timeout_seconds),
    )


class CheckoutClient:
    """HTTP client wrapper for the hosted checkout provider."""

    def __init__(
        self,
        config: CheckoutConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.config.secret_key)

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    def session_form(self, email: str) -> dict[str, str]:
        """Return the form fields for a single-item, one-time payment session.

        The email travels both as structured metadata and as the
        ``client_reference_id`` fallback.
        """
        return {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "line_items[0][quantity]": "1",
            "line_items[0][price_data][currency]": self.config.currency,
            "line_items[0][price_data][unit_amount]": str(self.config.amount),
            "line_items[0][price_data][product_data][name]": self.config.product_name,
            "customer_email": email,
            "client_reference_id": email,
            f"metadata[{METADATA_EMAIL_KEY}]": email,
            "success_url": self.config.success_url,
            "cancel_url": self.config.cancel_url,
        }

    async def create_session(self, email: str) -> str:
        """Create a checkout session for ``email`` and return its hosted URL.

        Raises:
            PaymentProviderError: If the provider is not configured, unreachable,
                or answers without a session URL.
        """
        if not self.enabled:
            raise PaymentProviderError("Payments are not configured")

        client = self._ensure_client()
        try:
            response = await client.post(
                "/v1/checkout/sessions",
                data=self.session_form(email),
                headers={"Authorization": f"Bearer {self.config.secret_key}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Checkout session request failed: %s", exc)
            raise PaymentProviderError() from exc

        if response.status_code != HTTP_OK:
            logger.error(
                "Checkout provider responded with %s: %s",
                response.status_code,
                response.text[:200],
            )
            raise PaymentProviderError()

        url = response.json().get("url")
        if not url:
            raise PaymentProviderError("Checkout provider returned no session URL")
        return url

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


async def create_checkout(caller: CallerIdentity, client: CheckoutClient) -> str:
    """Return a checkout URL for ``caller``.

    Raises:
        AlreadyPremium: If the caller has already paid.
    """
    if caller.is_premium:
        raise AlreadyPremium()
    return await client.create_session(caller.email)


def compute_signature(payload: bytes, secret: str, timestamp: int) -> str:
    """Return the hex HMAC-SHA256 signature for ``payload`` at ``timestamp``."""
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def build_signature_header(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    """Return a complete signature header value for ``payload``."""
    ts = int(time.time()) if timestamp is None else timestamp
    return f"t={ts},v1={compute_signature(payload, secret, ts)}"


def _parse_signature_header(header: str) -> tuple[int, list[str]]:
    timestamp: int | None = None
    signatures: list[str] = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError as err:
                raise InvalidSignature() from err
        elif key == "v1" and value:
            signatures.append(value)
    if timestamp is None or not signatures:
        raise InvalidSignature()
    return timestamp, signatures


def verify_signature(
    payload: bytes,
    header: str | None,
    secret: str | None,
    *,
    tolerance_seconds: int = 300,
    now: float | None = None,
) -> None:
    """Verify a webhook signature header.

    Raises:
        InvalidSignature: If the header is missing or malformed, no ``v1``
            signature matches, or the timestamp is outside the tolerance.
    """
    if not header or not secret:
        raise InvalidSignature()

    timestamp, signatures = _parse_signature_header(header)
    expected = compute_signature(payload, secret, timestamp)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise InvalidSignature()

    current = time.time() if now is None else now
    if tolerance_seconds > 0 and abs(current - timestamp) > tolerance_seconds:
        raise InvalidSignature("Webhook timestamp outside tolerance")


def extract_customer_email(session_object: Mapping[str, Any]) -> str | None:
    """Return the paying user's email, preferring structured metadata."""
    metadata = session_object.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    email = metadata.get(METADATA_EMAIL_KEY) or session_object.get("client_reference_id")
    if not email or not isinstance(email, str):
        return None
    return email.strip().lower()


def grant_premium(db: Session, email: str) -> bool:
    """Set ``is_premium`` for ``email``; return False when no user matches."""
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        return False
    if not user.is_premium:
        user.is_premium = True
        user.premium_since = utcnow()
        db.commit()
    return True


def handle_payment_event(
    db: Session,
    payload: bytes,
    signature_header: str | None,
    settings: Settings,
) -> None:
    """Verify and apply a payment callback.

    Only signature failures raise. Once the signature is valid, every outcome
    (unknown event type, unknown email, failed update) is logged and
    acknowledged so the provider does not keep retrying.

    Raises:
        InvalidSignature: If the signature does not verify; nothing is changed.
    """
    verify_signature(
        payload,
        signature_header,
        settings.payment_webhook_secret,
        tolerance_seconds=settings.payment_webhook_tolerance_seconds,
    )

    try:
        event = json.loads(payload)
    except ValueError:
        logger.error("Payment webhook body is not valid JSON")
        return
    if not isinstance(event, Mapping):
        logger.error("Payment webhook body is not a JSON object")
        return

    event_type = event.get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info("Ignoring payment event of type %s", event_type)
        return

    data = event.get("data")
    session_object = data.get("object") if isinstance(data, Mapping) else None
    if not isinstance(session_object, Mapping):
        logger.warning("Checkout event %s has no session object", event.get("id"))
        return
    email = extract_customer_email(session_object)
    if email is None:
        logger.warning("Checkout completed without a customer email (event %s)", event.get("id"))
        return

    try:
        if grant_premium(db, email):
            logger.info("Premium granted to %s", email)
        else:
            logger.warning("Checkout completed for unknown user %s", email)
    except Exception:
        db.rollback()
        logger.exception("Failed to grant premium to %s", email)
