"""Premium checkout and payment provider callback endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Header, Request

from rewise.api.dependencies import (
    CheckoutClientDep,
    CurrentIdentityDep,
    SessionDep,
    SettingsDep,
)
from rewise.schemas.payment import CheckoutSessionResponse, WebhookAck
from rewise.services import payments as payment_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    caller: CurrentIdentityDep,
    checkout_client: CheckoutClientDep,
) -> CheckoutSessionResponse:
    """Start a one-time premium payment and return the hosted checkout URL."""
    checkout_url = await payment_service.create_checkout(caller, checkout_client)
    return CheckoutSessionResponse(checkout_url=checkout_url)


@router.post("/webhook", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    db: SessionDep,
    settings: SettingsDep,
    stripe_signature: Annotated[str | None, Header()] = None,
) -> WebhookAck:
    """Receive signed payment events from the provider.

    Returns 400 only when the signature is invalid; any other outcome is
    acknowledged so the provider stops retrying.
    """
    payload = await request.body()
    payment_service.handle_payment_event(db, payload, stripe_signature, settings)
    return WebhookAck(received=True)
