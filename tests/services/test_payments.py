# tests/services/test_payments.py
"""Unit tests for webhook signatures and the checkout client."""

import json
import time

import httpx
import pytest

from rewise.core.errors import AlreadyPremium, InvalidSignature, PaymentProviderError
from rewise.core.settings import Settings
from rewise.services.payments import (
    CheckoutClient,
    build_signature_header,
    compute_signature,
    create_checkout,
    extract_customer_email,
    load_checkout_config,
    verify_signature,
)
from tests.factories import caller

SECRET = "whsec_unit"
PAYLOAD = b'{"type":"checkout.session.completed"}'


class TestSignatures:
    def test_round_trip(self) -> None:
        header = build_signature_header(PAYLOAD, SECRET)
        verify_signature(PAYLOAD, header, SECRET)

    def test_header_format(self) -> None:
        header = build_signature_header(PAYLOAD, SECRET, timestamp=1700000000)
        assert header == f"t=1700000000,v1={compute_signature(PAYLOAD, SECRET, 1700000000)}"

    def test_any_matching_v1_is_accepted(self) -> None:
        ts = int(time.time())
        header = f"t={ts},v1=deadbeef,v1={compute_signature(PAYLOAD, SECRET, ts)}"
        verify_signature(PAYLOAD, header, SECRET)

    @pytest.mark.parametrize(
        "header",
        [None, "", "garbage", "t=abc,v1=00", "v1=00", "t=1700000000"],
    )
    def test_malformed_headers(self, header) -> None:
        with pytest.raises(InvalidSignature):
            verify_signature(PAYLOAD, header, SECRET)

    def test_stale_timestamp(self) -> None:
        header = build_signature_header(PAYLOAD, SECRET, timestamp=1700000000)
        with pytest.raises(InvalidSignature):
            verify_signature(PAYLOAD, header, SECRET, now=1700000000 + 301)
        verify_signature(PAYLOAD, header, SECRET, now=1700000000 + 299)

    def test_missing_secret(self) -> None:
        header = build_signature_header(PAYLOAD, SECRET)
        with pytest.raises(InvalidSignature):
            verify_signature(PAYLOAD, header, None)


def test_extract_customer_email_prefers_metadata() -> None:
    session = {"metadata": {"userEmail": "Meta@Example.com"}, "client_reference_id": "ref@example.com"}
    assert extract_customer_email(session) == "meta@example.com"
    assert extract_customer_email({"client_reference_id": "ref@example.com"}) == "ref@example.com"
    assert extract_customer_email({}) is None


def _client(handler, **settings) -> CheckoutClient:
    config = load_checkout_config(Settings(PAYMENT_SECRET_KEY="sk_unit", **settings))
    return CheckoutClient(config, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_create_session_posts_form() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"url": "https://checkout.test/abc"})

    client = _client(handler, PREMIUM_PRICE_AMOUNT=2500, PREMIUM_PRICE_CURRENCY="eur")
    try:
        url = await create_checkout(caller("alice@example.com"), client)
    finally:
        await client.close()

    assert url == "https://checkout.test/abc"
    body = seen[0].content.decode()
    assert "unit_amount%5D=2500" in body
    assert "currency%5D=eur" in body
    assert seen[0].headers["Content-Type"] == "application/x-www-form-urlencoded"


@pytest.mark.asyncio
async def test_already_premium_short_circuits() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("provider must not be called")

    client = _client(handler)
    with pytest.raises(AlreadyPremium):
        await create_checkout(caller("pat@example.com", is_premium=True), client)
    await client.close()


@pytest.mark.asyncio
async def test_transport_error_becomes_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = _client(handler)
    with pytest.raises(PaymentProviderError):
        await client.create_session("alice@example.com")
    await client.close()


@pytest.mark.asyncio
async def test_missing_url_becomes_provider_error() -> None:
    client = _client(lambda request: httpx.Response(200, json={"id": "cs_1"}))
    with pytest.raises(PaymentProviderError):
        await client.create_session("alice@example.com")
    await client.close()


@pytest.mark.asyncio
async def test_unconfigured_client_refuses() -> None:
    client = CheckoutClient(load_checkout_config(Settings()))
    assert not client.enabled
    with pytest.raises(PaymentProviderError):
        await client.create_session("alice@example.com")


def test_signed_payload_is_valid_json() -> None:
    payload = json.dumps({"type": "checkout.session.completed"}).encode()
    header = build_signature_header(payload, SECRET)
    verify_signature(payload, header, SECRET)
