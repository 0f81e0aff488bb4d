"""Payment-related Pydantic schemas."""

from .common import CamelModel


class CheckoutSessionResponse(CamelModel):
    """Hosted checkout URL the client should redirect to."""

    checkout_url: str


class WebhookAck(CamelModel):
    """Acknowledgement returned to the payment provider."""

    received: bool = True
