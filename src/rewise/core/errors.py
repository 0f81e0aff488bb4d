"""Domain errors raised by services and dependencies.

Every error carries the HTTP status it maps to and a machine-checkable
``reason`` string. The application factory registers a handler that renders
them as ``{"detail": ..., "reason": ...}``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class DenyReason(str, Enum):
    """Reasons the access policy may give for refusing an action."""

    PRIVATE_CONTENT = "PrivateContent"
    PREMIUM_REQUIRED = "PremiumRequired"
    NOT_OWNER = "NotOwner"
    ADMIN_REQUIRED = "AdminRequired"


class RewiseError(Exception):
    """Base exception for all expected API failures."""

    status_code: int = 500
    reason: str = "InternalError"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent to the client."""
        return {"detail": self.message, "reason": self.reason}


class Unauthenticated(RewiseError):
    """Raised when the bearer credential is missing or cannot be verified."""

    status_code = 401
    reason = "Unauthenticated"
    default_message = "Unauthorized - Invalid or missing token"


class AccessDenied(RewiseError):
    """Raised when the access policy refuses an action."""

    status_code = 403

    _messages = {
        DenyReason.PRIVATE_CONTENT: "This lesson is private",
        DenyReason.PREMIUM_REQUIRED: "Premium subscription required",
        DenyReason.NOT_OWNER: "Only the creator or an admin may modify this lesson",
        DenyReason.ADMIN_REQUIRED: "Admin access required",
    }

    def __init__(self, deny_reason: DenyReason, message: str | None = None) -> None:
        self.deny_reason = deny_reason
        self.reason = deny_reason.value
        super().__init__(message or self._messages[deny_reason])

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.deny_reason is DenyReason.PREMIUM_REQUIRED:
            payload["isPremiumContent"] = True
        return payload


class InvalidIdentifier(RewiseError):
    """Raised when an identifier from the outside is not well formed."""

    status_code = 400
    reason = "InvalidIdentifier"
    default_message = "Invalid identifier"


class MissingField(RewiseError):
    """Raised when a required request field is absent."""

    status_code = 400
    reason = "MissingField"
    default_message = "Missing required fields"


class NotFound(RewiseError):
    """Raised when a lesson, user or report does not exist."""

    status_code = 404
    reason = "NotFound"
    default_message = "Not found"


class InvalidSignature(RewiseError):
    """Raised when a payment callback fails signature verification."""

    status_code = 400
    reason = "InvalidSignature"
    default_message = "Invalid webhook signature"


class AlreadyPremium(RewiseError):
    """Raised when a premium user asks for another checkout session."""

    status_code = 400
    reason = "AlreadyPremium"
    default_message = "User is already premium"


class PaymentProviderError(RewiseError):
    """Raised when the hosted checkout provider cannot create a session."""

    status_code = 502
    reason = "PaymentProviderError"
    default_message = "Payment provider request failed"
