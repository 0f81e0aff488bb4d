# src/rewise/services/__init__.py
"""Business logic services for the Rewise application."""

from .identity import IdentityResolver, IdentityVerifier
from .moderation import ModerationService
from .payments import CheckoutClient

__all__ = [
    "CheckoutClient",
    "IdentityResolver",
    "IdentityVerifier",
    "ModerationService",
]
