"""Access policy for lessons.

Pure decision functions: they never touch the database. Route handlers and
services call them with an already-loaded lesson and the (possibly absent)
resolved caller.

Read access is decided in a fixed order:

1. Visibility. A private lesson is readable only by its creator or an admin;
   anyone else gets ``PrivateContent``.
2. Access level. A premium lesson is readable only by premium callers; anyone
   else gets ``PremiumRequired``. The creator and admins are not exempt.

A private premium lesson denied at step 1 therefore always reports
``PrivateContent``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from rewise.core.errors import AccessDenied, DenyReason
from rewise.models.lesson import ACCESS_PREMIUM, VISIBILITY_PRIVATE
from rewise.models.user import ROLE_ADMIN


class GatedItem(Protocol):
    """Attributes of a lesson the policy looks at."""

    visibility: str
    access_level: str
    creator_email: str


@dataclass(frozen=True)
class CallerIdentity:
    """Verified caller merged from token claims and the local profile."""

    email: str
    subject_id: str | None = None
    role: str = "user"
    is_premium: bool = False
    name: str = "Anonymous"
    photo: str = ""
    user_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a policy check."""

    allowed: bool
    reason: DenyReason | None = None

    def raise_for_denial(self) -> None:
        """Raise ``AccessDenied`` with the decision's reason when denied."""
        if not self.allowed and self.reason is not None:
            raise AccessDenied(self.reason)


ALLOW = AccessDecision(allowed=True)


def deny(reason: DenyReason) -> AccessDecision:
    return AccessDecision(allowed=False, reason=reason)


def _is_owner_or_admin(item: GatedItem, caller: CallerIdentity) -> bool:
    return caller.email == item.creator_email or caller.is_admin


def decide(item: GatedItem, caller: CallerIdentity | None) -> AccessDecision:
    """Decide whether ``caller`` may read ``item``."""
    if item.visibility == VISIBILITY_PRIVATE:
        if caller is None or not _is_owner_or_admin(item, caller):
            return deny(DenyReason.PRIVATE_CONTENT)

    if item.access_level == ACCESS_PREMIUM:
        if caller is None or not caller.is_premium:
            return deny(DenyReason.PREMIUM_REQUIRED)

    return ALLOW


def can_mutate(item: GatedItem, caller: CallerIdentity) -> bool:
    """Return True when ``caller`` may update, delete or moderate ``item``."""
    return _is_owner_or_admin(item, caller)


def decide_mutation(item: GatedItem, caller: CallerIdentity) -> AccessDecision:
    """Decide whether ``caller`` may modify ``item``."""
    if can_mutate(item, caller):
        return ALLOW
    return deny(DenyReason.NOT_OWNER)


def decide_access_level(access_level: str | None, caller: CallerIdentity) -> AccessDecision:
    """Decide whether ``caller`` may set ``access_level`` on a lesson."""
    if access_level == ACCESS_PREMIUM and not caller.is_premium:
        return deny(DenyReason.PREMIUM_REQUIRED)
    return ALLOW


def ensure_readable(item: GatedItem, caller: CallerIdentity | None) -> None:
    """Raise ``AccessDenied`` unless ``caller`` may read ``item``."""
    decide(item, caller).raise_for_denial()


def ensure_mutable(item: GatedItem, caller: CallerIdentity) -> None:
    """Raise ``AccessDenied`` unless ``caller`` may modify ``item``."""
    decide_mutation(item, caller).raise_for_denial()


def ensure_can_set_access_level(access_level: str | None, caller: CallerIdentity) -> None:
    """Raise ``AccessDenied`` unless ``caller`` may publish at ``access_level``."""
    decide_access_level(access_level, caller).raise_for_denial()


def ensure_admin(caller: CallerIdentity) -> None:
    """Raise ``AccessDenied`` unless ``caller`` is an admin."""
    if not caller.is_admin:
        raise AccessDenied(DenyReason.ADMIN_REQUIRED)
