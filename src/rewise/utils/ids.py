"""Opaque record identifiers.

Every record is keyed by the 32-character lowercase hex form of a UUID4.
Identifiers arriving from clients are validated before they reach the store.
"""

from __future__ import annotations

import uuid

from rewise.core.errors import InvalidIdentifier

ID_LENGTH = 32


def new_id() -> str:
    """Return a fresh identifier."""
    return uuid.uuid4().hex


def parse_id(value: str, kind: str = "identifier") -> str:
    """Return the canonical form of ``value`` or raise ``InvalidIdentifier``.

    Args:
        value: Identifier supplied by the client.
        kind: Human-readable noun used in the error message (e.g. "lesson").
    """
    if not isinstance(value, str) or len(value) != ID_LENGTH:
        raise InvalidIdentifier(f"Invalid {kind} ID")
    try:
        return uuid.UUID(hex=value).hex
    except ValueError as err:
        raise InvalidIdentifier(f"Invalid {kind} ID") from err
