"""User profile endpoints for the Rewise API."""

from __future__ import annotations

from fastapi import APIRouter

from rewise.api.dependencies import CurrentIdentityDep, SessionDep
from rewise.models import User
from rewise.schemas.user import (
    AuthCheckResponse,
    IdentityResponse,
    ProfileUpdateRequest,
    UserResponse,
    UserStatsResponse,
)
from rewise.services import user_service

router = APIRouter(tags=["users"])


@router.get("/test-auth", response_model=AuthCheckResponse)
async def test_auth(caller: CurrentIdentityDep) -> AuthCheckResponse:
    """Echo the resolved identity to confirm a token works."""
    return AuthCheckResponse(
        message="Authentication successful",
        user=IdentityResponse(
            email=caller.email,
            uid=caller.subject_id,
            role=caller.role,
            is_premium=caller.is_premium,
        ),
    )


@router.post("/users/sync", response_model=UserResponse)
async def sync_user(caller: CurrentIdentityDep, db: SessionDep) -> User:
    """Create the caller's local profile on first login and return it."""
    return user_service.get_user_by_email(db, caller.email)


@router.get("/users/me", response_model=UserResponse)
async def get_my_profile(caller: CurrentIdentityDep, db: SessionDep) -> User:
    """Return the caller's profile."""
    return user_service.get_user_by_email(db, caller.email)


@router.patch("/users/me", response_model=UserResponse)
async def update_my_profile(
    profile_data: ProfileUpdateRequest,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> User:
    """Update the caller's name and/or photo; absent fields are unchanged."""
    user = user_service.get_user_by_email(db, caller.email)
    return user_service.update_profile(db, user, profile_data)


@router.get("/users/me/stats", response_model=UserStatsResponse)
async def get_my_stats(caller: CurrentIdentityDep, db: SessionDep) -> UserStatsResponse:
    """Return dashboard counters for the caller."""
    return user_service.user_stats(db, caller.email)
