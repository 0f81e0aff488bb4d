"""Favorites listing endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Query

from rewise.api.dependencies import CurrentIdentityDep, SessionDep
from rewise.schemas.lesson import LessonListItem
from rewise.services import favorites as favorite_service
from rewise.services import lessons as lesson_service

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=list[LessonListItem])
async def list_favorites(
    caller: CurrentIdentityDep,
    db: SessionDep,
    category: str | None = Query(None),
    emotional_tag: str | None = Query(None, alias="emotionalTag"),
) -> list[LessonListItem]:
    """List the caller's saved lessons that still exist, newest favorite first."""
    lessons = favorite_service.list_favorites(
        db,
        caller,
        category=category,
        emotional_tag=emotional_tag,
    )
    return lesson_service.render_page(db, lessons, caller)
