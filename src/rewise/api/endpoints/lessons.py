# src/rewise/api/endpoints/lessons.py
"""Lesson endpoints: CRUD, listing, likes, favorites, comments and reports."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from rewise.api.dependencies import CurrentIdentityDep, OptionalIdentityDep, SessionDep
from rewise.models import Comment, Lesson
from rewise.models.lesson import VISIBILITY_PUBLIC
from rewise.schemas.comment import CommentCreate, CommentResponse
from rewise.schemas.common import MessageResponse, Pagination
from rewise.schemas.lesson import (
    FavoriteToggleResponse,
    LessonCreate,
    LessonCreatedResponse,
    LessonListResponse,
    LessonResponse,
    LessonUpdate,
    LikeToggleResponse,
)
from rewise.schemas.report import ReportCreate, ReportResponse
from rewise.services import comments as comment_service
from rewise.services import favorites as favorite_service
from rewise.services import lessons as lesson_service
from rewise.services.lessons import LessonFilter
from rewise.services.moderation import ModerationService

router = APIRouter(prefix="/lessons", tags=["lessons"])


@router.post("", response_model=LessonCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    lesson_data: LessonCreate,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> LessonCreatedResponse:
    """Create a lesson owned by the caller.

    Only premium callers may publish premium lessons.
    """
    lesson = lesson_service.create_lesson(db, caller, lesson_data)
    return LessonCreatedResponse(message="Lesson created successfully", lesson_id=lesson.id)


@router.get("", response_model=LessonListResponse)
async def list_public_lessons(
    db: SessionDep,
    caller: OptionalIdentityDep,
    category: str | None = Query(None, description="Exact category match"),
    emotional_tag: str | None = Query(None, alias="emotionalTag"),
    search: str | None = Query(None, description="Case-insensitive title substring"),
    creator_email: str | None = Query(None, alias="creatorEmail"),
    featured: bool = Query(False, description="Only featured lessons"),
    sort: str | None = Query(None, description="newest (default), oldest or popular"),
    page: int = Query(1, ge=1),
    page_size: int = Query(lesson_service.DEFAULT_PAGE_SIZE, alias="pageSize", ge=1),
) -> LessonListResponse:
    """List public lessons with filters, sorting and offset pagination.

    Premium lessons are listed with their body withheld unless the caller
    may read them.
    """
    page, page_size = lesson_service.normalize_paging(page, page_size)
    criteria = LessonFilter(
        category=category,
        emotional_tag=emotional_tag,
        search=search,
        creator_email=creator_email,
        featured_only=featured,
        visibility=VISIBILITY_PUBLIC,
        sort=lesson_service.normalize_sort(sort),
        page=page,
        page_size=page_size,
    )
    result = lesson_service.list_lessons(db, criteria, caller)
    return LessonListResponse(
        lessons=result.items,
        pagination=Pagination.build(page=page, page_size=page_size, total=result.total),
    )


@router.get("/mine", response_model=LessonListResponse)
async def list_my_lessons(
    caller: CurrentIdentityDep,
    db: SessionDep,
    sort: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(lesson_service.DEFAULT_PAGE_SIZE, alias="pageSize", ge=1),
) -> LessonListResponse:
    """List the caller's own lessons of any visibility."""
    page, page_size = lesson_service.normalize_paging(page, page_size)
    criteria = LessonFilter(
        creator_email=caller.email,
        sort=lesson_service.normalize_sort(sort),
        page=page,
        page_size=page_size,
    )
    result = lesson_service.list_lessons(db, criteria, caller)
    return LessonListResponse(
        lessons=result.items,
        pagination=Pagination.build(page=page, page_size=page_size, total=result.total),
    )


@router.get("/{lesson_id}", response_model=LessonResponse)
async def get_lesson(lesson_id: str, db: SessionDep, caller: OptionalIdentityDep) -> Lesson:
    """Get a lesson by ID, enforcing visibility and premium access."""
    return lesson_service.get_readable_lesson(db, lesson_id, caller)


@router.patch("/{lesson_id}", response_model=LessonResponse)
async def update_lesson(
    lesson_id: str,
    lesson_data: LessonUpdate,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> Lesson:
    """Partially update a lesson (creator or admin only)."""
    return lesson_service.update_lesson(db, lesson_id, caller, lesson_data)


@router.delete("/{lesson_id}", response_model=MessageResponse)
async def delete_lesson(
    lesson_id: str,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete a lesson (creator or admin only)."""
    lesson_service.delete_lesson(db, lesson_id, caller)
    return MessageResponse(message="Lesson deleted successfully")


@router.post("/{lesson_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    lesson_id: str,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> LikeToggleResponse:
    """Like the lesson, or remove the caller's like if present."""
    liked, like_count = lesson_service.toggle_like(db, lesson_id, caller)
    return LikeToggleResponse(liked=liked, like_count=like_count)


@router.post("/{lesson_id}/favorite", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    lesson_id: str,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> FavoriteToggleResponse:
    """Save the lesson to favorites, or remove it if already saved."""
    favorited = favorite_service.toggle_favorite(db, caller, lesson_id)
    return FavoriteToggleResponse(favorited=favorited)


@router.get("/{lesson_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    lesson_id: str,
    db: SessionDep,
    caller: OptionalIdentityDep,
) -> list[Comment]:
    """List comments on a lesson, oldest first."""
    return comment_service.list_comments(db, lesson_id, caller)


@router.post(
    "/{lesson_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_comment(
    lesson_id: str,
    comment_data: CommentCreate,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> Comment:
    """Post a comment on a lesson the caller can read."""
    return comment_service.post_comment(db, caller, lesson_id, comment_data.text)


@router.post(
    "/{lesson_id}/reports",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def report_lesson(
    lesson_id: str,
    report_data: ReportCreate,
    caller: CurrentIdentityDep,
    db: SessionDep,
) -> ReportResponse:
    """File a report against a lesson."""
    report = ModerationService.file_report(db, caller, lesson_id, report_data.reason)
    return ReportResponse(
        id=report.id,
        reporter_email=report.reporter_email,
        lesson_id=report.lesson_id,
        reason=report.reason,
        created_at=report.created_at,
    )
