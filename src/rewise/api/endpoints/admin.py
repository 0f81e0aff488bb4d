"""Admin dashboard endpoints: users, lessons, reports and statistics."""

from __future__ import annotations

from fastapi import APIRouter, Query

from rewise.api.dependencies import AdminDep, SessionDep
from rewise.models import Lesson, User
from rewise.schemas.admin import AdminStatsResponse
from rewise.schemas.common import MessageResponse, Pagination
from rewise.schemas.lesson import (
    AccessLevel,
    LessonListResponse,
    LessonResponse,
    ModerationFlagsUpdate,
    Visibility,
)
from rewise.schemas.report import ReportedLessonSummary, ReportResponse
from rewise.schemas.user import RoleUpdateRequest, UserListResponse, UserResponse
from rewise.services import lessons as lesson_service
from rewise.services import user_service
from rewise.services.lessons import LessonFilter
from rewise.services.moderation import ModerationService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=UserListResponse)
async def list_users(
    admin: AdminDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1),
) -> UserListResponse:
    """List all users, newest first."""
    page, page_size = lesson_service.normalize_paging(page, page_size)
    users, total = user_service.get_users(db, skip=(page - 1) * page_size, limit=page_size)
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        pagination=Pagination.build(page=page, page_size=page_size, total=total),
    )


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def set_user_role(
    user_id: str,
    role_data: RoleUpdateRequest,
    admin: AdminDep,
    db: SessionDep,
) -> User:
    """Promote or demote a user."""
    return user_service.set_role(db, user_id, role_data.role)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, admin: AdminDep, db: SessionDep) -> MessageResponse:
    """Delete a user profile; lessons they authored are kept."""
    user_service.delete_user(db, user_id)
    return MessageResponse(message="User deleted successfully")


@router.get("/lessons", response_model=LessonListResponse)
async def list_all_lessons(
    admin: AdminDep,
    db: SessionDep,
    category: str | None = Query(None),
    emotional_tag: str | None = Query(None, alias="emotionalTag"),
    search: str | None = Query(None),
    creator_email: str | None = Query(None, alias="creatorEmail"),
    visibility: Visibility | None = Query(None),
    access_level: AccessLevel | None = Query(None, alias="accessLevel"),
    featured: bool = Query(False),
    sort: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1),
) -> LessonListResponse:
    """List lessons of any visibility for moderation."""
    page, page_size = lesson_service.normalize_paging(page, page_size)
    criteria = LessonFilter(
        category=category,
        emotional_tag=emotional_tag,
        search=search,
        creator_email=creator_email,
        featured_only=featured,
        visibility=visibility,
        access_level=access_level,
        sort=lesson_service.normalize_sort(sort),
        page=page,
        page_size=page_size,
    )
    result = lesson_service.list_lessons(db, criteria, admin, redact=False)
    return LessonListResponse(
        lessons=result.items,
        pagination=Pagination.build(page=page, page_size=page_size, total=result.total),
    )


@router.delete("/lessons/{lesson_id}", response_model=MessageResponse)
async def delete_any_lesson(lesson_id: str, admin: AdminDep, db: SessionDep) -> MessageResponse:
    """Delete any lesson regardless of its creator."""
    lesson_service.delete_lesson(db, lesson_id, admin)
    return MessageResponse(message="Lesson deleted successfully")


@router.patch("/lessons/{lesson_id}/moderation", response_model=LessonResponse)
async def update_moderation_flags(
    lesson_id: str,
    flags: ModerationFlagsUpdate,
    admin: AdminDep,
    db: SessionDep,
) -> Lesson:
    """Set the featured and/or reviewed flags of a lesson."""
    return ModerationService.set_flags(db, lesson_id, flags)


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(
    admin: AdminDep,
    db: SessionDep,
    lesson_id: str | None = Query(None, alias="lessonId"),
) -> list[ReportResponse]:
    """List reports, optionally for one lesson; deleted lessons show no lesson."""
    return ModerationService.list_reports(db, lesson_id)


@router.get("/reports/aggregated", response_model=list[ReportedLessonSummary])
async def aggregated_reports(admin: AdminDep, db: SessionDep) -> list[ReportedLessonSummary]:
    """Report counts per surviving lesson, most reported first."""
    return ModerationService.aggregated_reported_items(db)


@router.delete("/reports/{report_id}", response_model=MessageResponse)
async def resolve_report(report_id: str, admin: AdminDep, db: SessionDep) -> MessageResponse:
    """Resolve (delete) a report."""
    ModerationService.resolve_report(db, report_id)
    return MessageResponse(message="Report resolved")


@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(admin: AdminDep, db: SessionDep) -> AdminStatsResponse:
    """Platform-wide counters for the admin dashboard."""
    return user_service.platform_stats(db)
