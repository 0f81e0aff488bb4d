"""Report and moderation Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel
from .lesson import AccessLevel, Visibility


class ReportCreate(CamelModel):
    """Schema for filing a report against a lesson."""

    reason: str = Field(..., min_length=1, max_length=1000)


class ReportedLesson(CamelModel):
    """Lesson metadata joined onto reports (no body)."""

    id: str
    title: str
    category: str
    creator_email: str
    visibility: Visibility
    access_level: AccessLevel


class ReportResponse(CamelModel):
    """Report with its lesson, when the lesson still exists."""

    id: str
    reporter_email: str
    lesson_id: str
    reason: str
    created_at: datetime
    lesson: ReportedLesson | None = None


class ReportedLessonSummary(CamelModel):
    """Aggregated report count for one surviving lesson."""

    lesson_id: str
    report_count: int
    latest_report_at: datetime
    lesson: ReportedLesson
