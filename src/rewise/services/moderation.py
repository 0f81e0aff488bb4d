# src/rewise/services/moderation.py
"""Moderation services: content reports and admin moderation flags."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from rewise.core.errors import NotFound
from rewise.models import Lesson, Report
from rewise.schemas.lesson import ModerationFlagsUpdate
from rewise.schemas.report import ReportedLesson, ReportedLessonSummary, ReportResponse
from rewise.services.access_policy import CallerIdentity
from rewise.services.lessons import get_lesson_or_404
from rewise.utils.ids import parse_id

logger = logging.getLogger(__name__)


def _reported_lesson(lesson: Lesson) -> ReportedLesson:
    return ReportedLesson(
        id=lesson.id,
        title=lesson.title,
        category=lesson.category,
        creator_email=lesson.creator_email,
        visibility=lesson.visibility,
        access_level=lesson.access_level,
    )


class ModerationService:
    """Service handling reports and moderation flags."""

    @staticmethod
    def file_report(
        db: Session,
        caller: CallerIdentity,
        lesson_id: str,
        reason: str,
    ) -> Report:
        """Append a report; the same caller may report a lesson many times."""
        lesson = get_lesson_or_404(db, lesson_id)
        report = Report(reporter_email=caller.email, lesson_id=lesson.id, reason=reason)
        db.add(report)
        db.commit()
        db.refresh(report)
        return report

    @staticmethod
    def list_reports(db: Session, lesson_id: str | None = None) -> list[ReportResponse]:
        """Return reports newest first, each with its lesson when it still exists."""
        query = db.query(Report, Lesson).outerjoin(Lesson, Lesson.id == Report.lesson_id)
        if lesson_id is not None:
            query = query.filter(Report.lesson_id == parse_id(lesson_id, "lesson"))

        rows = query.order_by(Report.created_at.desc()).all()
        return [
            ReportResponse(
                id=report.id,
                reporter_email=report.reporter_email,
                lesson_id=report.lesson_id,
                reason=report.reason,
                created_at=report.created_at,
                lesson=_reported_lesson(lesson) if lesson is not None else None,
            )
            for report, lesson in rows
        ]

    @staticmethod
    def aggregated_reported_items(db: Session) -> list[ReportedLessonSummary]:
        """Return report counts per lesson, most reported first.

        Unlike ``list_reports`` this is an inner join: reports whose lesson was
        deleted do not appear.
        """
        counts = (
            db.query(
                Report.lesson_id.label("lesson_id"),
                func.count(Report.id).label("report_count"),
                func.max(Report.created_at).label("latest_report_at"),
            )
            .group_by(Report.lesson_id)
            .subquery()
        )
        rows = (
            db.query(Lesson, counts.c.report_count, counts.c.latest_report_at)
            .join(counts, counts.c.lesson_id == Lesson.id)
            .order_by(counts.c.report_count.desc(), counts.c.latest_report_at.desc())
            .all()
        )
        return [
            ReportedLessonSummary(
                lesson_id=lesson.id,
                report_count=int(report_count),
                latest_report_at=latest_report_at,
                lesson=_reported_lesson(lesson),
            )
            for lesson, report_count, latest_report_at in rows
        ]

    @staticmethod
    def resolve_report(db: Session, report_id: str) -> None:
        """Delete a report.

        Raises:
            NotFound: If no report has that id.
        """
        canonical_id = parse_id(report_id, "report")
        report = db.get(Report, canonical_id)
        if report is None:
            raise NotFound("Report not found")
        db.delete(report)
        db.commit()

    @staticmethod
    def set_flags(db: Session, lesson_id: str, flags: ModerationFlagsUpdate) -> Lesson:
        """Update the featured/reviewed flags that are present in ``flags``."""
        lesson = get_lesson_or_404(db, lesson_id)
        for key, value in flags.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(lesson, key, value)
        db.commit()
        db.refresh(lesson)
        logger.info(
            "Moderation flags on %s: featured=%s reviewed=%s",
            lesson.id,
            lesson.featured,
            lesson.reviewed,
        )
        return lesson
