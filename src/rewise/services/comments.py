"""Append-only lesson comments."""
from __future__ import annotations

from sqlalchemy.orm import Session

from rewise.models.comment import Comment
from rewise.services.access_policy import CallerIdentity
from rewise.services.lessons import get_readable_lesson


def list_comments(db: Session, lesson_id: str, caller: CallerIdentity | None) -> list[Comment]:
    """Return comments on a readable lesson, oldest first."""
    lesson = get_readable_lesson(db, lesson_id, caller)
    return (
        db.query(Comment)
        .filter(Comment.lesson_id == lesson.id)
        .order_by(Comment.created_at.asc())
        .all()
    )


def post_comment(db: Session, caller: CallerIdentity, lesson_id: str, text: str) -> Comment:
    """Append a comment, snapshotting the author's current display name."""
    lesson = get_readable_lesson(db, lesson_id, caller)
    comment = Comment(
        lesson_id=lesson.id,
        author_email=caller.email,
        author_name=caller.name,
        text=text,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment
