"""Favorite toggling and listing.

Favorites live in two places: ``Favorite`` rows (the source of truth read by
``list_favorites``) and the denormalized ``User.favorite_lesson_ids`` list used
for quick membership checks from the profile. Both are written on every
toggle and committed together. Concurrent duplicate toggles from the same
user may leave them briefly out of step; there is no reconciliation job.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rewise.core.errors import NotFound
from rewise.models.favorite import Favorite
from rewise.models.lesson import Lesson
from rewise.models.user import User
from rewise.services.access_policy import CallerIdentity
from rewise.services.lessons import get_lesson_or_404

logger = logging.getLogger(__name__)


def _get_profile(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise NotFound("User not found")
    return user


def _mirror(user: User, lesson_id: str, present: bool) -> None:
    # Assign a new list so the JSON column is flagged as modified.
    ids = [item for item in (user.favorite_lesson_ids or []) if item != lesson_id]
    if present:
        ids.append(lesson_id)
    user.favorite_lesson_ids = ids


def toggle_favorite(db: Session, caller: CallerIdentity, lesson_id: str) -> bool:
    """Flip the favorite relation between ``caller`` and a lesson.

    Returns:
        True when the lesson is now a favorite, False when it was removed.
    """
    lesson = get_lesson_or_404(db, lesson_id)
    user = _get_profile(db, caller.email)

    existing = (
        db.query(Favorite)
        .filter(Favorite.user_email == caller.email, Favorite.lesson_id == lesson.id)
        .first()
    )
    favorited = existing is None
    if existing is not None:
        db.delete(existing)
    else:
        db.add(Favorite(user_email=caller.email, lesson_id=lesson.id))
    _mirror(user, lesson.id, favorited)

    try:
        db.commit()
    except IntegrityError:
        # A concurrent toggle inserted the same relation first.
        db.rollback()
        logger.warning("Concurrent favorite toggle on %s by %s", lesson.id, caller.email)
        user = _get_profile(db, caller.email)
        _mirror(user, lesson.id, True)
        db.commit()
        favorited = True
    return favorited


def list_favorites(
    db: Session,
    caller: CallerIdentity,
    *,
    category: str | None = None,
    emotional_tag: str | None = None,
) -> list[Lesson]:
    """Return the caller's favorite lessons, newest favorite first.

    Relation rows whose lesson no longer exists are dropped by the join.
    """
    query = (
        db.query(Lesson)
        .join(Favorite, Favorite.lesson_id == Lesson.id)
        .filter(Favorite.user_email == caller.email)
    )
    if category:
        query = query.filter(Lesson.category == category)
    if emotional_tag:
        query = query.filter(Lesson.emotional_tag == emotional_tag)
    return query.order_by(Favorite.created_at.desc()).all()


def favorite_ids(db: Session, email: str) -> set[str]:
    """Return the lesson ids of all favorite rows for ``email``."""
    rows = db.query(Favorite.lesson_id).filter(Favorite.user_email == email).all()
    return {lesson_id for (lesson_id,) in rows}


def remove_user_favorites(db: Session, email: str) -> int:
    """Delete every favorite row owned by ``email``; caller commits."""
    return (
        db.query(Favorite)
        .filter(Favorite.user_email == email)
        .delete(synchronize_session=False)
    )
