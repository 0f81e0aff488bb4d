"""CRUD-style helpers for managing users and dashboard counters."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from rewise.core.errors import NotFound
from rewise.models import Comment, Favorite, Lesson, Report, User
from rewise.models.lesson import ACCESS_PREMIUM, VISIBILITY_PRIVATE, VISIBILITY_PUBLIC
from rewise.models.user import ROLE_ADMIN
from rewise.schemas.admin import (
    AdminStatsResponse,
    CategoryCount,
    ContributorCount,
    FavoritedLesson,
)
from rewise.schemas.user import ProfileUpdateRequest, UserStatsResponse
from rewise.services.favorites import remove_user_favorites
from rewise.utils.ids import parse_id

__all__ = [
    "get_user_by_email",
    "get_user_or_404",
    "get_users",
    "update_profile",
    "set_role",
    "delete_user",
    "user_stats",
    "platform_stats",
]

logger = logging.getLogger(__name__)

TOP_N = 5


def get_user_by_email(db: Session, email: str) -> User:
    """Return the user with ``email`` or raise ``NotFound``."""
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise NotFound("User not found")
    return user


def get_user_or_404(db: Session, user_id: str) -> User:
    """Return a single user by client-supplied id."""
    user = db.get(User, parse_id(user_id, "user"))
    if user is None:
        raise NotFound("User not found")
    return user


def get_users(db: Session, skip: int = 0, limit: int = 100) -> tuple[Sequence[User], int]:
    """Return users newest first with simple offset-based pagination."""
    total = db.query(func.count(User.id)).scalar() or 0
    users = db.query(User).order_by(User.created_at.desc()).offset(skip).limit(limit).all()
    return users, int(total)


def update_profile(db: Session, db_user: User, update_data: ProfileUpdateRequest) -> User:
    """Apply partial updates to the caller's own profile fields."""
    update_dict = update_data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_dict.items():
        setattr(db_user, key, value)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def set_role(db: Session, user_id: str, role: str) -> User:
    """Change a user's role."""
    user = get_user_or_404(db, user_id)
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("Role of %s set to %s", user.email, role)
    return user


def delete_user(db: Session, user_id: str) -> User:
    """Remove a user and their favorite rows; their lessons stay."""
    user = get_user_or_404(db, user_id)
    remove_user_favorites(db, user.email)
    db.delete(user)
    db.commit()
    logger.info("User %s deleted", user.email)
    return user


def _count(db: Session, *criteria: object, model: type = Lesson) -> int:
    query = db.query(func.count()).select_from(model)
    if criteria:
        query = query.filter(*criteria)
    return int(query.scalar() or 0)


def user_stats(db: Session, email: str) -> UserStatsResponse:
    """Return dashboard counters for one user."""
    likes_received = (
        db.query(func.coalesce(func.sum(Lesson.like_count), 0))
        .filter(Lesson.creator_email == email)
        .scalar()
    )
    favorites_saved = (
        db.query(func.count(Favorite.id))
        .join(Lesson, Lesson.id == Favorite.lesson_id)
        .filter(Favorite.user_email == email)
        .scalar()
    )
    return UserStatsResponse(
        lessons_created=_count(db, Lesson.creator_email == email),
        public_lessons=_count(
            db, Lesson.creator_email == email, Lesson.visibility == VISIBILITY_PUBLIC
        ),
        private_lessons=_count(
            db, Lesson.creator_email == email, Lesson.visibility == VISIBILITY_PRIVATE
        ),
        favorites_saved=int(favorites_saved or 0),
        likes_received=int(likes_received or 0),
    )


def platform_stats(db: Session) -> AdminStatsResponse:
    """Return platform-wide counters for the admin dashboard."""
    by_category = (
        db.query(Lesson.category, func.count(Lesson.id))
        .group_by(Lesson.category)
        .order_by(func.count(Lesson.id).desc(), Lesson.category)
        .all()
    )

    contributors = (
        db.query(Lesson.creator_email, User.name, func.count(Lesson.id))
        .outerjoin(User, User.email == Lesson.creator_email)
        .group_by(Lesson.creator_email, User.name)
        .order_by(func.count(Lesson.id).desc(), Lesson.creator_email)
        .limit(TOP_N)
        .all()
    )

    favorited = (
        db.query(Lesson.id, Lesson.title, func.count(Favorite.id))
        .join(Favorite, Favorite.lesson_id == Lesson.id)
        .group_by(Lesson.id, Lesson.title)
        .order_by(func.count(Favorite.id).desc(), Lesson.title)
        .limit(TOP_N)
        .all()
    )

    return AdminStatsResponse(
        total_users=_count(db, model=User),
        premium_users=_count(db, User.is_premium.is_(True), model=User),
        admin_users=_count(db, User.role == ROLE_ADMIN, model=User),
        total_lessons=_count(db),
        public_lessons=_count(db, Lesson.visibility == VISIBILITY_PUBLIC),
        private_lessons=_count(db, Lesson.visibility == VISIBILITY_PRIVATE),
        premium_lessons=_count(db, Lesson.access_level == ACCESS_PREMIUM),
        total_reports=_count(db, model=Report),
        total_favorites=_count(db, model=Favorite),
        total_comments=_count(db, model=Comment),
        lessons_by_category=[
            CategoryCount(category=category, count=int(count))
            for category, count in by_category
        ],
        top_contributors=[
            ContributorCount(email=email, name=name, lesson_count=int(count))
            for email, name, count in contributors
        ],
        most_favorited=[
            FavoritedLesson(lesson_id=lesson_id, title=title, favorite_count=int(count))
            for lesson_id, title, count in favorited
        ],
    )
