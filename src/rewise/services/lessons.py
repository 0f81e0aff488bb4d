"""Lesson storage operations: CRUD, filtered listing and like toggling."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from rewise.core.errors import NotFound
from rewise.models.lesson import Lesson, LessonLike
from rewise.models.user import User
from rewise.schemas.lesson import CreatorSummary, LessonCreate, LessonListItem, LessonUpdate
from rewise.services import access_policy
from rewise.services.access_policy import CallerIdentity
from rewise.utils.ids import parse_id

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_POPULAR = "popular"


@dataclass(frozen=True)
class LessonFilter:
    """Criteria for ``list_lessons``; ``None`` means "do not filter"."""

    category: str | None = None
    emotional_tag: str | None = None
    search: str | None = None
    creator_email: str | None = None
    featured_only: bool = False
    visibility: str | None = None
    access_level: str | None = None
    sort: str = SORT_NEWEST
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class LessonPage:
    """One page of lessons plus the total number of matches."""

    items: list[LessonListItem]
    total: int


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_lesson_or_404(db: Session, lesson_id: str) -> Lesson:
    """Return the lesson for a client-supplied id.

    Raises:
        InvalidIdentifier: If ``lesson_id`` is malformed.
        NotFound: If no lesson has that id.
    """
    canonical_id = parse_id(lesson_id, "lesson")
    lesson = db.query(Lesson).filter(Lesson.id == canonical_id).first()
    if lesson is None:
        raise NotFound("Lesson not found")
    return lesson


def get_readable_lesson(db: Session, lesson_id: str, caller: CallerIdentity | None) -> Lesson:
    """Return a lesson after checking the caller may read it."""
    lesson = get_lesson_or_404(db, lesson_id)
    access_policy.ensure_readable(lesson, caller)
    return lesson


def create_lesson(db: Session, caller: CallerIdentity, data: LessonCreate) -> Lesson:
    """Persist a new lesson authored by ``caller``."""
    access_policy.ensure_can_set_access_level(data.access_level, caller)

    lesson = Lesson(
        title=data.title,
        body=data.body,
        category=data.category,
        emotional_tag=data.emotional_tag,
        image=data.image,
        visibility=data.visibility,
        access_level=data.access_level,
        creator_email=caller.email,
        like_count=0,
        featured=False,
        reviewed=False,
    )
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson


def update_lesson(
    db: Session,
    lesson_id: str,
    caller: CallerIdentity,
    data: LessonUpdate,
) -> Lesson:
    """Apply a partial update; only fields present in ``data`` change."""
    lesson = get_lesson_or_404(db, lesson_id)
    access_policy.ensure_mutable(lesson, caller)

    update_dict = data.model_dump(exclude_unset=True, exclude_none=True)
    if "access_level" in update_dict:
        access_policy.ensure_can_set_access_level(update_dict["access_level"], caller)

    for key, value in update_dict.items():
        setattr(lesson, key, value)

    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson


def delete_lesson(db: Session, lesson_id: str, caller: CallerIdentity) -> None:
    """Delete a lesson and its like set.

    Reports, comments and favorite rows that reference it are kept.
    """
    lesson = get_lesson_or_404(db, lesson_id)
    access_policy.ensure_mutable(lesson, caller)
    deleted_id = lesson.id
    db.delete(lesson)
    db.commit()
    logger.info("Lesson %s deleted by %s", deleted_id, caller.email)


def toggle_like(db: Session, lesson_id: str, caller: CallerIdentity) -> tuple[bool, int]:
    """Flip the caller's membership in the like set.

    The like row and the counter change in the same transaction; the counter
    is adjusted with a single-row ``UPDATE ... SET like_count = like_count + n``.

    Returns:
        ``(liked, like_count)`` after the toggle.
    """
    lesson = get_readable_lesson(db, lesson_id, caller)

    existing = (
        db.query(LessonLike)
        .filter(LessonLike.lesson_id == lesson.id, LessonLike.user_email == caller.email)
        .first()
    )
    if existing is not None:
        db.delete(existing)
        delta = -1
    else:
        db.add(LessonLike(lesson_id=lesson.id, user_email=caller.email))
        delta = 1

    try:
        db.flush()
        db.query(Lesson).filter(Lesson.id == lesson.id).update(
            {Lesson.like_count: Lesson.like_count + delta},
            synchronize_session=False,
        )
        db.commit()
    except IntegrityError:
        # A concurrent toggle inserted the same like first.
        db.rollback()
        logger.warning("Concurrent like toggle on %s by %s", lesson.id, caller.email)
    db.refresh(lesson)

    liked = (
        db.query(LessonLike)
        .filter(LessonLike.lesson_id == lesson.id, LessonLike.user_email == caller.email)
        .first()
        is not None
    )
    return liked, lesson.like_count


def like_set(db: Session, lesson_id: str) -> set[str]:
    """Return the emails in a lesson's like set."""
    rows = db.query(LessonLike.user_email).filter(LessonLike.lesson_id == lesson_id).all()
    return {email for (email,) in rows}


def _apply_filters(query: Query, criteria: LessonFilter) -> Query:
    if criteria.visibility:
        query = query.filter(Lesson.visibility == criteria.visibility)
    if criteria.access_level:
        query = query.filter(Lesson.access_level == criteria.access_level)
    if criteria.category:
        query = query.filter(Lesson.category == criteria.category)
    if criteria.emotional_tag:
        query = query.filter(Lesson.emotional_tag == criteria.emotional_tag)
    if criteria.creator_email:
        query = query.filter(Lesson.creator_email == criteria.creator_email)
    if criteria.featured_only:
        query = query.filter(Lesson.featured.is_(True))
    if criteria.search:
        pattern = f"%{_escape_like(criteria.search)}%"
        query = query.filter(Lesson.title.ilike(pattern, escape="\\"))
    return query


def _apply_sort(query: Query, sort: str) -> Query:
    if sort == SORT_OLDEST:
        return query.order_by(Lesson.created_at.asc())
    if sort == SORT_POPULAR:
        return query.order_by(Lesson.like_count.desc(), Lesson.created_at.desc())
    return query.order_by(Lesson.created_at.desc())


def creator_summaries(db: Session, emails: Iterable[str]) -> dict[str, CreatorSummary]:
    """Return author cards for the given creator emails.

    Counts cover every lesson the creator authored, but are computed only for
    the creators passed in (typically the distinct creators of one page).
    """
    distinct = sorted(set(emails))
    if not distinct:
        return {}

    counts = dict(
        db.query(Lesson.creator_email, func.count(Lesson.id))
        .filter(Lesson.creator_email.in_(distinct))
        .group_by(Lesson.creator_email)
        .all()
    )
    profiles = {
        user.email: user
        for user in db.query(User).filter(User.email.in_(distinct)).all()
    }

    summaries: dict[str, CreatorSummary] = {}
    for email in distinct:
        profile = profiles.get(email)
        summaries[email] = CreatorSummary(
            email=email,
            name=profile.name if profile else "Anonymous",
            photo=profile.photo if profile else "",
            lesson_count=int(counts.get(email, 0)),
        )
    return summaries


def to_list_item(
    lesson: Lesson,
    caller: CallerIdentity | None,
    *,
    creator: CreatorSummary | None = None,
    redact: bool = True,
) -> LessonListItem:
    """Render a lesson for a listing, hiding the body when the caller is denied."""
    locked = redact and not access_policy.decide(lesson, caller).allowed
    return LessonListItem(
        id=lesson.id,
        title=lesson.title,
        body=None if locked else lesson.body,
        category=lesson.category,
        emotional_tag=lesson.emotional_tag,
        image=lesson.image,
        visibility=lesson.visibility,
        access_level=lesson.access_level,
        creator_email=lesson.creator_email,
        like_count=lesson.like_count,
        featured=lesson.featured,
        reviewed=lesson.reviewed,
        created_at=lesson.created_at,
        locked=locked,
        creator=creator,
    )


def render_page(
    db: Session,
    lessons: Sequence[Lesson],
    caller: CallerIdentity | None,
    *,
    redact: bool = True,
) -> list[LessonListItem]:
    """Attach creator summaries to ``lessons`` and render them."""
    summaries = creator_summaries(db, (lesson.creator_email for lesson in lessons))
    return [
        to_list_item(
            lesson,
            caller,
            creator=summaries.get(lesson.creator_email),
            redact=redact,
        )
        for lesson in lessons
    ]


def list_lessons(
    db: Session,
    criteria: LessonFilter,
    caller: CallerIdentity | None = None,
    *,
    redact: bool = True,
) -> LessonPage:
    """Return one page of lessons matching ``criteria``."""
    query = _apply_filters(db.query(Lesson), criteria)
    total = query.order_by(None).count()
    lessons = (
        _apply_sort(query, criteria.sort)
        .offset(criteria.offset)
        .limit(criteria.page_size)
        .all()
    )
    return LessonPage(items=render_page(db, lessons, caller, redact=redact), total=total)


def normalize_paging(page: int | None, page_size: int | None) -> tuple[int, int]:
    """Clamp client paging parameters to sane bounds."""
    page = page if page and page > 0 else 1
    size = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
    return page, min(size, MAX_PAGE_SIZE)


def normalize_sort(sort: str | None) -> str:
    """Return a known sort key, falling back to newest."""
    if sort in (SORT_NEWEST, SORT_OLDEST, SORT_POPULAR):
        return sort
    return SORT_NEWEST
