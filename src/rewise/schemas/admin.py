"""Admin dashboard Pydantic schemas."""

from .common import CamelModel


class CategoryCount(CamelModel):
    """Number of lessons in one category."""

    category: str
    count: int


class ContributorCount(CamelModel):
    """Lesson count for one creator."""

    email: str
    name: str | None
    lesson_count: int


class FavoritedLesson(CamelModel):
    """Lesson ranked by how many users saved it."""

    lesson_id: str
    title: str
    favorite_count: int


class AdminStatsResponse(CamelModel):
    """Platform-wide counters for the admin dashboard."""

    total_users: int
    premium_users: int
    admin_users: int
    total_lessons: int
    public_lessons: int
    private_lessons: int
    premium_lessons: int
    total_reports: int
    total_favorites: int
    total_comments: int
    lessons_by_category: list[CategoryCount]
    top_contributors: list[ContributorCount]
    most_favorited: list[FavoritedLesson]
