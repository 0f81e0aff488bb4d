"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class CommentCreate(CamelModel):
    """Schema for posting a comment."""

    text: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(CamelModel):
    """Comment as returned by the API."""

    id: str
    lesson_id: str
    author_email: str
    author_name: str
    text: str
    created_at: datetime
