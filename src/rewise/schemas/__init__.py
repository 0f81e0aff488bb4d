"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import AdminStatsResponse
from .comment import CommentCreate, CommentResponse
from .common import CamelModel, MessageResponse, Pagination
from .lesson import (
    FavoriteToggleResponse,
    LessonCreate,
    LessonCreatedResponse,
    LessonListItem,
    LessonListResponse,
    LessonResponse,
    LessonUpdate,
    LikeToggleResponse,
    ModerationFlagsUpdate,
)
from .payment import CheckoutSessionResponse, WebhookAck
from .report import ReportCreate, ReportedLessonSummary, ReportResponse
from .user import ProfileUpdateRequest, RoleUpdateRequest, UserResponse

__all__ = [
    "AdminStatsResponse",
    "CommentCreate", "CommentResponse",
    "CamelModel", "MessageResponse", "Pagination",
    "FavoriteToggleResponse", "LessonCreate", "LessonCreatedResponse", "LessonListItem",
    "LessonListResponse", "LessonResponse", "LessonUpdate", "LikeToggleResponse",
    "ModerationFlagsUpdate",
    "CheckoutSessionResponse", "WebhookAck",
    "ReportCreate", "ReportedLessonSummary", "ReportResponse",
    "ProfileUpdateRequest", "RoleUpdateRequest", "UserResponse",
]
