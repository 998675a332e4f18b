"""
Pydantic schemas for API responses and requests
"""
from app.models.image import ImageBase  # Re-export from models
from app.models.profile import ProfileBase  # Re-export from models
from app.schemas.admin import (
    AdminDashboardResponse,
    BadgeAssignmentResponse,
    FlagImageRequest,
    ReconcileResponse,
)
from app.schemas.base import MessageResponse
from app.schemas.common import ProfileSummary
from app.schemas.image import (
    ImageDetailResponse,
    ImageResponse,
    ImageUploadResponse,
    RatingCreate,
    RatingResponse,
)
from app.schemas.leaderboard import (
    ExploreResponse,
    LeaderboardResponse,
    UserStandingsResponse,
)
from app.schemas.profile import (
    ProfileCreate,
    ProfilePrivateResponse,
    ProfileResponse,
    ProfileUpdate,
)
from app.schemas.report import ReportCreate, ReportResolveRequest, ReportResponse

__all__ = [
    "AdminDashboardResponse",
    "BadgeAssignmentResponse",
    "ExploreResponse",
    "FlagImageRequest",
    "ImageBase",
    "ImageDetailResponse",
    "ImageResponse",
    "ImageUploadResponse",
    "LeaderboardResponse",
    "MessageResponse",
    "ProfileBase",
    "ProfileCreate",
    "ProfilePrivateResponse",
    "ProfileResponse",
    "ProfileSummary",
    "ProfileUpdate",
    "RatingCreate",
    "RatingResponse",
    "ReconcileResponse",
    "ReportCreate",
    "ReportResolveRequest",
    "ReportResponse",
    "UserStandingsResponse",
]
