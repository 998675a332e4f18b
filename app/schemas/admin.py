"""
Pydantic schemas for admin API endpoints.

These schemas handle:
- The moderation dashboard
- Image flagging
- Maintenance jobs (badges, aggregate reconciliation)
"""

from pydantic import BaseModel, Field

from app.schemas.base import UTCDatetime
from app.schemas.common import ProfileSummary
from app.schemas.image import ImageResponse
from app.schemas.report import ReportResponse

# ===== Dashboard Schemas =====


class AdminUserItem(ProfileSummary):
    """A profile as listed on the dashboard, with contact info."""

    email: str
    is_public: bool
    total_images: int
    created_at: UTCDatetime


class AdminImageItem(ImageResponse):
    """An image with its owner, for the flagged and AI-detected lists."""

    flag_reason: str | None = None
    ai_detection_reason: str | None = None
    owner: ProfileSummary | None = None


class AdminReportItem(ReportResponse):
    """A pending report joined with its image and both parties."""

    image: ImageResponse | None = None
    reporter: ProfileSummary | None = None
    reported_user: ProfileSummary | None = None


class NotificationResponse(BaseModel):
    notification_id: int
    image_id: int | None
    user_id: str | None
    notification_type: str
    message: str
    is_read: bool
    created_at: UTCDatetime

    model_config = {"from_attributes": True}


class AdminDashboardResponse(BaseModel):
    users: list[AdminUserItem]
    flagged_images: list[AdminImageItem]
    ai_detected_images: list[AdminImageItem]
    pending_reports: list[AdminReportItem]
    notifications: list[NotificationResponse]
    unread_notifications: int


# ===== Image Moderation Schemas =====


class FlagImageRequest(BaseModel):
    """Schema for flagging an image."""

    reason: str = Field(..., min_length=1, max_length=500, description="Why the image is flagged")


class ReportResolveResponse(BaseModel):
    report: ReportResponse
    image_deleted: bool


# ===== Maintenance Schemas =====


class BadgeAssignmentResponse(BaseModel):
    """Holders of badge ranks 1..N, best first."""

    winners: list[str]


class ReconcileResponse(BaseModel):
    images_checked: int
    images_corrected: int
    profiles_checked: int
    profiles_corrected: int
