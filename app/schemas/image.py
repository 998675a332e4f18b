"""
Pydantic schemas for Image and Rating endpoints
"""

from pydantic import BaseModel, Field

from app.models.image import ImageBase
from app.schemas.base import UTCDatetime
from app.schemas.common import ProfileSummary


class ImageResponse(ImageBase):
    """
    Schema for image response - what API returns.

    Inherits public fields from ImageBase and adds aggregates and the
    advisory AI-detection metadata.
    """

    image_id: int
    user_id: str
    average_rating: float
    total_ratings: int
    is_flagged: bool
    ai_detected: bool | None = None
    ai_confidence: int | None = None
    created_at: UTCDatetime


class ImageDetailResponse(ImageResponse):
    """Image with its owner and the viewer's own rating (None when unrated or anonymous)"""

    owner: ProfileSummary | None = None
    user_rating: int | None = None


class ImageListResponse(BaseModel):
    """Images of one profile"""

    total: int
    images: list[ImageResponse]


class AIDetectionSummary(BaseModel):
    """Detection verdict returned with an upload"""

    is_ai: bool
    confidence: int
    reason: str


class ImageUploadResponse(BaseModel):
    """Upload result. warning is set when the image looks AI-generated."""

    message: str
    image: ImageResponse
    ai_detection: AIDetectionSummary | None = None
    warning: str | None = None


class RatingCreate(BaseModel):
    """Request body for rating an image"""

    rating: int = Field(..., description="Score from 1 (worst) to 10 (best)")


class RatingResponse(BaseModel):
    """Rating state after a submit, with the refreshed image aggregates"""

    image_id: int
    user_id: str
    rating: int | None
    created: bool = False
    average_rating: float
    total_ratings: int
