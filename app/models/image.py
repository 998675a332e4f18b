"""
SQLModel-based Image models with inheritance for security

ImageBase (shared public fields)
    ├─> Images (database table, adds owner, derived aggregates and moderation fields)
    └─> ImageResponse/ImageUploadResponse (API schemas, defined in app/schemas)
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class ImageBase(SQLModel):
    """
    Base model with shared public fields for Images.

    These fields are safe to expose via the API and are shared between the
    table and the request/response schemas.
    """

    image_url: str = Field(max_length=500)
    title: str | None = Field(default=None, max_length=200)
    caption: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=2000)


class Images(ImageBase, table=True):
    """
    Database table for images.

    average_rating and total_ratings are cached aggregates of the ratings
    table. They are only ever written by app.services.aggregates, in the same
    transaction as the rating change that invalidated them.
    """

    __tablename__ = "images"

    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"],
            ["profiles.user_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_images_user_id",
        ),
        Index("fk_images_user_id", "user_id"),
        Index("idx_images_ranking", "average_rating", "total_ratings"),
        Index("idx_images_flagged", "is_flagged"),
        Index("idx_images_ai_detected", "ai_detected"),
    )

    image_id: int | None = Field(default=None, primary_key=True)

    # Owner, immutable after upload
    user_id: str = Field(max_length=36)

    # Derived rating aggregates
    average_rating: float = Field(default=0.0)
    total_ratings: int = Field(default=0)

    # Moderation
    is_flagged: bool = Field(default=False)
    flag_reason: str | None = Field(default=None, max_length=500)

    # Advisory AI-detection metadata captured at upload
    ai_detected: bool | None = Field(default=None)
    ai_confidence: int | None = Field(default=None)
    ai_detection_reason: str | None = Field(default=None, max_length=1000)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
