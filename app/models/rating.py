"""
SQLModel-based Rating models

Ratings is a junction table with composite primary key (user_id, image_id),
which is what guarantees at most one rating per rater and image.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class RatingBase(SQLModel):
    """Base model with shared public fields for Ratings."""

    user_id: str = Field(primary_key=True, max_length=36)
    image_id: int = Field(primary_key=True)

    rating: int = Field(ge=1, le=10)


class Ratings(RatingBase, table=True):
    """
    Database table for ratings.

    Rows are removed only by cascade when the image or the rater goes away.
    """

    __tablename__ = "ratings"

    __table_args__ = (
        ForeignKeyConstraint(
            ["image_id"],
            ["images.image_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_ratings_image_id",
        ),
        ForeignKeyConstraint(
            ["user_id"],
            ["profiles.user_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_ratings_user_id",
        ),
        CheckConstraint("rating BETWEEN 1 AND 10", name="ck_ratings_range"),
        Index("fk_ratings_image_id", "image_id"),
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
