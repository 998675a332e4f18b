"""
SQLModel-based Streak model

One row per (image, granularity). location_value records which scope the
streak was last computed against (a city name, a country name, or "global"
when the leaderboard was unconstrained).
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index, UniqueConstraint
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class Streaks(SQLModel, table=True):
    """Database table for consecutive top-N appearances."""

    __tablename__ = "streaks"

    __table_args__ = (
        ForeignKeyConstraint(
            ["image_id"],
            ["images.image_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_streaks_image_id",
        ),
        UniqueConstraint("image_id", "streak_type", name="uq_streaks_image_type"),
        Index("idx_streaks_scope", "streak_type", "location_value"),
    )

    streak_id: int | None = Field(default=None, primary_key=True)

    image_id: int
    streak_type: str = Field(max_length=20)
    location_value: str = Field(max_length=100)

    current_streak: int = Field(default=0)
    longest_streak: int = Field(default=0)
    # current_streak before the last reset; restored if the image re-enters
    # its board within the period of that reset
    held_streak: int = Field(default=0)
    last_in_top_at: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
