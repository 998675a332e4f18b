"""
SQLModel-based Follow model

A follow lets the follower see a private profile's images. The composite
primary key makes each ordered pair unique.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class Follows(SQLModel, table=True):
    """Database table for follow relationships."""

    __tablename__ = "follows"

    __table_args__ = (
        ForeignKeyConstraint(
            ["follower_id"],
            ["profiles.user_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_follows_follower_id",
        ),
        ForeignKeyConstraint(
            ["following_id"],
            ["profiles.user_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_follows_following_id",
        ),
        CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
        Index("fk_follows_following_id", "following_id"),
    )

    follower_id: str = Field(primary_key=True, max_length=36)
    following_id: str = Field(primary_key=True, max_length=36)

    created_at: datetime = Field(default_factory=utc_now)
