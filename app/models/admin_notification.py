"""
SQLModel-based AdminNotification model

Append-only audit feed for the admin dashboard. Only is_read changes after
insert.
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class AdminNotifications(SQLModel, table=True):
    """Database table for admin notifications."""

    __tablename__ = "admin_notifications"

    __table_args__ = (
        ForeignKeyConstraint(
            ["image_id"],
            ["images.image_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_admin_notifications_image_id",
        ),
        Index("idx_admin_notifications_created", "created_at"),
    )

    notification_id: int | None = Field(default=None, primary_key=True)

    image_id: int | None = Field(default=None)
    # The user the notification is about (for reports, the image owner)
    user_id: str | None = Field(default=None, max_length=36)

    notification_type: str = Field(max_length=50)
    message: str = Field(max_length=2000)
    is_read: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)
