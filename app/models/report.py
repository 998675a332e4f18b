"""
SQLModel-based Report models with inheritance for security

ReportBase (fields supplied by the reporter)
    ├─> Reports (database table, adds parties, status and review tracking)
    └─> ReportCreate/ReportResponse (API schemas, defined in app/schemas)
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from app.config import ReportStatus, ReportType
from app.utils.dates import utc_now


class ReportBase(SQLModel):
    """Base model with the fields a reporter fills in."""

    report_type: str = Field(default=ReportType.OTHER, max_length=20)
    description: str | None = Field(default=None, max_length=1000)


class Reports(ReportBase, table=True):
    """
    Database table for image reports.

    A reporter may hold at most one pending report per image; the check lives
    in app.services.moderation because resolved reports do not block a new one.
    """

    __tablename__ = "reports"

    __table_args__ = (
        ForeignKeyConstraint(
            ["image_id"],
            ["images.image_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_reports_image_id",
        ),
        ForeignKeyConstraint(
            ["reporter_id"],
            ["profiles.user_id"],
            ondelete="CASCADE",
            onupdate="CASCADE",
            name="fk_reports_reporter_id",
        ),
        Index("fk_reports_image_id", "image_id"),
        Index("idx_reports_status", "status"),
        Index("idx_reports_pending_per_user", "image_id", "reporter_id", "status"),
    )

    report_id: int | None = Field(default=None, primary_key=True)

    image_id: int
    reporter_id: str = Field(max_length=36)
    reported_user_id: str = Field(max_length=36)

    # Human-readable label of report_type at the time of reporting
    reason: str = Field(max_length=100)

    status: str = Field(default=ReportStatus.PENDING, max_length=20)

    created_at: datetime = Field(default_factory=utc_now)
    reviewed_at: datetime | None = Field(default=None)
    reviewed_by: str | None = Field(default=None, max_length=36)
