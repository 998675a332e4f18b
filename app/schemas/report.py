"""
Pydantic schemas for image reporting and admin review.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.config import ReportType
from app.models.report import ReportBase
from app.schemas.base import UTCDatetime, UTCDatetimeOptional


class ReportCreate(ReportBase):
    """Schema for creating a new image report."""

    report_type: str = Field(
        default=ReportType.OTHER,
        description="Report category (copyright, nudity, spam, other)",
    )
    description: str | None = Field(None, max_length=1000, description="Optional explanation")

    @field_validator("report_type")
    @classmethod
    def validate_report_type(cls, v: str) -> str:
        if v not in ReportType.LABELS:
            raise ValueError(f"report_type must be one of {sorted(ReportType.LABELS)}")
        return v

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v: str | None) -> str | None:
        """Trim whitespace; an empty description is stored as None."""
        if v is None:
            return v
        return v.strip() or None


class ReportResponse(ReportBase):
    """Response schema for a report."""

    report_id: int
    image_id: int
    reporter_id: str
    reported_user_id: str
    reason: str
    status: str
    created_at: UTCDatetime
    reviewed_at: UTCDatetimeOptional = None
    reviewed_by: str | None = None

    model_config = {"from_attributes": True}


class ReportResolveRequest(BaseModel):
    """dismiss closes the report; remove deletes the reported image."""

    action: Literal["dismiss", "remove"]
