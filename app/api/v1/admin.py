"""
Admin API endpoints.

All routes require the admin role (granted with scripts/grant_role.py).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AdminUser
from app.core.database import get_db
from app.schemas.admin import (
    AdminDashboardResponse,
    BadgeAssignmentResponse,
    FlagImageRequest,
    NotificationResponse,
    ReconcileResponse,
    ReportResolveResponse,
)
from app.schemas.base import MessageResponse
from app.schemas.image import ImageResponse
from app.schemas.report import ReportResolveRequest
from app.services.aggregates import reconcile_all_aggregates
from app.services.badges import assign_badges
from app.services.images import delete_image, get_image_or_404
from app.services.moderation import (
    flag_image,
    get_admin_dashboard,
    mark_notification_read,
    resolve_report,
    unflag_image,
)
from app.tasks.queue import enqueue_job

router = APIRouter(prefix="/admin", tags=["admin"])

BackgroundFlag = Annotated[
    bool, Query(description="Queue the job on the worker instead of running it now")
]


@router.get("/dashboard", response_model=AdminDashboardResponse)
async def dashboard(
    _: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> AdminDashboardResponse:
    """
    Moderation overview: newest users, flagged images, AI-detected images,
    pending reports and the latest notifications.
    """
    return await get_admin_dashboard(db)


# ===== Reports =====


@router.post("/reports/{report_id}/resolve", response_model=ReportResolveResponse)
async def resolve(
    report_id: Annotated[int, Path(description="Report ID")],
    body: ReportResolveRequest,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> ReportResolveResponse:
    """
    Resolve a pending report.

    dismiss keeps the image; remove deletes it along with its ratings and
    reports, and recomputes the owner's statistics.
    """
    report, image_deleted = await resolve_report(db, admin, report_id, body.action)
    await db.commit()
    return ReportResolveResponse(report=report, image_deleted=image_deleted)


# ===== Images =====


@router.post("/images/{image_id}/flag", response_model=ImageResponse)
async def flag(
    image_id: Annotated[int, Path(description="Image ID")],
    body: FlagImageRequest,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> ImageResponse:
    image = await flag_image(db, admin, image_id, body.reason)
    await db.commit()
    return ImageResponse.model_validate(image, from_attributes=True)


@router.post("/images/{image_id}/unflag", response_model=ImageResponse)
async def unflag(
    image_id: Annotated[int, Path(description="Image ID")],
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> ImageResponse:
    image = await unflag_image(db, admin, image_id)
    await db.commit()
    return ImageResponse.model_validate(image, from_attributes=True)


@router.delete("/images/{image_id}", response_model=MessageResponse)
async def admin_delete_image(
    image_id: Annotated[int, Path(description="Image ID")],
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    image = await get_image_or_404(db, image_id)
    await delete_image(db, image, deleted_by=admin.user_id)
    await db.commit()
    return MessageResponse(message="Image deleted")


# ===== Notifications =====


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def read_notification(
    notification_id: Annotated[int, Path(description="Notification ID")],
    _: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    notification = await mark_notification_read(db, notification_id)
    await db.commit()
    return NotificationResponse.model_validate(notification)


# ===== Maintenance =====


@router.post("/badges/recalculate", response_model=BadgeAssignmentResponse | MessageResponse)
async def recalculate_badges(
    _: AdminUser,
    background: BackgroundFlag = False,
    db: AsyncSession = Depends(get_db),
) -> BadgeAssignmentResponse | MessageResponse:
    """Recompute badge ranks now, or queue the job with ?background=true."""
    if background:
        job_id = await enqueue_job("assign_badges_job", _job_id="assign_badges")
        return MessageResponse(
            message="Badge job queued"
            if job_id
            else "Badge job not queued: already pending or queue unavailable"
        )

    winners = await assign_badges(db)
    await db.commit()
    return BadgeAssignmentResponse(winners=winners)


@router.post("/aggregates/reconcile", response_model=ReconcileResponse | MessageResponse)
async def reconcile_aggregates(
    _: AdminUser,
    background: BackgroundFlag = False,
    db: AsyncSession = Depends(get_db),
) -> ReconcileResponse | MessageResponse:
    """
    Recompute every cached rating and follow aggregate from the raw rows.

    Runs inline by default; pass ?background=true for large datasets.
    """
    if background:
        job_id = await enqueue_job("reconcile_aggregates_job", _job_id="reconcile_aggregates")
        return MessageResponse(
            message="Reconcile job queued"
            if job_id
            else "Reconcile job not queued: already pending or queue unavailable"
        )

    result = await reconcile_all_aggregates(db)
    await db.commit()
    return ReconcileResponse(
        images_checked=result.images_checked,
        images_corrected=result.images_corrected,
        profiles_checked=result.profiles_checked,
        profiles_corrected=result.profiles_corrected,
    )
