"""
Moderation: image reports, flags, admin notifications and the admin dashboard.

Flagged and reported images stay in leaderboards; moderation only surfaces
them to admins, who can then delete them.
"""

from fastapi import HTTPException, status
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import NotificationType, ReportStatus, ReportType, settings
from app.core.exceptions import DuplicateReportError, ReportNotFoundError
from app.core.logging import get_logger
from app.models import AdminNotifications, Images, Profiles, Reports
from app.schemas.admin import (
    AdminDashboardResponse,
    AdminImageItem,
    AdminReportItem,
    AdminUserItem,
    NotificationResponse,
)
from app.schemas.common import ProfileSummary
from app.schemas.image import ImageResponse
from app.schemas.report import ReportCreate, ReportResponse
from app.services.images import delete_image, get_image_or_404
from app.services.leaderboard import load_profiles
from app.utils.dates import utc_now

logger = get_logger(__name__)

DASHBOARD_LIST_LIMIT = 100


async def report_image(
    db: AsyncSession, reporter: Profiles, image_id: int, data: ReportCreate
) -> Reports:
    """
    File a report against an image and notify admins.

    The report and its notification are written in the caller's transaction.

    Raises:
        ImageNotFoundError: image does not exist
        DuplicateReportError: reporter already has a pending report on this image
    """
    image = await get_image_or_404(db, image_id)

    existing = await db.execute(
        select(Reports.report_id).where(  # type: ignore[call-overload]
            Reports.image_id == image_id,
            Reports.reporter_id == reporter.user_id,
            Reports.status == ReportStatus.PENDING,
        )
    )
    if existing.first() is not None:
        raise DuplicateReportError()

    label = ReportType.LABELS[data.report_type]
    report = Reports(
        image_id=image_id,
        reporter_id=reporter.user_id,
        reported_user_id=image.user_id,
        report_type=data.report_type,
        reason=label,
        description=data.description,
    )
    db.add(report)

    message = f"Image reported for: {label}"
    if data.description:
        message += f' - "{data.description}"'
    db.add(
        AdminNotifications(
            image_id=image_id,
            user_id=image.user_id,
            notification_type=NotificationType.IMAGE_REPORT,
            message=message,
        )
    )
    await db.flush()

    logger.info(
        "image_reported",
        report_id=report.report_id,
        image_id=image_id,
        reporter_id=reporter.user_id,
        report_type=data.report_type,
    )
    return report


async def notify_ai_detected(db: AsyncSession, image: Images) -> AdminNotifications:
    """Queue an admin notification for an upload the detector considers AI-generated."""
    notification = AdminNotifications(
        image_id=image.image_id,
        user_id=image.user_id,
        notification_type=NotificationType.AI_DETECTED,
        message=f"Possible AI-generated image ({image.ai_confidence}% confidence)",
    )
    db.add(notification)
    await db.flush()
    return notification


async def resolve_report(
    db: AsyncSession, admin: Profiles, report_id: int, action: str
) -> tuple[ReportResponse, bool]:
    """
    Resolve a pending report.

    dismiss: mark the report dismissed.
    remove: mark the report removed and delete the image, which also deletes
    its reports. The returned snapshot is taken before deletion.

    Returns:
        (final report state, whether the image was deleted)
    """
    result = await db.execute(select(Reports).where(Reports.report_id == report_id))  # type: ignore[arg-type]
    report = result.scalar_one_or_none()
    if report is None:
        raise ReportNotFoundError()
    if report.status != ReportStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Report has already been processed",
        )

    report.status = ReportStatus.REMOVED if action == "remove" else ReportStatus.DISMISSED
    report.reviewed_at = utc_now()
    report.reviewed_by = admin.user_id
    await db.flush()
    snapshot = ReportResponse.model_validate(report)

    image_deleted = False
    if action == "remove":
        image = await db.get(Images, report.image_id)
        if image is not None:
            await delete_image(db, image, deleted_by=admin.user_id)
            image_deleted = True

    logger.info(
        "report_resolved",
        report_id=report_id,
        image_id=snapshot.image_id,
        action=action,
        admin_id=admin.user_id,
    )
    return snapshot, image_deleted


async def flag_image(db: AsyncSession, admin: Profiles, image_id: int, reason: str) -> Images:
    image = await get_image_or_404(db, image_id)
    image.is_flagged = True
    image.flag_reason = reason
    image.updated_at = utc_now()
    await db.flush()
    logger.info("image_flagged", image_id=image_id, admin_id=admin.user_id, reason=reason)
    return image


async def unflag_image(db: AsyncSession, admin: Profiles, image_id: int) -> Images:
    image = await get_image_or_404(db, image_id)
    image.is_flagged = False
    image.flag_reason = None
    image.updated_at = utc_now()
    await db.flush()
    logger.info("image_unflagged", image_id=image_id, admin_id=admin.user_id)
    return image


async def mark_notification_read(db: AsyncSession, notification_id: int) -> AdminNotifications:
    notification = await db.get(AdminNotifications, notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    notification.is_read = True
    await db.flush()
    return notification


def _summary(profiles: dict[str, Profiles], user_id: str | None) -> ProfileSummary | None:
    profile = profiles.get(user_id) if user_id else None
    return ProfileSummary.model_validate(profile) if profile else None


def _image_item(image: Images, profiles: dict[str, Profiles]) -> AdminImageItem:
    item = AdminImageItem.model_validate(image, from_attributes=True)
    return item.model_copy(update={"owner": _summary(profiles, image.user_id)})


async def get_admin_dashboard(db: AsyncSession) -> AdminDashboardResponse:
    """
    Collect everything the admin dashboard shows.

    Each list is one query; related images and profiles are then fetched in
    batches with IN lookups and joined here.
    """
    users_result = await db.execute(
        select(Profiles).order_by(desc(Profiles.created_at)).limit(DASHBOARD_LIST_LIMIT)  # type: ignore[arg-type]
    )
    users = list(users_result.scalars().all())

    flagged_result = await db.execute(
        select(Images)
        .where(Images.is_flagged == True)  # type: ignore[arg-type]  # noqa: E712
        .order_by(desc(Images.updated_at))  # type: ignore[arg-type]
        .limit(DASHBOARD_LIST_LIMIT)
    )
    flagged = list(flagged_result.scalars().all())

    ai_result = await db.execute(
        select(Images)
        .where(Images.ai_detected == True)  # type: ignore[arg-type]  # noqa: E712
        .order_by(desc(Images.ai_confidence), desc(Images.created_at))  # type: ignore[arg-type]
        .limit(DASHBOARD_LIST_LIMIT)
    )
    ai_detected = list(ai_result.scalars().all())

    reports_result = await db.execute(
        select(Reports)
        .where(Reports.status == ReportStatus.PENDING)  # type: ignore[arg-type]
        .order_by(desc(Reports.created_at))  # type: ignore[arg-type]
        .limit(DASHBOARD_LIST_LIMIT)
    )
    reports = list(reports_result.scalars().all())

    notifications_result = await db.execute(
        select(AdminNotifications)
        .order_by(desc(AdminNotifications.created_at), desc(AdminNotifications.notification_id))  # type: ignore[arg-type]
        .limit(settings.ADMIN_NOTIFICATION_LIMIT)
    )
    notifications = list(notifications_result.scalars().all())

    unread_result = await db.execute(
        select(func.count())
        .select_from(AdminNotifications)
        .where(AdminNotifications.is_read == False)  # type: ignore[arg-type]  # noqa: E712
    )
    unread = unread_result.scalar_one()

    # Batch the joins
    image_ids = {report.image_id for report in reports}
    reported_images: dict[int, Images] = {}
    if image_ids:
        images_result = await db.execute(select(Images).where(Images.image_id.in_(image_ids)))  # type: ignore[attr-defined]
        reported_images = {image.image_id: image for image in images_result.scalars().all()}  # type: ignore[misc]

    user_ids = {image.user_id for image in flagged + ai_detected}
    for report in reports:
        user_ids.update((report.reporter_id, report.reported_user_id))
    profiles = await load_profiles(db, user_ids)

    pending_reports = []
    for report in reports:
        image = reported_images.get(report.image_id)
        item = AdminReportItem.model_validate(report, from_attributes=True)
        pending_reports.append(
            item.model_copy(
                update={
                    "image": ImageResponse.model_validate(image, from_attributes=True) if image else None,
                    "reporter": _summary(profiles, report.reporter_id),
                    "reported_user": _summary(profiles, report.reported_user_id),
                }
            )
        )

    return AdminDashboardResponse(
        users=[AdminUserItem.model_validate(user, from_attributes=True) for user in users],
        flagged_images=[_image_item(image, profiles) for image in flagged],
        ai_detected_images=[_image_item(image, profiles) for image in ai_detected],
        pending_reports=pending_reports,
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_notifications=unread,
    )
