"""
Image API endpoints
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Response, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import ScopeParams
from app.api.v1.leaderboard import scope_response
from app.config import AppRole
from app.core.auth import CurrentUser, OptionalCurrentUser, has_role
from app.core.database import get_db
from app.core.exceptions import UpstreamServiceError
from app.core.logging import get_logger
from app.core.redis import get_redis
from app.schemas.base import MessageResponse
from app.schemas.common import ProfileSummary
from app.schemas.image import (
    AIDetectionSummary,
    ImageDetailResponse,
    ImageResponse,
    ImageUploadResponse,
    RatingCreate,
    RatingResponse,
)
from app.schemas.leaderboard import ExploreEntry, ExploreResponse
from app.schemas.report import ReportCreate, ReportResponse
from app.services.ai_detection import detect_ai_image
from app.services.images import delete_image, get_image_or_404
from app.services.leaderboard import get_explore_feed, load_profiles
from app.services.moderation import notify_ai_detected, report_image
from app.services.rate_limit import check_report_rate_limit
from app.services.rating import get_rating, submit_rating
from app.services.upload import create_image, read_upload, save_image_file, validate_image_content

logger = get_logger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/explore", response_model=ExploreResponse)
async def explore_images(
    params: Annotated[ScopeParams, Depends()],
    current_user: OptionalCurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ExploreResponse:
    """
    Best images in the viewer's region, rated or not.

    Anonymous viewers, and viewers whose region has no other members, see
    the unfiltered feed.
    """
    feed = await get_explore_feed(db, current_user, params.granularity)
    return ExploreResponse(
        scope=scope_response(feed.scope),
        entries=[
            ExploreEntry(
                rank=entry.rank,
                image=ImageResponse.model_validate(entry.image, from_attributes=True),
                owner=ProfileSummary.model_validate(entry.owner) if entry.owner else None,
                user_rating=entry.user_rating,
            )
            for entry in feed.entries
        ],
    )


@router.post("/upload", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    current_user: CurrentUser,
    file: Annotated[UploadFile, File(description="Image file")],
    title: Annotated[str, Form(min_length=1, max_length=200)],
    caption: Annotated[str | None, Form(max_length=500)] = None,
    description: Annotated[str | None, Form(max_length=2000)] = None,
    db: AsyncSession = Depends(get_db),
) -> ImageUploadResponse:
    """
    Upload a new image.

    The image is checked by the AI detector when one is configured. The
    verdict is stored with the image and returned, but never blocks the
    upload; a detector outage only means the image has no verdict.
    """
    title = title.strip()
    if not title:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Title is required")

    content = await read_upload(file)
    ext = validate_image_content(content, file.content_type, file.filename)

    detection = None
    try:
        detection = await detect_ai_image(content, file.content_type or "image/jpeg")
    except UpstreamServiceError:
        logger.warning("ai_detection_unavailable", user_id=current_user.user_id)

    file_path, image_url = save_image_file(content, current_user.user_id, ext)
    try:
        image = await create_image(
            db,
            current_user,
            image_url=image_url,
            title=title,
            caption=caption,
            description=description,
            detection=detection,
        )
        if detection is not None and detection.needs_warning:
            await notify_ai_detected(db, image)
        await db.commit()
    except SQLAlchemyError:
        file_path.unlink(missing_ok=True)
        raise

    warning = None
    summary = None
    if detection is not None:
        summary = AIDetectionSummary(
            is_ai=detection.is_ai, confidence=detection.confidence, reason=detection.reason
        )
        if detection.needs_warning:
            warning = (
                f"This image appears to be AI-generated ({detection.confidence}% confidence). "
                "It has been published and sent to moderators for review."
            )

    return ImageUploadResponse(
        message="Image uploaded successfully",
        image=ImageResponse.model_validate(image, from_attributes=True),
        ai_detection=summary,
        warning=warning,
    )


@router.get("/{image_id}", response_model=ImageDetailResponse)
async def get_image(
    image_id: Annotated[int, Path(description="Image ID")],
    current_user: OptionalCurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ImageDetailResponse:
    """Get an image with its owner and, for signed-in viewers, their own rating."""
    image = await get_image_or_404(db, image_id)
    owners = await load_profiles(db, [image.user_id])
    owner = owners.get(image.user_id)

    user_rating = None
    if current_user is not None:
        user_rating = await get_rating(db, current_user.user_id, image_id)

    response = ImageDetailResponse.model_validate(image, from_attributes=True)
    return response.model_copy(
        update={
            "owner": ProfileSummary.model_validate(owner) if owner else None,
            "user_rating": user_rating,
        }
    )


@router.delete("/{image_id}", response_model=MessageResponse)
async def remove_image(
    image_id: Annotated[int, Path(description="Image ID")],
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Delete an image. Owners can delete their own images; admins can delete any.

    Ratings, reports, streaks and notifications of the image go with it, and
    the owner's statistics are recomputed.
    """
    image = await get_image_or_404(db, image_id)
    if image.user_id != current_user.user_id and not await has_role(
        db, current_user.user_id, AppRole.ADMIN
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own images",
        )

    await delete_image(db, image, deleted_by=current_user.user_id)
    await db.commit()
    return MessageResponse(message="Image deleted")


@router.post(
    "/{image_id}/rating",
    response_model=RatingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def rate_image(
    image_id: Annotated[int, Path(description="Image ID")],
    body: RatingCreate,
    current_user: CurrentUser,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> RatingResponse:
    """
    Rate an image (1-10 scale).

    Users can rate any image but their own, once. Rating again replaces the
    previous score (200 instead of 201). The response carries the image's
    aggregates as of this rating.
    """
    result = await submit_rating(db, current_user.user_id, image_id, body.rating)
    await db.commit()

    if not result.created:
        response.status_code = status.HTTP_200_OK

    return RatingResponse(
        image_id=image_id,
        user_id=current_user.user_id,
        rating=result.rating.rating,
        created=result.created,
        average_rating=result.image.average_rating,
        total_ratings=result.image.total_ratings,
    )


@router.get("/{image_id}/rating", response_model=RatingResponse)
async def get_my_rating(
    image_id: Annotated[int, Path(description="Image ID")],
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> RatingResponse:
    """Get the caller's rating of an image (rating is null if unrated)."""
    image = await get_image_or_404(db, image_id)
    return RatingResponse(
        image_id=image_id,
        user_id=current_user.user_id,
        rating=await get_rating(db, current_user.user_id, image_id),
        average_rating=image.average_rating,
        total_ratings=image.total_ratings,
    )


@router.post(
    "/{image_id}/report",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def report_image_endpoint(
    image_id: Annotated[int, Path(description="Image ID")],
    body: ReportCreate,
    current_user: CurrentUser,
    redis_client: Annotated[redis.Redis, Depends(get_redis)],  # type: ignore[type-arg]
    db: AsyncSession = Depends(get_db),
) -> ReportResponse:
    """
    Report an image for admin review.

    A user can have one pending report per image. Admins are notified
    through the dashboard.
    """
    await check_report_rate_limit(current_user.user_id, redis_client)
    report = await report_image(db, current_user, image_id, body)
    await db.commit()
    return ReportResponse.model_validate(report)
