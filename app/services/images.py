"""
Image lookup and deletion.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ImageNotFoundError
from app.core.logging import get_logger
from app.models import AdminNotifications, Images, Ratings, Reports, Streaks
from app.services.aggregates import recalculate_user_ratings

logger = get_logger(__name__)


async def get_image_or_404(db: AsyncSession, image_id: int) -> Images:
    result = await db.execute(select(Images).where(Images.image_id == image_id))  # type: ignore[arg-type]
    image = result.scalar_one_or_none()
    if image is None:
        raise ImageNotFoundError()
    return image


async def delete_image(db: AsyncSession, image: Images, deleted_by: str) -> None:
    """
    Delete an image and everything that hangs off it, then refresh the owner's aggregates.

    Dependent rows are removed explicitly rather than relying on ON DELETE
    CASCADE, so the owner's recomputation below sees the final state on every
    backend.
    """
    image_id = image.image_id
    owner_id = image.user_id

    for model in (AdminNotifications, Streaks, Reports, Ratings):
        await db.execute(delete(model).where(model.image_id == image_id))  # type: ignore[attr-defined]
    await db.delete(image)
    await db.flush()

    await recalculate_user_ratings(db, owner_id)

    logger.info("image_deleted", image_id=image_id, owner_id=owner_id, deleted_by=deleted_by)
