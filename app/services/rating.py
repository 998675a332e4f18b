"""
Rating store.

A rating is the (rater, image) -> score mapping. Submitting a rating is an
upsert followed by recomputation of the image and owner aggregates, all in
the caller's transaction.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AggregateConsistencyError,
    ImageNotFoundError,
    InvalidScoreError,
    SelfRatingError,
)
from app.core.logging import get_logger
from app.models import Images, Ratings
from app.services.aggregates import recalculate_image_ratings, recalculate_user_ratings
from app.utils.dates import utc_now

logger = get_logger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10


@dataclass
class RatingResult:
    rating: Ratings
    image: Images
    created: bool


def validate_score(score: object) -> int:
    """Return score if it is an integer in [1, 10], else raise InvalidScoreError."""
    # bool is an int subclass but True is not a score
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidScoreError(score)  # type: ignore[arg-type]
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidScoreError(score)
    return score


async def submit_rating(db: AsyncSession, rater_id: str, image_id: int, score: int) -> RatingResult:
    """
    Create or replace the rater's score for an image.

    The image row is locked first, so concurrent submissions for the same
    image serialize and each recomputation sees every committed rating.
    The upsert and both aggregate recomputations happen in the caller's
    transaction; if recomputation fails nothing is committed.

    Raises:
        InvalidScoreError: score is not an integer in [1, 10]
        ImageNotFoundError: image does not exist
        SelfRatingError: rater owns the image
        AggregateConsistencyError: aggregates could not be recomputed
    """
    validate_score(score)

    result = await db.execute(
        select(Images)
        .where(Images.image_id == image_id)  # type: ignore[arg-type]
        .with_for_update()
    )
    image = result.scalar_one_or_none()
    if image is None:
        raise ImageNotFoundError()
    if image.user_id == rater_id:
        raise SelfRatingError()

    result = await db.execute(
        select(Ratings).where(
            Ratings.user_id == rater_id,  # type: ignore[arg-type]
            Ratings.image_id == image_id,  # type: ignore[arg-type]
        )
    )
    rating = result.scalar_one_or_none()

    created = rating is None
    if rating is None:
        rating = Ratings(user_id=rater_id, image_id=image_id, rating=score)
        db.add(rating)
    else:
        rating.rating = score
        rating.updated_at = utc_now()
    await db.flush()

    try:
        refreshed = await recalculate_image_ratings(db, image_id)
        await recalculate_user_ratings(db, image.user_id)
    except SQLAlchemyError as e:
        logger.error(
            "aggregate_recalculation_failed",
            image_id=image_id,
            owner_id=image.user_id,
            rater_id=rater_id,
            error=str(e),
        )
        await db.rollback()
        raise AggregateConsistencyError() from e

    logger.info(
        "rating_submitted",
        image_id=image_id,
        rater_id=rater_id,
        rating=score,
        created=created,
        average_rating=refreshed.average_rating if refreshed else None,
        total_ratings=refreshed.total_ratings if refreshed else None,
    )
    return RatingResult(rating=rating, image=refreshed or image, created=created)


async def get_rating(db: AsyncSession, rater_id: str, image_id: int) -> int | None:
    """Return the rater's score for an image, or None if they have not rated it."""
    result = await db.execute(
        select(Ratings.rating).where(  # type: ignore[call-overload]
            Ratings.user_id == rater_id,
            Ratings.image_id == image_id,
        )
    )
    return result.scalar_one_or_none()


async def list_user_ratings(
    db: AsyncSession, rater_id: str, image_ids: Iterable[int]
) -> dict[int, int]:
    """Return {image_id: score} for the images in image_ids the rater has scored."""
    ids = list(image_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Ratings.image_id, Ratings.rating).where(  # type: ignore[call-overload]
            Ratings.user_id == rater_id,
            Ratings.image_id.in_(ids),  # type: ignore[attr-defined]
        )
    )
    return {image_id: score for image_id, score in result.all()}
