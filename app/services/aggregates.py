"""
Aggregate maintenance.

Images and profiles cache statistics derived from the ratings and follows
tables. Every function here recomputes a cache from the raw rows in a single
UPDATE statement, so the result never depends on a previously cached value
and two concurrent recomputations cannot interleave into a torn state.

Callers are responsible for running these in the same transaction as the
write that invalidated the cache (see app.services.rating.submit_rating).
"""

from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models import Follows, Images, Profiles, Ratings
from app.utils.dates import utc_now

logger = get_logger(__name__)

# Averages are compared with a tolerance when looking for stale rows
_AVERAGE_TOLERANCE = 1e-6


@dataclass
class ReconcileResult:
    images_checked: int = 0
    images_corrected: int = 0
    profiles_checked: int = 0
    profiles_corrected: int = 0


async def recalculate_image_ratings(db: AsyncSession, image_id: int) -> Images | None:
    """
    Recompute average_rating and total_ratings for an image.

    Both values come from the same UPDATE, computed over the ratings table:
    - total_ratings: number of ratings
    - average_rating: arithmetic mean of the scores, 0 when there are none

    Returns the refreshed image, or None if it does not exist.
    """
    average = (
        select(func.coalesce(func.avg(Ratings.rating), 0.0))
        .where(Ratings.image_id == image_id)  # type: ignore[arg-type]
        .scalar_subquery()
    )
    count = (
        select(func.count())
        .select_from(Ratings)
        .where(Ratings.image_id == image_id)  # type: ignore[arg-type]
        .scalar_subquery()
    )

    await db.execute(
        update(Images)
        .where(Images.image_id == image_id)  # type: ignore[arg-type]
        .values(average_rating=average, total_ratings=count, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )

    result = await db.execute(
        select(Images)
        .where(Images.image_id == image_id)  # type: ignore[arg-type]
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def recalculate_user_ratings(db: AsyncSession, user_id: str) -> Profiles | None:
    """
    Recompute the rating aggregates of a profile over all images it owns.

    - total_ratings_received: number of ratings on owned images
    - average_rating: mean of every one of those scores, which equals the
      mean of the image averages weighted by their rating counts
    - total_images: number of owned images

    Returns the refreshed profile, or None if it does not exist.
    """
    owned_ratings = (
        select(Ratings.rating)
        .join(Images, Images.image_id == Ratings.image_id)  # type: ignore[arg-type]
        .where(Images.user_id == user_id)  # type: ignore[arg-type]
        .subquery()
    )
    average = select(func.coalesce(func.avg(owned_ratings.c.rating), 0.0)).scalar_subquery()
    count = select(func.count()).select_from(owned_ratings).scalar_subquery()
    images = (
        select(func.count())
        .select_from(Images)
        .where(Images.user_id == user_id)  # type: ignore[arg-type]
        .scalar_subquery()
    )

    await db.execute(
        update(Profiles)
        .where(Profiles.user_id == user_id)  # type: ignore[arg-type]
        .values(
            average_rating=average,
            total_ratings_received=count,
            total_images=images,
            updated_at=utc_now(),
        )
        .execution_options(synchronize_session=False)
    )

    result = await db.execute(
        select(Profiles)
        .where(Profiles.user_id == user_id)  # type: ignore[arg-type]
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def recalculate_follow_counts(db: AsyncSession, user_id: str) -> Profiles | None:
    """Recompute followers_count and following_count of a profile."""
    followers = (
        select(func.count())
        .select_from(Follows)
        .where(Follows.following_id == user_id)  # type: ignore[arg-type]
        .scalar_subquery()
    )
    following = (
        select(func.count())
        .select_from(Follows)
        .where(Follows.follower_id == user_id)  # type: ignore[arg-type]
        .scalar_subquery()
    )

    await db.execute(
        update(Profiles)
        .where(Profiles.user_id == user_id)  # type: ignore[arg-type]
        .values(followers_count=followers, following_count=following)
        .execution_options(synchronize_session=False)
    )

    result = await db.execute(
        select(Profiles)
        .where(Profiles.user_id == user_id)  # type: ignore[arg-type]
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _differs(cached_average: float, cached_count: int, average: float, count: int) -> bool:
    return cached_count != count or abs(float(cached_average) - average) > _AVERAGE_TOLERANCE


async def reconcile_all_aggregates(db: AsyncSession) -> ReconcileResult:
    """
    Compare every cached aggregate with the raw rows and repair the stale ones.

    Runs out of band (arq job or admin endpoint). Only rows that actually
    differ are rewritten, each through the same recompute function the
    write path uses.
    """
    result = ReconcileResult()

    image_stats = (
        select(
            Ratings.image_id,
            func.avg(Ratings.rating).label("rating_average"),
            func.count().label("rating_count"),
        )
        .group_by(Ratings.image_id)  # type: ignore[arg-type]
        .subquery()
    )
    rows = await db.execute(
        select(
            Images.image_id,
            Images.average_rating,
            Images.total_ratings,
            image_stats.c.rating_average,
            image_stats.c.rating_count,
        ).outerjoin(image_stats, image_stats.c.image_id == Images.image_id)  # type: ignore[arg-type]
    )
    stale_images = []
    for image_id, cached_average, cached_count, average, count in rows.all():
        result.images_checked += 1
        if _differs(cached_average, cached_count, float(average or 0), int(count or 0)):
            stale_images.append(image_id)

    for image_id in stale_images:
        await recalculate_image_ratings(db, image_id)
    result.images_corrected = len(stale_images)

    owner_stats = (
        select(
            Images.user_id,
            func.avg(Ratings.rating).label("rating_average"),
            func.count(Ratings.rating).label("rating_count"),  # type: ignore[arg-type]
        )
        .join(Ratings, Ratings.image_id == Images.image_id)  # type: ignore[arg-type]
        .group_by(Images.user_id)  # type: ignore[arg-type]
        .subquery()
    )
    image_counts = (
        select(Images.user_id, func.count().label("images"))
        .group_by(Images.user_id)  # type: ignore[arg-type]
        .subquery()
    )
    follower_counts = (
        select(Follows.following_id.label("user_id"), func.count().label("followers"))  # type: ignore[attr-defined]
        .group_by(Follows.following_id)  # type: ignore[arg-type]
        .subquery()
    )
    following_counts = (
        select(Follows.follower_id.label("user_id"), func.count().label("following"))  # type: ignore[attr-defined]
        .group_by(Follows.follower_id)  # type: ignore[arg-type]
        .subquery()
    )
    rows = await db.execute(
        select(
            Profiles.user_id,
            Profiles.average_rating,
            Profiles.total_ratings_received,
            Profiles.total_images,
            Profiles.followers_count,
            Profiles.following_count,
            owner_stats.c.rating_average,
            owner_stats.c.rating_count,
            image_counts.c.images,
            follower_counts.c.followers,
            following_counts.c.following,
        )
        .outerjoin(owner_stats, owner_stats.c.user_id == Profiles.user_id)  # type: ignore[arg-type]
        .outerjoin(image_counts, image_counts.c.user_id == Profiles.user_id)  # type: ignore[arg-type]
        .outerjoin(follower_counts, follower_counts.c.user_id == Profiles.user_id)  # type: ignore[arg-type]
        .outerjoin(following_counts, following_counts.c.user_id == Profiles.user_id)  # type: ignore[arg-type]
    )
    stale_ratings = []
    stale_follows = []
    for row in rows.all():
        result.profiles_checked += 1
        if _differs(
            row.average_rating, row.total_ratings_received, float(row.rating_average or 0), int(row.rating_count or 0)
        ) or row.total_images != int(row.images or 0):
            stale_ratings.append(row.user_id)
        if row.followers_count != int(row.followers or 0) or row.following_count != int(
            row.following or 0
        ):
            stale_follows.append(row.user_id)

    for user_id in stale_ratings:
        await recalculate_user_ratings(db, user_id)
    for user_id in stale_follows:
        await recalculate_follow_counts(db, user_id)
    result.profiles_corrected = len(set(stale_ratings) | set(stale_follows))

    logger.info(
        "aggregates_reconciled",
        images_checked=result.images_checked,
        images_corrected=result.images_corrected,
        profiles_checked=result.profiles_checked,
        profiles_corrected=result.profiles_corrected,
    )
    return result
