"""
Leaderboard ranking.

Images are ordered by average_rating, then total_ratings, then image_id,
all read from the cached aggregates on the images table. The same ranker
backs the leaderboard (rated images only, caller-chosen size) and the explore
feed (all images, fixed size).
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import InvalidTopLimitError
from app.core.logging import get_logger
from app.models import Images, Profiles
from app.services.location_scope import Scope, resolve_scope
from app.services.rating import list_user_ratings
from app.services.streaks import get_streaks, update_streaks

logger = get_logger(__name__)


@dataclass
class RankedImage:
    rank: int
    image: Images


@dataclass
class LeaderboardEntry:
    rank: int
    image: Images
    owner: Profiles | None
    current_streak: int = 0


@dataclass
class ExploreEntry:
    rank: int
    image: Images
    owner: Profiles | None
    user_rating: int | None = None


@dataclass
class Leaderboard:
    scope: Scope
    top: int
    entries: list[LeaderboardEntry] = field(default_factory=list)


@dataclass
class ExploreFeed:
    scope: Scope
    entries: list[ExploreEntry] = field(default_factory=list)


@dataclass
class UserStanding:
    rank: int
    profile: Profiles


def validate_top_limit(top: int) -> int:
    allowed = list(settings.LEADERBOARD_TOP_LIMITS)
    if top not in allowed:
        raise InvalidTopLimitError(top, allowed)  # type: ignore[arg-type]
    return top


async def rank_images(
    db: AsyncSession, scope: Scope, limit: int, require_rating: bool
) -> list[RankedImage]:
    """
    Rank the images in scope.

    Args:
        scope: owners whose images qualify (unconstrained when user_ids is None)
        limit: maximum number of results
        require_rating: only include images with at least one rating

    Returns:
        Up to limit images with 1-based ranks, best first
    """
    query = select(Images)
    if scope.user_ids is not None:
        query = query.where(Images.user_id.in_(sorted(scope.user_ids)))  # type: ignore[attr-defined]
    if require_rating:
        query = query.where(Images.total_ratings > 0)  # type: ignore[arg-type]
    query = query.order_by(
        desc(Images.average_rating),  # type: ignore[arg-type]
        desc(Images.total_ratings),  # type: ignore[arg-type]
        asc(Images.image_id),  # type: ignore[arg-type]
    ).limit(limit)

    result = await db.execute(query)
    return [
        RankedImage(rank=position, image=image)
        for position, image in enumerate(result.scalars().all(), start=1)
    ]


async def load_profiles(db: AsyncSession, user_ids: Iterable[str]) -> dict[str, Profiles]:
    """Batch-load profiles by id."""
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(Profiles).where(Profiles.user_id.in_(ids)))  # type: ignore[attr-defined]
    return {profile.user_id: profile for profile in result.scalars().all()}


async def get_leaderboard(
    db: AsyncSession,
    viewer: Profiles | None,
    granularity: str,
    top: int,
    now: datetime | None = None,
) -> Leaderboard:
    """
    Compute the leaderboard a viewer sees at a granularity.

    Resolves the viewer's scope, ranks rated images in it, records the top
    set for streak tracking, and annotates each entry with its owner and
    current streak.

    Raises:
        InvalidGranularityError: unknown granularity
        InvalidTopLimitError: top is not one of settings.LEADERBOARD_TOP_LIMITS
    """
    validate_top_limit(top)
    scope = await resolve_scope(db, viewer, granularity)
    ranked = await rank_images(db, scope, limit=top, require_rating=True)
    image_ids = [entry.image.image_id for entry in ranked]

    if settings.STREAK_TRACKING_ENABLED and image_ids:
        try:
            await update_streaks(db, granularity, scope.streak_location, image_ids, now=now)  # type: ignore[arg-type]
        except IntegrityError:
            # A concurrent view of the same board inserted the streak rows first
            await db.rollback()
            logger.warning(
                "streak_update_conflict",
                granularity=granularity,
                location_value=scope.streak_location,
            )
            ranked = await rank_images(db, scope, limit=top, require_rating=True)
            image_ids = [entry.image.image_id for entry in ranked]

    streaks = await get_streaks(db, granularity, image_ids)  # type: ignore[arg-type]
    owners = await load_profiles(db, (entry.image.user_id for entry in ranked))

    return Leaderboard(
        scope=scope,
        top=top,
        entries=[
            LeaderboardEntry(
                rank=entry.rank,
                image=entry.image,
                owner=owners.get(entry.image.user_id),
                current_streak=streaks.get(entry.image.image_id, 0),  # type: ignore[arg-type]
            )
            for entry in ranked
        ],
    )


async def get_explore_feed(
    db: AsyncSession, viewer: Profiles | None, granularity: str
) -> ExploreFeed:
    """
    Compute the explore feed: the best images in the viewer's scope, rated or not.

    Entries carry the viewer's own score so clients can show what is left to rate.
    """
    scope = await resolve_scope(db, viewer, granularity)
    ranked = await rank_images(db, scope, limit=settings.EXPLORE_LIMIT, require_rating=False)
    owners = await load_profiles(db, (entry.image.user_id for entry in ranked))

    own_ratings: dict[int, int] = {}
    if viewer is not None:
        own_ratings = await list_user_ratings(
            db, viewer.user_id, (entry.image.image_id for entry in ranked)  # type: ignore[misc]
        )

    return ExploreFeed(
        scope=scope,
        entries=[
            ExploreEntry(
                rank=entry.rank,
                image=entry.image,
                owner=owners.get(entry.image.user_id),
                user_rating=own_ratings.get(entry.image.image_id),  # type: ignore[arg-type]
            )
            for entry in ranked
        ],
    )


async def get_user_standings(db: AsyncSession, limit: int) -> list[UserStanding]:
    """
    Rank profiles globally by the ratings their images received.

    Profiles without any rating received are excluded. Order: average_rating
    desc, total_ratings_received desc, user_id asc.
    """
    result = await db.execute(
        select(Profiles)
        .where(Profiles.total_ratings_received > 0)  # type: ignore[arg-type]
        .order_by(
            desc(Profiles.average_rating),  # type: ignore[arg-type]
            desc(Profiles.total_ratings_received),  # type: ignore[arg-type]
            asc(Profiles.user_id),  # type: ignore[arg-type]
        )
        .limit(limit)
    )
    return [
        UserStanding(rank=position, profile=profile)
        for position, profile in enumerate(result.scalars().all(), start=1)
    ]
