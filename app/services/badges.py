"""
Badge assignment.

The global top profiles by ratings received hold badge ranks 1..BADGE_COUNT.
Assignment is a full recompute: every other profile loses its badge.
"""

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.logging import get_logger
from app.models import Profiles
from app.services.leaderboard import get_user_standings
from app.utils.dates import utc_now

logger = get_logger(__name__)


async def assign_badges(db: AsyncSession) -> list[str]:
    """
    Recompute badge ranks.

    Returns:
        user_ids of the badge holders, rank 1 first
    """
    standings = await get_user_standings(db, limit=settings.BADGE_COUNT)
    winners = [standing.profile.user_id for standing in standings]

    clear = update(Profiles).where(Profiles.badge_rank.is_not(None))  # type: ignore[union-attr]
    if winners:
        clear = clear.where(Profiles.user_id.not_in(winners))  # type: ignore[attr-defined]
    await db.execute(clear.values(badge_rank=None).execution_options(synchronize_session="fetch"))

    now = utc_now()
    for standing in standings:
        standing.profile.badge_rank = standing.rank
        standing.profile.updated_at = now
    await db.flush()

    logger.info("badges_assigned", winners=winners)
    return winners
