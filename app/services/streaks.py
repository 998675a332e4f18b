"""
Streak tracking.

A streak counts consecutive ranking periods (calendar days in
settings.STREAK_TIMEZONE) in which an image appeared in a leaderboard's top
set. Streaks are updated whenever a leaderboard is computed; updating twice in
the same period is a no-op.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models import Streaks
from app.utils.dates import period_start, ranking_period, utc_now

logger = get_logger(__name__)


async def update_streaks(
    db: AsyncSession,
    granularity: str,
    location_value: str,
    image_ids: Sequence[int],
    now: datetime | None = None,
) -> dict[int, int]:
    """
    Record that image_ids form the current top set for (granularity, location_value).

    For each image in the set:
    - already counted in the current period: unchanged
    - last counted in the immediately preceding period: current_streak + 1
    - otherwise: current_streak = 1

    Rows of the same granularity and location_value that are not in the set,
    and were last counted before the current period, are reset to 0. The
    reset value is kept in held_streak, so an image that re-enters the set
    later in the same period (a larger board of the same scope) still extends
    its streak. longest_streak never decreases.

    Returns {image_id: current_streak} for the top set.
    """
    now = now or utc_now()
    current = ranking_period(now)
    previous = current - timedelta(days=1)
    started_at = period_start(now)
    top_ids = set(image_ids)

    conditions = [Streaks.location_value == location_value]
    if top_ids:
        conditions.append(Streaks.image_id.in_(top_ids))  # type: ignore[attr-defined]
    result = await db.execute(
        select(Streaks).where(
            Streaks.streak_type == granularity,  # type: ignore[arg-type]
            or_(*conditions),
        )
    )
    rows = {streak.image_id: streak for streak in result.scalars().all()}

    extended = 0
    for image_id in image_ids:
        streak = rows.get(image_id)
        if streak is None:
            streak = Streaks(
                image_id=image_id,
                streak_type=granularity,
                location_value=location_value,
                current_streak=1,
                longest_streak=1,
                last_in_top_at=now,
            )
            db.add(streak)
            rows[image_id] = streak
            continue

        last = ranking_period(streak.last_in_top_at) if streak.last_in_top_at else None
        if last == current:
            continue
        if last == previous:
            # A smaller board viewed earlier this period may have reset the row
            streak.current_streak = (streak.current_streak or streak.held_streak) + 1
            extended += 1
        else:
            streak.current_streak = 1
        streak.held_streak = 0
        streak.longest_streak = max(streak.longest_streak, streak.current_streak)
        streak.last_in_top_at = now
        streak.location_value = location_value
        streak.updated_at = now

    reset = 0
    for image_id, streak in rows.items():
        if image_id in top_ids or streak.location_value != location_value:
            continue
        if streak.current_streak == 0:
            continue
        if streak.last_in_top_at is not None and streak.last_in_top_at >= started_at:
            continue
        streak.held_streak = streak.current_streak
        streak.current_streak = 0
        streak.updated_at = now
        reset += 1

    await db.flush()

    logger.debug(
        "streaks_updated",
        granularity=granularity,
        location_value=location_value,
        top_size=len(top_ids),
        extended=extended,
        reset=reset,
    )
    return {image_id: rows[image_id].current_streak for image_id in image_ids}


async def get_streaks(
    db: AsyncSession, granularity: str, image_ids: Sequence[int]
) -> dict[int, int]:
    """Return {image_id: current_streak} for images that have a streak row at this granularity."""
    if not image_ids:
        return {}
    result = await db.execute(
        select(Streaks.image_id, Streaks.current_streak).where(  # type: ignore[call-overload]
            Streaks.streak_type == granularity,
            Streaks.image_id.in_(list(image_ids)),
        )
    )
    return {image_id: current_streak for image_id, current_streak in result.all()}
