"""
Location scope resolution.

A scope is the set of profiles whose images take part in a leaderboard or
explore feed. It is derived from a single location field of the viewer's
profile, chosen by granularity, and compared by exact (case-sensitive)
string equality.
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import GLOBAL_SCOPE, Granularity
from app.core.exceptions import InvalidGranularityError
from app.core.logging import get_logger
from app.models import Profiles

logger = get_logger(__name__)


@dataclass(frozen=True)
class Scope:
    """
    Resolved location filter.

    user_ids is None when the scope is unconstrained (every image qualifies).
    location_value is the viewer's value at the granularity, or None when
    unconstrained.
    """

    granularity: str
    location_value: str | None = None
    user_ids: frozenset[str] | None = None

    @property
    def is_constrained(self) -> bool:
        return self.user_ids is not None

    @property
    def streak_location(self) -> str:
        """Key under which streaks for this scope are tracked."""
        return self.location_value if self.is_constrained and self.location_value else GLOBAL_SCOPE


def validate_granularity(granularity: str) -> str:
    if granularity not in Granularity.ALL:
        raise InvalidGranularityError(granularity)
    return granularity


async def resolve_scope(
    db: AsyncSession, viewer: Profiles | None, granularity: str
) -> Scope:
    """
    Resolve the scope of a leaderboard or explore feed for a viewer.

    - Anonymous viewer, or the viewer's field at this granularity is unset:
      unconstrained.
    - Otherwise every profile whose field equals the viewer's, compared
      case-sensitively.
    - If no profile other than the viewer matches, the region is too sparse
      to rank in and the scope falls back to unconstrained.

    Raises:
        InvalidGranularityError: granularity is not one of Granularity.ALL
    """
    validate_granularity(granularity)
    unconstrained = Scope(granularity=granularity)

    if viewer is None:
        return unconstrained
    location_value = viewer.location_value(granularity)
    if location_value is None:
        return unconstrained

    column = getattr(Profiles, granularity)
    result = await db.execute(
        select(Profiles.user_id, column).where(column == location_value)  # type: ignore[call-overload]
    )
    # Re-check in Python: the database collation may compare case-insensitively
    user_ids = frozenset(user_id for user_id, value in result.all() if value == location_value)

    if not user_ids - {viewer.user_id}:
        logger.info(
            "scope_fallback_unconstrained",
            granularity=granularity,
            location_value=location_value,
        )
        return unconstrained

    return Scope(granularity=granularity, location_value=location_value, user_ids=user_ids)
