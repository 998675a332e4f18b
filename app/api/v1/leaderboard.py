"""
Leaderboard API endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import LeaderboardParams
from app.core.auth import OptionalCurrentUser
from app.core.database import get_db
from app.schemas.common import ProfileSummary
from app.schemas.image import ImageResponse
from app.schemas.leaderboard import (
    LeaderboardEntry,
    LeaderboardResponse,
    ScopeResponse,
    UserStandingEntry,
    UserStandingsResponse,
)
from app.services.leaderboard import get_leaderboard, get_user_standings
from app.services.location_scope import Scope

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def scope_response(scope: Scope) -> ScopeResponse:
    return ScopeResponse(
        granularity=scope.granularity,
        location_value=scope.location_value,
        constrained=scope.is_constrained,
    )


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(
    params: Annotated[LeaderboardParams, Depends()],
    current_user: OptionalCurrentUser,
    db: AsyncSession = Depends(get_db),
) -> LeaderboardResponse:
    """
    Top rated images in the viewer's region.

    Only images with at least one rating are ranked. Order: average rating,
    then number of ratings, then oldest upload first. Each entry carries
    the number of consecutive days the image has held a place on this board.
    """
    board = await get_leaderboard(db, current_user, params.granularity, params.top)
    # Streak bookkeeping happened while computing the board
    await db.commit()

    return LeaderboardResponse(
        scope=scope_response(board.scope),
        top=board.top,
        entries=[
            LeaderboardEntry(
                rank=entry.rank,
                image=ImageResponse.model_validate(entry.image, from_attributes=True),
                owner=ProfileSummary.model_validate(entry.owner) if entry.owner else None,
                current_streak=entry.current_streak,
            )
            for entry in board.entries
        ],
    )


@router.get("/users", response_model=UserStandingsResponse)
async def user_standings(
    limit: Annotated[int, Query(ge=1, le=100, description="Number of users")] = 10,
    db: AsyncSession = Depends(get_db),
) -> UserStandingsResponse:
    """Global ranking of users by the ratings their images received."""
    standings = await get_user_standings(db, limit=limit)
    return UserStandingsResponse(
        entries=[
            UserStandingEntry(
                rank=standing.rank,
                profile=ProfileSummary.model_validate(standing.profile),
                average_rating=standing.profile.average_rating,
                total_ratings_received=standing.profile.total_ratings_received,
            )
            for standing in standings
        ]
    )
