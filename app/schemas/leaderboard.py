"""
Pydantic schemas for the leaderboard and explore feed
"""

from pydantic import BaseModel

from app.schemas.common import ProfileSummary
from app.schemas.image import ImageResponse


class ScopeResponse(BaseModel):
    """
    The location filter a board was computed against.

    location_value is None when the board is unconstrained (anonymous viewer,
    unset location field, or no other profile in the viewer's region).
    """

    granularity: str
    location_value: str | None = None
    constrained: bool


class LeaderboardEntry(BaseModel):
    rank: int
    image: ImageResponse
    owner: ProfileSummary | None = None
    current_streak: int = 0


class LeaderboardResponse(BaseModel):
    scope: ScopeResponse
    top: int
    entries: list[LeaderboardEntry]


class ExploreEntry(BaseModel):
    rank: int
    image: ImageResponse
    owner: ProfileSummary | None = None
    user_rating: int | None = None


class ExploreResponse(BaseModel):
    scope: ScopeResponse
    entries: list[ExploreEntry]


class UserStandingEntry(BaseModel):
    rank: int
    profile: ProfileSummary
    average_rating: float
    total_ratings_received: int


class UserStandingsResponse(BaseModel):
    entries: list[UserStandingEntry]
