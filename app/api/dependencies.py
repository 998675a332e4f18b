"""
Common query parameter models for API endpoints.

These Pydantic models are used with FastAPI's Depends() to provide reusable
query parameter sets, reducing code duplication across routes.
"""

from pydantic import BaseModel, Field

from app.config import Granularity


class ScopeParams(BaseModel):
    """Location granularity for the leaderboard and explore feed."""

    granularity: str = Field(
        default=Granularity.CONTINENT,
        description="continent, country, state, district or city",
    )


class LeaderboardParams(ScopeParams):
    """Leaderboard query parameters. top is checked against LEADERBOARD_TOP_LIMITS."""

    top: int = Field(default=10, description="Number of entries (10, 100 or 1000)")
