"""
Schemas embedded in several responses.
"""

from pydantic import BaseModel


class ProfileSummary(BaseModel):
    """Minimal profile info for embedding in image, leaderboard and report responses"""

    user_id: str
    username: str
    name: str | None = None
    avatar_url: str | None = None
    badge_rank: int | None = None

    # Allow Pydantic to read from SQLAlchemy model attributes (not just dicts)
    model_config = {"from_attributes": True}
