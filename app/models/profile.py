"""
SQLModel-based Profile models with inheritance for security

ProfileBase (shared public fields)
    ├─> Profiles (database table, adds email and derived statistics)
    └─> ProfileCreate/ProfileUpdate/ProfileResponse (API schemas, defined in app/schemas)

The primary key is the identity provider's subject, so a profile is created
by the authenticated user rather than by the database.
"""

from datetime import datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from app.utils.dates import utc_now


class ProfileBase(SQLModel):
    """
    Base model with shared public fields for Profiles.

    These fields are safe to expose via the API.
    """

    # Stored lower-case, so uniqueness is case-insensitive
    username: str = Field(max_length=30)
    name: str | None = Field(default=None, max_length=100)
    age: int | None = Field(default=None)
    avatar_url: str | None = Field(default=None, max_length=500)

    # Location, broadest first. Scoping compares a single field by exact match.
    continent: str | None = Field(default=None, max_length=50)
    country: str | None = Field(default=None, max_length=100)
    country_code: str | None = Field(default=None, max_length=2)
    state: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)

    is_public: bool = Field(default=False)


class Profiles(ProfileBase, table=True):
    """
    Database table for user profiles.

    Derived fields (never written by clients):
    - badge_rank: global top-3 standing, set by the badge assigner
    - total_images, followers_count, following_count: counters
    - average_rating, total_ratings_received: rating aggregates over owned images
    """

    __tablename__ = "profiles"

    __table_args__ = (
        Index("idx_profiles_username", "username", unique=True),
        Index("idx_profiles_continent", "continent"),
        Index("idx_profiles_country", "country"),
        Index("idx_profiles_state", "state"),
        Index("idx_profiles_district", "district"),
        Index("idx_profiles_city", "city"),
        Index("idx_profiles_standing", "average_rating", "total_ratings_received"),
    )

    user_id: str = Field(primary_key=True, max_length=36)

    # Contact info (privacy-sensitive)
    email: str = Field(max_length=255)

    # Derived
    badge_rank: int | None = Field(default=None)
    total_images: int = Field(default=0)
    followers_count: int = Field(default=0)
    following_count: int = Field(default=0)
    average_rating: float = Field(default=0.0)
    total_ratings_received: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def location_value(self, granularity: str) -> str | None:
        """Return this profile's value at the given granularity (None when unset or blank)."""
        value = getattr(self, granularity, None)
        return value or None
