"""
Pydantic schemas for Profile endpoints
"""

import re

from pydantic import BaseModel, Field, field_validator

from app.models.profile import ProfileBase
from app.schemas.base import UTCDatetime

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")

LOCATION_FIELDS = ("continent", "country", "country_code", "state", "district", "city")


def normalize_username(value: str) -> str:
    """Validate a username and return its stored (lower-case) form."""
    value = value.strip()
    if not USERNAME_PATTERN.match(value):
        raise ValueError(
            "Username must be 3-20 characters and contain only letters, numbers and underscores"
        )
    return value.lower()


def _clean_location(value: str | None) -> str | None:
    if value is None:
        return None
    # Blank means unset, so the profile is unconstrained at that level
    return value.strip() or None


class ProfileCreate(BaseModel):
    """Schema for creating the caller's profile. Identity and email come from the token."""

    username: str
    name: str = Field(min_length=2, max_length=50)
    age: int = Field(ge=13, le=120)
    avatar_url: str | None = Field(default=None, max_length=500)

    continent: str | None = Field(default=None, max_length=50)
    country: str | None = Field(default=None, max_length=100)
    country_code: str | None = Field(default=None, max_length=2)
    state: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)

    is_public: bool = False

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return normalize_username(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator(*LOCATION_FIELDS)
    @classmethod
    def clean_location(cls, v: str | None) -> str | None:
        return _clean_location(v)


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's profile - all fields optional"""

    username: str | None = None
    name: str | None = Field(default=None, min_length=2, max_length=50)
    age: int | None = Field(default=None, ge=13, le=120)
    avatar_url: str | None = Field(default=None, max_length=500)

    continent: str | None = Field(default=None, max_length=50)
    country: str | None = Field(default=None, max_length=100)
    country_code: str | None = Field(default=None, max_length=2)
    state: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return normalize_username(v)

    @field_validator(*LOCATION_FIELDS)
    @classmethod
    def clean_location(cls, v: str | None) -> str | None:
        return _clean_location(v)


class ProfileResponse(ProfileBase):
    """
    Public view of a profile.

    Inherits public fields from ProfileBase and adds the derived statistics.
    Does NOT include email.
    """

    user_id: str
    badge_rank: int | None = None
    total_images: int
    followers_count: int
    following_count: int
    average_rating: float
    total_ratings_received: int
    created_at: UTCDatetime


class ProfilePrivateResponse(ProfileResponse):
    """The caller's own profile, including contact info"""

    email: str
    updated_at: UTCDatetime


class FollowResponse(BaseModel):
    """Result of a follow or unfollow"""

    follower_id: str
    following_id: str
    following: bool
    followers_count: int


class UsernameAvailability(BaseModel):
    username: str
    available: bool
