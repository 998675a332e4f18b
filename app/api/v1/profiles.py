"""
Profile API endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentIdentity, CurrentUser, OptionalCurrentUser
from app.core.database import get_db
from app.schemas.image import ImageListResponse, ImageResponse
from app.schemas.profile import (
    FollowResponse,
    ProfileCreate,
    ProfilePrivateResponse,
    ProfileResponse,
    ProfileUpdate,
    UsernameAvailability,
    normalize_username,
)
from app.services.profiles import (
    can_view_content,
    create_profile,
    follow_user,
    get_profile_or_404,
    is_username_taken,
    list_profile_images,
    make_profile_public,
    unfollow_user,
    update_profile,
)

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("", response_model=ProfilePrivateResponse, status_code=status.HTTP_201_CREATED)
async def create_my_profile(
    body: ProfileCreate,
    identity: CurrentIdentity,
    db: AsyncSession = Depends(get_db),
) -> ProfilePrivateResponse:
    """
    Create the caller's profile.

    Every other authenticated endpoint requires a profile, so this is the
    first call a new account makes.
    """
    profile = await create_profile(db, identity, body)
    await db.commit()
    return ProfilePrivateResponse.model_validate(profile, from_attributes=True)


@router.get("/check-username", response_model=UsernameAvailability)
async def check_username(
    username: Annotated[str, Query(description="Username to check")],
    db: AsyncSession = Depends(get_db),
) -> UsernameAvailability:
    """Check whether a username is valid and free."""
    try:
        normalized = normalize_username(username)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    taken = await is_username_taken(db, normalized)
    return UsernameAvailability(username=normalized, available=not taken)


@router.get("/me", response_model=ProfilePrivateResponse)
async def get_my_profile(current_user: CurrentUser) -> ProfilePrivateResponse:
    return ProfilePrivateResponse.model_validate(current_user, from_attributes=True)


@router.patch("/me", response_model=ProfilePrivateResponse)
async def update_my_profile(
    body: ProfileUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ProfilePrivateResponse:
    """Update the caller's profile. Only provided fields change."""
    profile = await update_profile(db, current_user, body)
    await db.commit()
    return ProfilePrivateResponse.model_validate(profile, from_attributes=True)


@router.post("/me/public", response_model=ProfilePrivateResponse)
async def make_my_profile_public(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ProfilePrivateResponse:
    """Make the caller's profile public. This cannot be undone."""
    profile = await make_profile_public(db, current_user)
    await db.commit()
    return ProfilePrivateResponse.model_validate(profile, from_attributes=True)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: Annotated[str, Path(description="Profile ID")],
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    profile = await get_profile_or_404(db, user_id)
    return ProfileResponse.model_validate(profile, from_attributes=True)


@router.post(
    "/{user_id}/follow",
    response_model=FollowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def follow(
    user_id: Annotated[str, Path(description="Profile to follow")],
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> FollowResponse:
    target = await follow_user(db, current_user, user_id)
    await db.commit()
    return FollowResponse(
        follower_id=current_user.user_id,
        following_id=user_id,
        following=True,
        followers_count=target.followers_count,
    )


@router.delete("/{user_id}/follow", response_model=FollowResponse)
async def unfollow(
    user_id: Annotated[str, Path(description="Profile to unfollow")],
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> FollowResponse:
    target = await unfollow_user(db, current_user, user_id)
    await db.commit()
    return FollowResponse(
        follower_id=current_user.user_id,
        following_id=user_id,
        following=False,
        followers_count=target.followers_count,
    )


@router.get("/{user_id}/images", response_model=ImageListResponse)
async def get_profile_images(
    user_id: Annotated[str, Path(description="Profile ID")],
    current_user: OptionalCurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ImageListResponse:
    """
    List a profile's images, newest first.

    Private profiles show their images only to themselves and their followers.
    """
    profile = await get_profile_or_404(db, user_id)
    if not await can_view_content(db, current_user, profile):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This profile is private. Follow it to see its images.",
        )

    images = await list_profile_images(db, profile)
    return ImageListResponse(
        total=len(images),
        images=[ImageResponse.model_validate(image, from_attributes=True) for image in images],
    )
