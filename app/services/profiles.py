"""
Profile management and the follow graph.
"""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    DuplicateFollowError,
    FollowNotFoundError,
    ProfileExistsError,
    ProfileNotFoundError,
    SelfFollowError,
    UsernameTakenError,
)
from app.core.logging import get_logger
from app.core.security import TokenIdentity
from app.models import Follows, Images, Profiles
from app.schemas.profile import ProfileCreate, ProfileUpdate
from app.services.aggregates import recalculate_follow_counts
from app.utils.dates import utc_now

logger = get_logger(__name__)


async def get_profile_or_404(db: AsyncSession, user_id: str) -> Profiles:
    result = await db.execute(select(Profiles).where(Profiles.user_id == user_id))  # type: ignore[arg-type]
    profile = result.scalar_one_or_none()
    if profile is None:
        raise ProfileNotFoundError()
    return profile


async def is_username_taken(
    db: AsyncSession, username: str, exclude_user_id: str | None = None
) -> bool:
    """Case-insensitive username check."""
    query = select(Profiles.user_id).where(func.lower(Profiles.username) == username.lower())  # type: ignore[call-overload]
    if exclude_user_id is not None:
        query = query.where(Profiles.user_id != exclude_user_id)
    result = await db.execute(query)
    return result.first() is not None


async def create_profile(db: AsyncSession, identity: TokenIdentity, data: ProfileCreate) -> Profiles:
    """
    Create the caller's profile.

    Raises:
        ProfileExistsError: the identity already has a profile
        UsernameTakenError: another profile uses this username
    """
    existing = await db.execute(select(Profiles.user_id).where(Profiles.user_id == identity.user_id))  # type: ignore[call-overload]
    if existing.first() is not None:
        raise ProfileExistsError()
    if await is_username_taken(db, data.username):
        raise UsernameTakenError()

    profile = Profiles(
        user_id=identity.user_id,
        email=identity.email or "",
        **data.model_dump(),
    )
    db.add(profile)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same username
        await db.rollback()
        raise UsernameTakenError() from e

    logger.info("profile_created", user_id=profile.user_id, username=profile.username)
    return profile


async def update_profile(db: AsyncSession, profile: Profiles, data: ProfileUpdate) -> Profiles:
    """
    Apply a partial update to a profile.

    Raises:
        UsernameTakenError: the new username belongs to someone else
    """
    update_data = data.model_dump(exclude_unset=True)

    # Required columns cannot be cleared
    for required in ("username", "name", "age"):
        if update_data.get(required, ...) is None:
            update_data.pop(required)

    username = update_data.get("username")
    if username and username != profile.username:
        if await is_username_taken(db, username, exclude_user_id=profile.user_id):
            raise UsernameTakenError()

    for field, value in update_data.items():
        setattr(profile, field, value)
    profile.updated_at = utc_now()

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise UsernameTakenError() from e

    logger.info("profile_updated", user_id=profile.user_id, fields=sorted(update_data))
    return profile


async def make_profile_public(db: AsyncSession, profile: Profiles) -> Profiles:
    """Make a profile public. There is no way back to private."""
    if not profile.is_public:
        profile.is_public = True
        profile.updated_at = utc_now()
        await db.flush()
        logger.info("profile_made_public", user_id=profile.user_id)
    return profile


async def is_following(db: AsyncSession, follower_id: str, following_id: str) -> bool:
    result = await db.execute(
        select(Follows.follower_id).where(  # type: ignore[call-overload]
            Follows.follower_id == follower_id,
            Follows.following_id == following_id,
        )
    )
    return result.first() is not None


async def follow_user(db: AsyncSession, follower: Profiles, following_id: str) -> Profiles:
    """
    Follow a profile and refresh both profiles' counters.

    Returns:
        The followed profile with refreshed counters

    Raises:
        SelfFollowError: follower_id == following_id
        ProfileNotFoundError: target profile does not exist
        DuplicateFollowError: already following
    """
    if follower.user_id == following_id:
        raise SelfFollowError()
    await get_profile_or_404(db, following_id)
    if await is_following(db, follower.user_id, following_id):
        raise DuplicateFollowError()

    db.add(Follows(follower_id=follower.user_id, following_id=following_id))
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateFollowError() from e

    await recalculate_follow_counts(db, follower.user_id)
    target = await recalculate_follow_counts(db, following_id)

    logger.info("user_followed", follower_id=follower.user_id, following_id=following_id)
    return target  # type: ignore[return-value]


async def unfollow_user(db: AsyncSession, follower: Profiles, following_id: str) -> Profiles:
    """
    Remove a follow and refresh both profiles' counters.

    Raises:
        FollowNotFoundError: not following this profile
    """
    result = await db.execute(
        select(Follows).where(
            Follows.follower_id == follower.user_id,  # type: ignore[arg-type]
            Follows.following_id == following_id,  # type: ignore[arg-type]
        )
    )
    follow = result.scalar_one_or_none()
    if follow is None:
        raise FollowNotFoundError()

    await db.delete(follow)
    await db.flush()

    await recalculate_follow_counts(db, follower.user_id)
    target = await recalculate_follow_counts(db, following_id)

    logger.info("user_unfollowed", follower_id=follower.user_id, following_id=following_id)
    return target  # type: ignore[return-value]


async def can_view_content(db: AsyncSession, viewer: Profiles | None, profile: Profiles) -> bool:
    """A profile's images are visible if it is public, the viewer's own, or followed by the viewer."""
    if profile.is_public:
        return True
    if viewer is None:
        return False
    if viewer.user_id == profile.user_id:
        return True
    return await is_following(db, viewer.user_id, profile.user_id)


async def list_profile_images(db: AsyncSession, profile: Profiles) -> list[Images]:
    """A profile's images, newest first."""
    result = await db.execute(
        select(Images)
        .where(Images.user_id == profile.user_id)  # type: ignore[arg-type]
        .order_by(Images.created_at.desc(), Images.image_id.desc())  # type: ignore[attr-defined]
    )
    return list(result.scalars().all())
