"""
Authentication dependencies for FastAPI route protection.

This module provides dependency functions for:
- Verifying the identity provider's bearer token
- Loading the caller's profile from the database
- Protecting admin routes with a role check
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AppRole
from app.core.database import get_db
from app.core.logging import set_user_context
from app.core.security import TokenIdentity, verify_access_token
from app.models import Profiles, UserRoles

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> TokenIdentity:
    """
    Verify the bearer token and return the identity it carries.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = verify_access_token(credentials.credentials)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_user_context(identity.user_id)
    return identity


async def get_current_user(
    identity: Annotated[TokenIdentity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Profiles:
    """
    Load the caller's profile.

    Raises:
        HTTPException: 403 if the identity has not created a profile yet
    """
    result = await db.execute(select(Profiles).where(Profiles.user_id == identity.user_id))  # type: ignore[arg-type]
    profile = result.scalar_one_or_none()

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Profile setup required",
        )

    return profile


async def get_optional_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> Profiles | None:
    """
    Get the caller's profile if authenticated, otherwise return None.

    Used by the leaderboard and explore feed, which fall back to an
    unconstrained scope for anonymous viewers.
    """
    if credentials is None:
        return None

    identity = verify_access_token(credentials.credentials)
    if identity is None:
        return None

    set_user_context(identity.user_id)
    result = await db.execute(select(Profiles).where(Profiles.user_id == identity.user_id))  # type: ignore[arg-type]
    return result.scalar_one_or_none()


async def has_role(db: AsyncSession, user_id: str, role: str) -> bool:
    """Check whether a user holds a role."""
    result = await db.execute(
        select(UserRoles.user_id).where(  # type: ignore[call-overload]
            UserRoles.user_id == user_id,
            UserRoles.role == role,
        )
    )
    return result.first() is not None


async def require_admin(
    current_user: Annotated[Profiles, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Profiles:
    """
    Require current user to be an admin.

    Raises:
        HTTPException: 403 if user is not an admin
    """
    if not await has_role(db, current_user.user_id, AppRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


CurrentIdentity = Annotated[TokenIdentity, Depends(get_current_identity)]
CurrentUser = Annotated[Profiles, Depends(get_current_user)]
OptionalCurrentUser = Annotated[Profiles | None, Depends(get_optional_current_user)]
AdminUser = Annotated[Profiles, Depends(require_admin)]
