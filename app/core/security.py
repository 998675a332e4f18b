"""
Access token handling.

Sign-in itself is owned by the external identity provider. This module only
verifies the JWTs it issues (shared HS256 secret) and can mint equivalent
tokens for tooling and tests.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from app.config import settings


@dataclass(frozen=True)
class TokenIdentity:
    """Opaque authenticated identity carried by an access token."""

    user_id: str
    email: str | None = None


def create_access_token(
    user_id: str, email: str | None = None, expires_delta: timedelta | None = None
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: Identity provider subject (becomes the "sub" claim)
        email: Optional email claim
        expires_delta: Optional custom expiration time (defaults to settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload: dict[str, object] = {
        "sub": user_id,
        "exp": datetime.now(UTC) + expires_delta,
        "type": "access",
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> TokenIdentity | None:
    """
    Verify and decode a JWT access token.

    Returns:
        The identity if the token is valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": True, "verify_signature": True},
        )
    except jwt.PyJWTError:
        return None

    if payload.get("type") != "access":
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None

    email = payload.get("email")
    return TokenIdentity(user_id=subject, email=email if isinstance(email, str) else None)
