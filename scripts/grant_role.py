#!/usr/bin/env python3
"""
Grant or revoke a role for a profile.

Roles are never granted through the API. The profile must exist (the user
has signed in and created it).

Usage:
    uv run python scripts/grant_role.py <username> admin
    uv run python scripts/grant_role.py <username> admin --revoke
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import delete, select

from app.config import AppRole
from app.core.database import get_async_session
from app.models import Profiles, UserRoles

ROLES = (AppRole.ADMIN, AppRole.MODERATOR, AppRole.USER)


async def grant_role(username: str, role: str, revoke: bool) -> int:
    async with get_async_session() as db:
        result = await db.execute(select(Profiles).where(Profiles.username == username.lower()))
        profile = result.scalar_one_or_none()
        if profile is None:
            print(f"No profile with username {username!r}")
            return 1

        existing = await db.get(UserRoles, (profile.user_id, role))
        if revoke:
            if existing is None:
                print(f"{profile.username} does not have role {role}")
                return 0
            await db.execute(
                delete(UserRoles).where(UserRoles.user_id == profile.user_id, UserRoles.role == role)
            )
            await db.commit()
            print(f"Revoked {role} from {profile.username}")
            return 0

        if existing is not None:
            print(f"{profile.username} already has role {role}")
            return 0
        db.add(UserRoles(user_id=profile.user_id, role=role))
        await db.commit()
        print(f"Granted {role} to {profile.username} ({profile.user_id})")
        return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("username")
    parser.add_argument("role", choices=ROLES)
    parser.add_argument("--revoke", action="store_true")
    args = parser.parse_args()
    sys.exit(asyncio.run(grant_role(args.username, args.role, args.revoke)))
