#!/usr/bin/env python3
"""
Recompute cached rating and follow aggregates from the raw rows.

Runs the same reconciliation as the nightly worker cron and the admin
endpoint, against DATABASE_URL. Use after restoring a backup or a manual
data fix.

Usage:
    uv run python scripts/reconcile_aggregates.py [--badges]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.database import get_async_session
from app.services.aggregates import reconcile_all_aggregates
from app.services.badges import assign_badges


async def reconcile(badges: bool) -> None:
    async with get_async_session() as db:
        print("Reconciling aggregates...")
        result = await reconcile_all_aggregates(db)
        await db.commit()

        print(f"  Images checked:     {result.images_checked}")
        print(f"  Images corrected:   {result.images_corrected}")
        print(f"  Profiles checked:   {result.profiles_checked}")
        print(f"  Profiles corrected: {result.profiles_corrected}")

        if badges:
            winners = await assign_badges(db)
            await db.commit()
            print(f"\nBadge holders: {', '.join(winners) or '(none)'}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--badges", action="store_true", help="Also reassign badges afterwards")
    args = parser.parse_args()
    asyncio.run(reconcile(args.badges))
