"""Leaderboard maintenance jobs for arq worker."""

from typing import Any

from arq import Retry
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_async_session
from app.core.logging import bind_context, get_logger, unbind_context
from app.services.aggregates import reconcile_all_aggregates
from app.services.badges import assign_badges

logger = get_logger(__name__)


async def assign_badges_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Recompute badge ranks for the global top profiles.

    Returns:
        dict with the badge holders, rank 1 first

    Raises:
        Retry: If database operation fails
    """
    bind_context(task="assign_badges")
    try:
        async with get_async_session() as db:
            winners = await assign_badges(db)
            await db.commit()

        logger.info("badge_job_completed", winners=winners)
        return {"success": True, "winners": winners}

    except SQLAlchemyError as e:
        logger.error("badge_job_failed", error=str(e), error_type=type(e).__name__)
        # Retry with backoff
        raise Retry(defer=ctx["job_try"] * 5) from e
    finally:
        unbind_context("task")


async def reconcile_aggregates_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Repair cached image and profile aggregates that drifted from the raw rows.

    Returns:
        dict with checked/corrected counts

    Raises:
        Retry: If database operation fails
    """
    bind_context(task="reconcile_aggregates")
    try:
        async with get_async_session() as db:
            result = await reconcile_all_aggregates(db)
            await db.commit()

        return {
            "success": True,
            "images_checked": result.images_checked,
            "images_corrected": result.images_corrected,
            "profiles_checked": result.profiles_checked,
            "profiles_corrected": result.profiles_corrected,
        }

    except SQLAlchemyError as e:
        logger.error("reconcile_job_failed", error=str(e), error_type=type(e).__name__)
        raise Retry(defer=ctx["job_try"] * 5) from e
    finally:
        unbind_context("task")
