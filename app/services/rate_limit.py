"""Rate limiting service using Redis."""

from datetime import timedelta

import redis.asyncio as redis
from fastapi import HTTPException, status

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


async def check_report_rate_limit(user_id: str, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
    """
    Enforce the image report rate limit per user.

    Limit: REPORT_RATE_LIMIT reports per REPORT_RATE_WINDOW_MINUTES.

    Uses Redis for fast lookups and automatic expiration.
    Gracefully degrades if Redis is unavailable (allows the request).

    Args:
        user_id: ID of the user making the report
        redis_client: Redis client instance

    Raises:
        HTTPException: 429 if rate limit exceeded
    """
    window = timedelta(minutes=settings.REPORT_RATE_WINDOW_MINUTES)
    try:
        key = f"report_rate:{user_id}"

        # Get current count
        count_bytes = await redis_client.get(key)
        count = int(count_bytes) if count_bytes else 0

        if count >= settings.REPORT_RATE_LIMIT:
            logger.warning(
                "report_rate_limit_exceeded",
                user_id=user_id,
                count=count,
                limit=settings.REPORT_RATE_LIMIT,
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many reports. Please try again later.",
                headers={"Retry-After": str(int(window.total_seconds()))},
            )

        # Increment counter with expiration
        pipe = redis_client.pipeline()
        pipe.incr(key)
        if count == 0:
            # First report from this user in this window - set expiration
            pipe.expire(key, window)
        await pipe.execute()

        logger.debug(
            "report_rate_check",
            user_id=user_id,
            count=count + 1,
            limit=settings.REPORT_RATE_LIMIT,
        )
    except HTTPException:
        raise
    except (redis.RedisError, OSError):
        logger.warning(
            "report_rate_limit_redis_error",
            user_id=user_id,
            exc_info=True,
        )
