"""
Queue client for enqueuing arq jobs from API endpoints.

Enqueueing is best-effort: a Redis outage is logged and reported as None,
the same as a duplicate job ID.
"""

from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from redis.exceptions import RedisError

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# Global pool instance (created on first use)
_pool: ArqRedis | None = None


async def get_queue() -> ArqRedis:
    """Get or create the arq Redis connection pool."""
    global _pool
    if _pool is None:
        _pool = await create_pool(RedisSettings.from_dsn(settings.ARQ_REDIS_URL))
        logger.info("arq_pool_created", redis_url=settings.ARQ_REDIS_URL)
    return _pool


async def enqueue_job(function_name: str, *args: Any, _job_id: str | None = None, **kwargs: Any) -> str | None:
    """
    Enqueue a job to arq worker.

    Args:
        function_name: Name of registered arq function
        _job_id: Optional custom job ID; arq refuses a second job with the same ID
            while the first is queued, which deduplicates maintenance runs

    Returns:
        Job ID if enqueued, None if a job with the same ID is pending or Redis failed

    Example:
        await enqueue_job("assign_badges_job", _job_id="assign_badges")
    """
    try:
        pool = await get_queue()
        job = await pool.enqueue_job(function_name, *args, _job_id=_job_id, **kwargs)
    except (RedisError, OSError) as e:
        logger.error(
            "job_enqueue_error",
            function=function_name,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None

    if job is None:
        logger.info("job_already_queued", function=function_name, job_id=_job_id)
        return None

    logger.debug("job_enqueued", function=function_name, job_id=job.job_id)
    return job.job_id


async def close_queue() -> None:
    """Close arq Redis connection pool (call on shutdown)."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("arq_pool_closed")
