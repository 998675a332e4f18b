"""
ARQ worker configuration and job definitions.

Run worker with: uv run arq app.tasks.worker.WorkerSettings
"""

from typing import Any

from arq import cron
from arq.connections import RedisSettings
from arq.worker import func

from app.config import settings
from app.core.logging import configure_logging, get_logger
from app.tasks.aggregate_jobs import assign_badges_job, reconcile_aggregates_job

logger = get_logger(__name__)


async def startup(ctx: dict[str, Any]) -> None:
    """Worker startup - initialize any shared resources."""
    configure_logging()
    logger.info("arq_worker_starting", redis_url=settings.ARQ_REDIS_URL)


async def shutdown(ctx: dict[str, Any]) -> None:
    """Worker shutdown - cleanup resources."""
    logger.info("arq_worker_shutdown")


class WorkerSettings:
    """ARQ worker configuration."""

    # Redis connection from settings
    redis_settings = RedisSettings.from_dsn(settings.ARQ_REDIS_URL)

    # Worker behavior
    max_jobs = 10  # Process up to 10 jobs concurrently
    job_timeout = 600  # Full reconciliation scans every image
    keep_result = settings.ARQ_KEEP_RESULT  # Keep results for 1 hour

    # Lifecycle hooks
    on_startup = startup
    on_shutdown = shutdown

    # Job functions
    functions = [
        func(assign_badges_job, max_tries=settings.ARQ_MAX_TRIES),
        func(reconcile_aggregates_job, max_tries=settings.ARQ_MAX_TRIES),
    ]

    # Nightly maintenance: repair aggregates first so badges rank on clean numbers
    cron_jobs = [
        cron(reconcile_aggregates_job, hour={3}, minute={0}, run_at_startup=False),
        cron(assign_badges_job, hour={3}, minute={30}, run_at_startup=False),
    ]
