"""
Structured logging configuration using structlog.

Console output in development, JSON lines everywhere else. Request and user
identifiers are carried in context variables so that log lines emitted deep
inside the rating and leaderboard services can be tied back to the request
(or arq job) that caused them.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import EventDict, Processor

from app.config import settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)


def add_context_info(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach request and user identifiers when they are set."""
    request_id = request_id_ctx.get(None)
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_ctx.get(None)
    if user_id:
        event_dict.setdefault("user_id", user_id)

    return event_dict


def configure_logging() -> None:
    """
    Configure structlog and the standard library root logger.

    Safe to call more than once (the API lifespan and the arq worker both
    call it).
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.ENVIRONMENT == "development":
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    if settings.ENVIRONMENT != "development":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with the given name.

    Example:
        logger = get_logger(__name__)
        logger.info("rating_submitted", image_id=42, score=9)
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def new_request_id() -> str:
    """Generate an identifier for a request that arrived without one."""
    return uuid.uuid4().hex


def set_request_context(request_id: str, user_id: str | None = None) -> None:
    """Set context variables for the current request."""
    request_id_ctx.set(request_id)
    if user_id:
        user_id_ctx.set(user_id)


def set_user_context(user_id: str) -> None:
    """Record the authenticated user once the identity has been verified."""
    user_id_ctx.set(user_id)


def clear_request_context() -> None:
    """Clear context variables after request completes."""
    request_id_ctx.set(None)
    user_id_ctx.set(None)
    structlog.contextvars.clear_contextvars()


def bind_context(**kwargs: Any) -> None:
    """
    Bind additional context to all subsequent logs in this context.

    Example:
        bind_context(task="badge_assignment")
        logger.info("task_started")  # includes task="badge_assignment"
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove context variables."""
    structlog.contextvars.unbind_contextvars(*keys)
