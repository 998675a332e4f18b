"""
Time helpers.

All timestamps are stored as naive UTC datetimes (the DATETIME columns carry
no zone). Ranking periods are calendar days in settings.STREAK_TIMEZONE.
"""

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

from app.config import settings


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, matching what the database returns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _zone(tz_name: str | None) -> ZoneInfo:
    return ZoneInfo(tz_name or settings.STREAK_TIMEZONE)


def ranking_period(moment: datetime, tz_name: str | None = None) -> date:
    """Return the ranking period (local calendar day) containing a naive UTC moment."""
    return moment.replace(tzinfo=UTC).astimezone(_zone(tz_name)).date()


def period_start(moment: datetime, tz_name: str | None = None) -> datetime:
    """Return the naive UTC instant at which the ranking period containing moment began."""
    zone = _zone(tz_name)
    local_midnight = datetime.combine(ranking_period(moment, tz_name), time.min, tzinfo=zone)
    return local_midnight.astimezone(UTC).replace(tzinfo=None)
