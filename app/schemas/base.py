"""
Shared schema types.

Timestamps are stored as naive UTC, so responses serialize them with an
explicit Z suffix to keep clients from reading them as local time.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, PlainSerializer


def _to_utc_string(dt: datetime | None) -> str | None:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ") if dt else None


# Usage: created_at: UTCDatetime instead of created_at: datetime
UTCDatetime = Annotated[datetime, PlainSerializer(_to_utc_string, return_type=str)]

# Optional version for nullable datetime fields
UTCDatetimeOptional = Annotated[
    datetime | None,
    PlainSerializer(_to_utc_string, return_type=str | None),
]


class MessageResponse(BaseModel):
    """Plain acknowledgement body"""

    message: str
