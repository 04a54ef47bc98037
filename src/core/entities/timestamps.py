"""
UTC timestamp type shared by the entities.

Timestamps are timezone-aware UTC and serialize to a fixed-width ISO string
(always microseconds, always ``+00:00``) so that stored values compare and
sort lexicographically in time order in every store adapter.
"""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, PlainSerializer


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Read naive values as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    return as_utc(value).isoformat(timespec="microseconds")


Timestamp = Annotated[
    datetime,
    AfterValidator(as_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]
