"""
Pydantic field for UTC timestamps on the wire.

Datetimes stay `datetime` objects in Python code and are serialized as
ISO-8601 strings with millisecond precision and a `Z` suffix, e.g.
`2024-05-01T12:00:00.123Z`, which sort lexicographically in time order.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import Field, PlainSerializer


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """
    Serialize a datetime as an ISO-8601 UTC string.

    Args:
        value: datetime to convert. Naive datetimes are assumed to be UTC.

    Returns:
        String like `2024-05-01T12:00:00.123Z`.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


IsoTimestamp = Annotated[
    datetime, PlainSerializer(format_timestamp, return_type=str)
]


def IsoTimestampField(**kwargs: Any) -> Any:
    """
    Create a timestamp field that defaults to the time of model creation.

    Example:
        timestamp: IsoTimestamp = IsoTimestampField()
    """
    return Field(default_factory=utc_now, **kwargs)
