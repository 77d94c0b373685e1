"""Line formats shared by the report commands."""

from datetime import UTC, datetime


def rfc3339(value: datetime | None) -> str:
    """Format a timestamp as RFC 3339 in UTC (``2024-01-15T10:00:00Z``)."""
    if value is None:
        return "-"
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
