"""Timestamp helpers shared by the policies."""

from __future__ import annotations

from datetime import UTC, datetime


def resolve_now(now: datetime | None = None) -> datetime:
    """Return an aware timestamp; naive values are read as UTC, like stored ones."""
    if now is None:
        return datetime.now(UTC)
    return parse_timestamp(now)


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
