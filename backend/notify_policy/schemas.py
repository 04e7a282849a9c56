"""Pydantic schemas for the preference record and API input/output."""

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DigestMode = Literal["off", "hourly", "daily", "weekly"]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# Naive timestamps in stored records are read as UTC.
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class APIModel(BaseModel):
    """Base Pydantic model with ORM support."""

    model_config = ConfigDict(from_attributes=True)


class RecordModel(APIModel):
    """Base for models persisted with camelCase keys."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class QuietHours(RecordModel):
    """Recurring daily window; start and end are wall-clock times."""

    enabled: bool
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int


class GroupMuteState(RecordModel):
    muted: bool
    muted_until: UtcDatetime | None = None


class NotificationPreferences(RecordModel):
    """The single per-user notification preference record."""

    dnd_enabled: bool
    quiet_hours: QuietHours
    digest_mode: DigestMode
    last_digest_sent: UtcDatetime | None = None
    group_settings: dict[str, GroupMuteState]

    def to_record(self) -> dict:
        """Return the JSON-ready wire shape."""
        return self.model_dump(mode="json", by_alias=True)


class DndUpdate(APIModel):
    enabled: bool


class DndState(APIModel):
    dnd_enabled: bool


class DigestModeUpdate(APIModel):
    mode: DigestMode


class DigestModeState(APIModel):
    digest_mode: DigestMode
    last_digest_sent: datetime | None = None
    next_due_at: datetime | None = None


class MuteRequest(APIModel):
    duration_minutes: int | None = Field(default=None)


class GroupMuteStatus(APIModel):
    group_id: str
    muted: bool
    muted_until: datetime | None = None
    remaining: str | None = None


class GateDecisionRead(APIModel):
    show: bool
    reason: str
    deferred: bool
