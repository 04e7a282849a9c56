"""Per-group mutes with optional expiry."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from notify_policy.schemas import GroupMuteState, NotificationPreferences
from notify_policy.services.clock import parse_timestamp, resolve_now
from notify_policy.services.store import PreferenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MuteDuration:
    minutes: int
    label: str


# Options offered by the settings screen; 0 minutes is a permanent mute.
MUTE_DURATIONS = (
    MuteDuration(minutes=60, label="1 hour"),
    MuteDuration(minutes=480, label="8 hours"),
    MuteDuration(minutes=1440, label="24 hours"),
    MuteDuration(minutes=10080, label="1 week"),
    MuteDuration(minutes=0, label="Until I turn it off"),
)


def group_is_muted(
    prefs: NotificationPreferences, group_id: str, now: datetime | None = None
) -> bool:
    """Return True if the group is muted at ``now``.

    An absent entry, an entry with ``muted`` off, and an entry whose expiry
    has passed all read as not muted.
    """
    state = prefs.group_settings.get(group_id)
    if state is None or not state.muted:
        return False
    if state.muted_until is not None and state.muted_until <= resolve_now(now):
        return False
    return True


class MuteRegistry:
    def __init__(self, store: PreferenceStore) -> None:
        self._store = store

    def mute_group(
        self,
        group_id: str,
        duration_minutes: int | None = None,
        now: datetime | None = None,
    ) -> GroupMuteState:
        """Mute a group; no duration (or a non-positive one) mutes permanently."""
        muted_until = None
        if duration_minutes and duration_minutes > 0:
            muted_until = resolve_now(now) + timedelta(minutes=duration_minutes)

        state = GroupMuteState(muted=True, muted_until=muted_until)
        prefs = self._store.load()
        prefs.group_settings[group_id] = state
        self._store.save(prefs)
        return state

    def unmute_group(self, group_id: str) -> None:
        prefs = self._store.load()
        if prefs.group_settings.pop(group_id, None) is not None:
            self._store.save(prefs)

    def is_group_muted(self, group_id: str, now: datetime | None = None) -> bool:
        return group_is_muted(self._store.load(), group_id, now)

    def get_group_mute_expiry(self, group_id: str) -> datetime | None:
        """Return the raw expiry; None for permanent mutes and unknown groups."""
        state = self._store.load().group_settings.get(group_id)
        return state.muted_until if state else None

    def muted_groups(self, now: datetime | None = None) -> list[str]:
        prefs = self._store.load()
        return sorted(
            group_id
            for group_id in prefs.group_settings
            if group_is_muted(prefs, group_id, now)
        )

    def compact_expired(self, now: datetime | None = None) -> int:
        """Drop entries that no longer mute anything; return how many went."""
        prefs = self._store.load()
        stale = [
            group_id
            for group_id in prefs.group_settings
            if not group_is_muted(prefs, group_id, now)
        ]
        if not stale:
            return 0
        for group_id in stale:
            del prefs.group_settings[group_id]
        self._store.save(prefs)
        logger.info("Compacted expired group mutes", extra={"removed": len(stale)})
        return len(stale)


def format_mute_remaining(
    expiry: str | datetime, now: datetime | None = None
) -> str:
    """Render the time left on a mute using the largest whole unit."""
    remaining = parse_timestamp(expiry) - resolve_now(now)
    if remaining <= timedelta(0):
        return "Expired"

    minutes = int(remaining.total_seconds() // 60)
    if minutes < 60:
        return f"{minutes}m remaining"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h remaining"
    return f"{hours // 24}d remaining"
