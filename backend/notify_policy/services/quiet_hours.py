"""Recurring daily quiet-hours window."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, tzinfo
from typing import Any

from notify_policy.schemas import QuietHours
from notify_policy.services.store import PreferenceStore


def window_contains(quiet_hours: QuietHours, now: datetime) -> bool:
    """Return True if the wall-clock time of ``now`` falls inside the window.

    The window includes its start minute and excludes its end minute. When
    start is not before end the window wraps past midnight. Seconds are
    ignored.
    """
    if not quiet_hours.enabled:
        return False

    start = quiet_hours.start_hour * 60 + quiet_hours.start_minute
    end = quiet_hours.end_hour * 60 + quiet_hours.end_minute
    current = now.hour * 60 + now.minute

    if start < end:
        return start <= current < end
    return current >= start or current < end


class QuietHoursPolicy:
    def __init__(self, store: PreferenceStore, tz: tzinfo | None = None) -> None:
        self._store = store
        self._tz = tz

    def set_quiet_hours(self, quiet_hours: QuietHours | Mapping[str, Any]) -> None:
        """Persist the window as given; hour and minute ranges are not checked."""
        if not isinstance(quiet_hours, QuietHours):
            quiet_hours = QuietHours.model_validate(quiet_hours)
        prefs = self._store.load()
        prefs.quiet_hours = quiet_hours
        self._store.save(prefs)

    def get_quiet_hours(self) -> QuietHours:
        return self._store.load().quiet_hours

    def local_time(self, now: datetime | None = None) -> datetime:
        """Return ``now`` as wall-clock time in the configured zone."""
        if now is None:
            return datetime.now(self._tz)
        if self._tz is not None and now.tzinfo is not None:
            return now.astimezone(self._tz)
        return now

    def is_in_quiet_hours(self, now: datetime | None = None) -> bool:
        prefs = self._store.load()
        return window_contains(prefs.quiet_hours, self.local_time(now))
