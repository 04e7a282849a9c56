"""Digest batching schedule.

The dispatch job checks ``should_send_digest`` on a timer, flushes its
buffer when due, and only then calls ``mark_digest_sent``. A crash between
the two leaves the digest due, so the next tick sends it again: delivery is
at-least-once and a digest is never silently dropped.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import get_args

from notify_policy.schemas import DigestMode
from notify_policy.services.clock import resolve_now
from notify_policy.services.store import PreferenceStore

logger = logging.getLogger(__name__)

DIGEST_MODES: tuple[str, ...] = get_args(DigestMode)

DIGEST_INTERVALS = {
    "hourly": timedelta(hours=1),
    "daily": timedelta(hours=24),
    "weekly": timedelta(days=7),
}


class DigestScheduler:
    def __init__(self, store: PreferenceStore) -> None:
        self._store = store

    def set_digest_mode(self, mode: DigestMode) -> None:
        if mode not in DIGEST_MODES:
            raise ValueError(f"Unknown digest mode: {mode!r}")
        prefs = self._store.load()
        prefs.digest_mode = mode
        self._store.save(prefs)
        logger.info("Digest mode set", extra={"digest_mode": mode})

    def get_digest_mode(self) -> DigestMode:
        return self._store.load().digest_mode

    def next_digest_due(self, now: datetime | None = None) -> datetime | None:
        """Return when the next digest is due, or None when batching is off."""
        prefs = self._store.load()
        if prefs.digest_mode == "off":
            return None
        if prefs.last_digest_sent is None:
            return resolve_now(now)
        return prefs.last_digest_sent + DIGEST_INTERVALS[prefs.digest_mode]

    def should_send_digest(self, now: datetime | None = None) -> bool:
        prefs = self._store.load()
        if prefs.digest_mode == "off":
            return False
        if prefs.last_digest_sent is None:
            return True
        elapsed = resolve_now(now) - prefs.last_digest_sent
        return elapsed >= DIGEST_INTERVALS[prefs.digest_mode]

    def mark_digest_sent(self, now: datetime | None = None) -> datetime:
        """Record a successful hand-off of the batch."""
        sent_at = resolve_now(now)
        prefs = self._store.load()
        prefs.last_digest_sent = sent_at
        self._store.save(prefs)
        return sent_at
