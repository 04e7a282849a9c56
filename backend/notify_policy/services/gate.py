"""Single admission decision for a candidate notification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from notify_policy.config import Settings
from notify_policy.services.digest import DigestScheduler
from notify_policy.services.dnd import DNDPolicy
from notify_policy.services.mutes import MuteRegistry, group_is_muted
from notify_policy.services.quiet_hours import QuietHoursPolicy, window_contains
from notify_policy.services.store import PreferenceStore

logger = logging.getLogger(__name__)

REASON_BYPASS = "bypass"
REASON_DND = "dnd"
REASON_QUIET_HOURS = "quiet_hours"
REASON_MUTED = "muted"
REASON_DIGEST = "digest"
REASON_OK = "ok"


@dataclass(frozen=True)
class GateDecision:
    show: bool
    reason: str

    @property
    def deferred(self) -> bool:
        """True when the item belongs in the digest buffer rather than the bin."""
        return self.reason == REASON_DIGEST


class NotificationGate:
    """Composes DND, quiet hours, group mutes and digest mode.

    Checks run in a fixed order: bypass wins over everything, then DND,
    quiet hours, the group's mute, and finally digest batching.
    """

    def __init__(self, store: PreferenceStore, tz: tzinfo | None = None) -> None:
        self._store = store
        self.dnd = DNDPolicy(store)
        self.quiet_hours = QuietHoursPolicy(store, tz)
        self.mutes = MuteRegistry(store)
        self.digest = DigestScheduler(store)

    def evaluate(
        self,
        group_id: str,
        bypass: bool = False,
        now: datetime | None = None,
    ) -> GateDecision:
        if bypass:
            return GateDecision(show=True, reason=REASON_BYPASS)

        prefs = self._store.load()
        if prefs.dnd_enabled:
            decision = GateDecision(show=False, reason=REASON_DND)
        elif window_contains(prefs.quiet_hours, self.quiet_hours.local_time(now)):
            decision = GateDecision(show=False, reason=REASON_QUIET_HOURS)
        elif group_is_muted(prefs, group_id, now):
            decision = GateDecision(show=False, reason=REASON_MUTED)
        elif prefs.digest_mode != "off":
            decision = GateDecision(show=False, reason=REASON_DIGEST)
        else:
            return GateDecision(show=True, reason=REASON_OK)

        logger.debug(
            "Notification held back",
            extra={"group_id": group_id, "reason": decision.reason},
        )
        return decision

    def should_show_notification(
        self,
        group_id: str,
        bypass: bool = False,
        now: datetime | None = None,
    ) -> bool:
        return self.evaluate(group_id, bypass=bypass, now=now).show


def build_gate(
    store: PreferenceStore, settings: Settings | None = None
) -> NotificationGate:
    """Return a gate using the quiet-hours zone from settings, if any."""
    tz = None
    if settings is not None and settings.quiet_hours_timezone:
        tz = ZoneInfo(settings.quiet_hours_timezone)
    return NotificationGate(store, tz=tz)
