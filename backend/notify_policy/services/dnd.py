"""Global do-not-disturb switch."""

from __future__ import annotations

import logging

from notify_policy.services.store import PreferenceStore

logger = logging.getLogger(__name__)


class DNDPolicy:
    def __init__(self, store: PreferenceStore) -> None:
        self._store = store

    def toggle_dnd(self) -> bool:
        """Flip do-not-disturb and return the new state."""
        prefs = self._store.load()
        prefs.dnd_enabled = not prefs.dnd_enabled
        self._store.save(prefs)
        logger.info("Do not disturb toggled", extra={"dnd_enabled": prefs.dnd_enabled})
        return prefs.dnd_enabled

    def set_dnd(self, enabled: bool) -> None:
        prefs = self._store.load()
        prefs.dnd_enabled = enabled
        self._store.save(prefs)
        logger.info("Do not disturb set", extra={"dnd_enabled": enabled})

    def is_dnd_active(self) -> bool:
        return self._store.load().dnd_enabled
