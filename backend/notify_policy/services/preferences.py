"""Preference defaults and helpers."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from notify_policy.schemas import NotificationPreferences

DEFAULT_QUIET_HOURS = {
    "enabled": False,
    "startHour": 22,
    "startMinute": 0,
    "endHour": 7,
    "endMinute": 0,
}

DEFAULT_PREFERENCES = {
    "dndEnabled": False,
    "quietHours": DEFAULT_QUIET_HOURS,
    "digestMode": "off",
    "lastDigestSent": None,
    "groupSettings": {},
}


def default_preferences() -> dict:
    """Return a copy of default preferences."""
    return deepcopy(DEFAULT_PREFERENCES)


def default_record() -> NotificationPreferences:
    """Return the default preference record."""
    return NotificationPreferences.model_validate(default_preferences())


def merge_with_defaults(
    stored: dict[str, Any], defaults: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Deep-merge a stored record over the defaults.

    Nested objects are merged key by key so a record saved before a field
    existed still validates. Present values always win over defaults, and
    keys the defaults do not know about are kept as-is. A null stored where
    the default is an object keeps the default.
    """
    merged = deepcopy(defaults if defaults is not None else DEFAULT_PREFERENCES)
    for key, value in stored.items():
        base = merged.get(key)
        if isinstance(base, dict) and value is None:
            continue
        if isinstance(base, dict) and isinstance(value, dict):
            merged[key] = merge_with_defaults(value, base)
        else:
            merged[key] = deepcopy(value)
    return merged
