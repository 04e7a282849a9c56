"""Tests for the notification preference endpoints."""

import pytest
from fastapi import HTTPException

from notify_policy.config import Settings
from notify_policy.routes import notification_preferences as routes
from notify_policy.schemas import (
    DigestModeUpdate,
    DndUpdate,
    MuteRequest,
    QuietHours,
)
from notify_policy.services.store import InMemoryPreferenceStore


def test_get_preferences_returns_defaults():
    prefs = routes.get_notification_preferences(store=InMemoryPreferenceStore())
    assert prefs.dnd_enabled is False
    assert prefs.digest_mode == "off"
    assert prefs.group_settings == {}


def test_dnd_endpoints():
    store = InMemoryPreferenceStore()
    assert routes.toggle_dnd(store=store).dnd_enabled is True
    assert routes.set_dnd(DndUpdate(enabled=False), store=store).dnd_enabled is False
    assert store.load().dnd_enabled is False


def test_update_quiet_hours():
    store = InMemoryPreferenceStore()
    payload = QuietHours.model_validate(
        {
            "enabled": True,
            "startHour": 21,
            "startMinute": 0,
            "endHour": 6,
            "endMinute": 30,
        }
    )
    result = routes.update_quiet_hours(payload, store=store)
    assert result.end_minute == 30
    assert store.load().quiet_hours.enabled is True


def test_digest_mode_endpoints():
    store = InMemoryPreferenceStore()
    assert routes.get_digest_state(store=store).next_due_at is None

    state = routes.update_digest_mode(DigestModeUpdate(mode="weekly"), store=store)
    assert state.digest_mode == "weekly"
    assert state.last_digest_sent is None
    assert state.next_due_at is not None


def test_group_mute_endpoints():
    store = InMemoryPreferenceStore()
    status = routes.mute_group("g1", MuteRequest(duration_minutes=120), store=store)
    assert status.muted is True
    assert status.muted_until is not None
    assert status.remaining in {"1h remaining", "2h remaining"}

    permanent = routes.mute_group("g2", MuteRequest(), store=store)
    assert permanent.muted is True
    assert permanent.muted_until is None
    assert permanent.remaining is None

    cleared = routes.unmute_group("g1", store=store)
    assert cleared.muted is False
    assert routes.get_group_mute("g2", store=store).muted is True


def test_decision_endpoint():
    store = InMemoryPreferenceStore()
    settings = Settings()
    routes.mute_group("g1", MuteRequest(), store=store)

    muted = routes.get_decision(
        group_id="g1", bypass=False, settings=settings, store=store
    )
    assert (muted.show, muted.reason, muted.deferred) == (False, "muted", False)

    allowed = routes.get_decision(
        group_id="g1", bypass=True, settings=settings, store=store
    )
    assert allowed.show is True

    routes.update_digest_mode(DigestModeUpdate(mode="hourly"), store=store)
    deferred = routes.get_decision(
        group_id="g2", bypass=False, settings=settings, store=store
    )
    assert deferred.deferred is True


def test_unknown_digest_mode_is_rejected():
    store = InMemoryPreferenceStore()
    payload = DigestModeUpdate.model_construct(mode="monthly")
    with pytest.raises(HTTPException) as excinfo:
        routes.update_digest_mode(payload, store=store)
    assert excinfo.value.status_code == 422
    assert store.load().digest_mode == "off"
