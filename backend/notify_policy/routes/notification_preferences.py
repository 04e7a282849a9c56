"""Notification preference endpoints for the settings screen."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from notify_policy.config import Settings, get_settings
from notify_policy.db import get_db
from notify_policy.schemas import (
    DigestModeState,
    DigestModeUpdate,
    DndState,
    DndUpdate,
    GateDecisionRead,
    GroupMuteStatus,
    MuteRequest,
    NotificationPreferences,
    QuietHours,
)
from notify_policy.services.clock import resolve_now
from notify_policy.services.digest import DigestScheduler
from notify_policy.services.dnd import DNDPolicy
from notify_policy.services.gate import build_gate
from notify_policy.services.mutes import (
    MuteRegistry,
    format_mute_remaining,
    group_is_muted,
)
from notify_policy.services.quiet_hours import QuietHoursPolicy
from notify_policy.services.store import PreferenceStore, get_preference_store

router = APIRouter(prefix="/api/users/{user_id}/notifications")


def get_store(
    user_id: int,
    settings: Settings = Depends(get_settings),  # noqa: B008
    db=Depends(get_db),  # noqa: B008
) -> PreferenceStore:
    """Dependency that returns the preference store for the path's user."""
    return get_preference_store(settings, user_id, db=db)


@router.get(
    "/preferences",
    response_model=NotificationPreferences,
    response_model_by_alias=True,
)
def get_notification_preferences(
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    return store.load()


@router.post("/dnd/toggle", response_model=DndState)
def toggle_dnd(store: PreferenceStore = Depends(get_store)):  # noqa: B008
    return DndState(dnd_enabled=DNDPolicy(store).toggle_dnd())


@router.put("/dnd", response_model=DndState)
def set_dnd(
    payload: DndUpdate,
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    policy = DNDPolicy(store)
    policy.set_dnd(payload.enabled)
    return DndState(dnd_enabled=policy.is_dnd_active())


@router.put("/quiet-hours", response_model=QuietHours, response_model_by_alias=True)
def update_quiet_hours(
    payload: QuietHours,
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    policy = QuietHoursPolicy(store)
    policy.set_quiet_hours(payload)
    return policy.get_quiet_hours()


@router.get("/digest", response_model=DigestModeState)
def get_digest_state(store: PreferenceStore = Depends(get_store)):  # noqa: B008
    return _digest_state(store)


@router.put("/digest-mode", response_model=DigestModeState)
def update_digest_mode(
    payload: DigestModeUpdate,
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    try:
        DigestScheduler(store).set_digest_mode(payload.mode)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return _digest_state(store)


@router.get("/groups/{group_id}/mute", response_model=GroupMuteStatus)
def get_group_mute(
    group_id: str,
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    return _mute_status(store, group_id)


@router.put("/groups/{group_id}/mute", response_model=GroupMuteStatus)
def mute_group(
    group_id: str,
    payload: MuteRequest,
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    now = resolve_now()
    MuteRegistry(store).mute_group(group_id, payload.duration_minutes, now=now)
    return _mute_status(store, group_id, now=now)


@router.delete("/groups/{group_id}/mute", response_model=GroupMuteStatus)
def unmute_group(
    group_id: str,
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    MuteRegistry(store).unmute_group(group_id)
    return _mute_status(store, group_id)


@router.get("/decision", response_model=GateDecisionRead)
def get_decision(
    group_id: str = Query(...),
    bypass: bool = Query(default=False),
    settings: Settings = Depends(get_settings),  # noqa: B008
    store: PreferenceStore = Depends(get_store),  # noqa: B008
):
    decision = build_gate(store, settings).evaluate(group_id, bypass=bypass)
    return GateDecisionRead(
        show=decision.show, reason=decision.reason, deferred=decision.deferred
    )


def _digest_state(store: PreferenceStore) -> DigestModeState:
    prefs = store.load()
    return DigestModeState(
        digest_mode=prefs.digest_mode,
        last_digest_sent=prefs.last_digest_sent,
        next_due_at=DigestScheduler(store).next_digest_due(),
    )


def _mute_status(
    store: PreferenceStore, group_id: str, now: datetime | None = None
) -> GroupMuteStatus:
    prefs = store.load()
    muted = group_is_muted(prefs, group_id, now)
    state = prefs.group_settings.get(group_id)
    muted_until = state.muted_until if state and muted else None
    remaining = None
    if muted_until is not None:
        remaining = format_mute_remaining(muted_until, now=now)
    return GroupMuteStatus(
        group_id=group_id,
        muted=muted,
        muted_until=muted_until,
        remaining=remaining,
    )
