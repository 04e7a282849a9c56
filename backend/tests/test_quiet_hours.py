"""Tests for quiet-hours containment."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from notify_policy.schemas import QuietHours
from notify_policy.services.quiet_hours import QuietHoursPolicy, window_contains
from notify_policy.services.store import InMemoryPreferenceStore


def _at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2026, 1, 15, hour, minute, second)


def _policy(start, end, enabled=True, tz=None) -> QuietHoursPolicy:
    policy = QuietHoursPolicy(InMemoryPreferenceStore(), tz=tz)
    policy.set_quiet_hours(
        QuietHours(
            enabled=enabled,
            start_hour=start[0],
            start_minute=start[1],
            end_hour=end[0],
            end_minute=end[1],
        )
    )
    return policy


def test_not_in_quiet_hours_when_never_configured():
    policy = QuietHoursPolicy(InMemoryPreferenceStore())
    assert policy.is_in_quiet_hours(_at(23)) is False
    assert policy.is_in_quiet_hours(_at(3)) is False


def test_disabled_window_never_contains():
    policy = _policy((0, 0), (23, 59), enabled=False)
    assert policy.is_in_quiet_hours(_at(12)) is False


@pytest.mark.parametrize(
    ("now", "expected"),
    [(_at(23), True), (_at(3), True), (_at(10), False), (_at(21, 59), False)],
)
def test_overnight_window(now, expected):
    assert _policy((22, 0), (7, 0)).is_in_quiet_hours(now) is expected


@pytest.mark.parametrize(
    ("now", "expected"),
    [(_at(12), True), (_at(9), True), (_at(20), False), (_at(17), False)],
)
def test_same_day_window(now, expected):
    assert _policy((9, 0), (17, 0)).is_in_quiet_hours(now) is expected


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (_at(22, 30), True),
        (_at(22, 29, 59), False),
        (_at(6, 29), True),
        (_at(6, 29, 59), True),
        (_at(6, 30), False),
    ],
)
def test_window_boundaries(now, expected):
    assert _policy((22, 30), (6, 30)).is_in_quiet_hours(now) is expected


def test_equal_start_and_end_wraps_the_whole_day():
    quiet_hours = QuietHours(
        enabled=True, start_hour=8, start_minute=0, end_hour=8, end_minute=0
    )
    assert window_contains(quiet_hours, _at(8)) is True
    assert window_contains(quiet_hours, _at(7, 59)) is True
    assert window_contains(quiet_hours, _at(20)) is True


def test_set_quiet_hours_accepts_wire_mapping():
    store = InMemoryPreferenceStore()
    policy = QuietHoursPolicy(store)
    policy.set_quiet_hours(
        {
            "enabled": True,
            "startHour": 9,
            "startMinute": 15,
            "endHour": 10,
            "endMinute": 0,
        }
    )
    assert store.load().quiet_hours.start_minute == 15
    assert policy.is_in_quiet_hours(_at(9, 15)) is True


def test_out_of_range_values_are_stored_as_given():
    policy = _policy((25, 0), (7, 0))
    assert policy.get_quiet_hours().start_hour == 25


def test_aware_time_is_converted_to_configured_zone():
    minus_five = timezone(timedelta(hours=-5))
    policy = _policy((22, 0), (7, 0), tz=minus_five)
    # 03:30 UTC is 22:30 at UTC-5.
    assert policy.is_in_quiet_hours(datetime(2026, 1, 16, 3, 30, tzinfo=UTC)) is True
    # 15:00 UTC is 10:00 at UTC-5.
    assert policy.is_in_quiet_hours(datetime(2026, 1, 16, 15, 0, tzinfo=UTC)) is False


def test_naive_time_is_used_as_wall_clock_even_with_zone():
    policy = _policy((22, 0), (7, 0), tz=timezone(timedelta(hours=9)))
    assert policy.is_in_quiet_hours(_at(23)) is True
