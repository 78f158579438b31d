"""
Tests for expanding weekly availability rules into a slot grid.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from booking_engine.application.utils.slot_generator import generate_slots, horizon_dates
from booking_engine.domain.entities.availability_rule import AvailabilityRule, sunday_based_weekday
from booking_engine.domain.entities.booking import Booking, GuestContact

from conftest import HOST_TZ, MONDAY, monday_rule


def _labels(grid, day):
    return [c.time_label for c in grid[day]]


def _elapsed(candidate):
    return candidate.end.astimezone(timezone.utc) - candidate.start.astimezone(timezone.utc)


def test_monday_window_yields_two_half_hour_slots():
    """Mon 09:00-10:00 with 30 minute slots gives 09:00 and 09:30."""
    grid = generate_slots([monday_rule()], [MONDAY], 30)

    assert list(grid) == [MONDAY]
    assert _labels(grid, MONDAY) == ["09:00", "09:30"]
    assert grid[MONDAY][-1].end.time() == time(10, 0)


def test_window_shorter_than_duration_yields_nothing():
    grid = generate_slots([monday_rule(end=time(9, 20))], [MONDAY], 30)

    assert grid == {}


def test_partial_trailing_slot_is_not_emitted():
    grid = generate_slots([monday_rule(end=time(10, 15))], [MONDAY], 30)

    assert _labels(grid, MONDAY) == ["09:00", "09:30"]


def test_overlapping_rules_are_merged_and_sorted():
    rules = [monday_rule(time(9, 30), time(10, 30)), monday_rule(time(9, 0), time(10, 0))]

    grid = generate_slots(rules, [MONDAY], 30)

    assert _labels(grid, MONDAY) == ["09:00", "09:30", "10:00"]


def test_inactive_rules_are_ignored():
    rule = AvailabilityRule(day_of_week=1, start_time=time(9), end_time=time(10), timezone=HOST_TZ, active=False)

    assert generate_slots([rule], [MONDAY], 30) == {}


def test_rules_only_apply_to_their_weekday():
    """Sunday is day 0; a Sunday rule must not leak into Monday."""
    sunday = MONDAY - timedelta(days=1)
    rule = AvailabilityRule(day_of_week=0, start_time=time(13), end_time=time(14), timezone=HOST_TZ)

    grid = generate_slots([rule], [sunday, MONDAY], 60)

    assert list(grid) == [sunday]
    assert sunday_based_weekday(sunday.weekday()) == 0


def test_every_slot_spans_exactly_the_duration():
    rules = [
        monday_rule(time(8, 0), time(12, 0)),
        AvailabilityRule(day_of_week=3, start_time=time(13), end_time=time(17, 45), timezone=HOST_TZ),
        AvailabilityRule(day_of_week=5, start_time=time(9, 10), end_time=time(11), timezone="Europe/Berlin"),
    ]

    for duration in (15, 25, 45, 60):
        grid = generate_slots(rules, horizon_dates(MONDAY, 14), duration)
        assert grid
        for candidates in grid.values():
            for candidate in candidates:
                assert _elapsed(candidate) == timedelta(minutes=duration)


def test_horizon_starts_tomorrow():
    today = date(2026, 10, 18)

    assert horizon_dates(today, 3) == [date(2026, 10, 19), date(2026, 10, 20), date(2026, 10, 21)]


def test_non_positive_duration_is_rejected():
    with pytest.raises(ValueError):
        generate_slots([monday_rule()], [MONDAY], 0)


def test_spring_forward_skips_the_missing_hour():
    """On 2026-03-08 New York jumps from 02:00 to 03:00; 02:xx slots do not exist."""
    spring = date(2026, 3, 8)
    rule = AvailabilityRule(day_of_week=0, start_time=time(1), end_time=time(4), timezone=HOST_TZ)

    candidates = generate_slots([rule], [spring], 30)[spring]

    assert [c.time_label for c in candidates] == ["01:00", "01:30", "03:00", "03:30"]
    assert [c.start.astimezone(timezone.utc).strftime("%H:%M") for c in candidates] == [
        "06:00",
        "06:30",
        "07:00",
        "07:30",
    ]
    assert all(_elapsed(c) == timedelta(minutes=30) for c in candidates)


def test_fall_back_keeps_real_slot_length_and_unique_labels():
    """On 2026-11-01 New York repeats 01:00-02:00; every slot still lasts one real hour."""
    fall = date(2026, 11, 1)
    rule = AvailabilityRule(day_of_week=0, start_time=time(0), end_time=time(4), timezone=HOST_TZ)

    candidates = generate_slots([rule], [fall], 60)[fall]

    labels = [c.time_label for c in candidates]
    assert labels == ["00:00", "01:00", "02:00", "03:00"]
    assert len({c.start.astimezone(timezone.utc) for c in candidates}) == len(candidates)
    assert all(_elapsed(c) == timedelta(hours=1) for c in candidates)


def test_daylight_saving_horizon_keeps_every_duration():
    rules = [
        AvailabilityRule(day_of_week=0, start_time=time(0), end_time=time(6), timezone=HOST_TZ),
        AvailabilityRule(day_of_week=0, start_time=time(1, 15), end_time=time(3, 45), timezone=HOST_TZ),
    ]
    dates = [date(2026, 3, 8), date(2026, 11, 1)]

    for duration in (20, 30, 45, 60, 90):
        grid = generate_slots(rules, dates, duration)
        for candidates in grid.values():
            starts = [c.start.astimezone(timezone.utc) for c in candidates]
            assert starts == sorted(set(starts))
            for candidate in candidates:
                assert _elapsed(candidate) == timedelta(minutes=duration)


def test_booking_end_counts_elapsed_minutes():
    tz = ZoneInfo(HOST_TZ)
    start = datetime(2026, 11, 1, 1, 0, tzinfo=tz)
    booking = Booking(
        id="b1",
        host_id="h",
        link_slug="intro",
        start=start,
        duration_minutes=60,
        guest=GuestContact(name="Grace", email="grace@example.com"),
    )

    assert booking.end.astimezone(timezone.utc) - start.astimezone(timezone.utc) == timedelta(hours=1)
