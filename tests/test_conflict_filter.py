"""
Tests for removing past and busy candidates from a slot grid.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from booking_engine.application.utils.conflict_filter import filter_conflicts
from booking_engine.application.utils.slot_generator import generate_slots, horizon_dates
from booking_engine.domain.entities.busy_interval import BusyInterval

from conftest import HOST_TZ, MONDAY, NOW, monday_rule

TZ = ZoneInfo(HOST_TZ)


def _at(hour: int, minute: int = 0, day=MONDAY) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=TZ)


def test_busy_interval_straddling_both_slots_empties_the_day():
    """Busy 09:15-09:45 overlaps both 09:00 and 09:30; the date disappears from the result."""
    grid = generate_slots([monday_rule()], [MONDAY], 30)

    result = filter_conflicts(grid, [BusyInterval(_at(9, 15), _at(9, 45))], NOW)

    assert result == {}


def test_touching_boundaries_do_not_conflict():
    grid = generate_slots([monday_rule()], [MONDAY], 30)
    busy = [BusyInterval(_at(8, 0), _at(9, 0)), BusyInterval(_at(10, 0), _at(11, 0))]

    result = filter_conflicts(grid, busy, NOW)

    assert [c.time_label for c in result[MONDAY]] == ["09:00", "09:30"]


def test_busy_ranges_in_other_timezones_are_compared_as_instants():
    grid = generate_slots([monday_rule()], [MONDAY], 30)
    utc = ZoneInfo("UTC")
    # 13:30-14:00 UTC is 09:30-10:00 in New York (EDT)
    busy = [BusyInterval(datetime(2026, 10, 19, 13, 30, tzinfo=utc), datetime(2026, 10, 19, 14, 0, tzinfo=utc))]

    result = filter_conflicts(grid, busy, NOW)

    assert [c.time_label for c in result[MONDAY]] == ["09:00"]


def test_slots_starting_at_or_before_now_are_dropped():
    grid = generate_slots([monday_rule()], [MONDAY], 30)

    result = filter_conflicts(grid, [], _at(9, 0))

    assert [c.time_label for c in result[MONDAY]] == ["09:30"]


def test_filtered_grid_never_overlaps_busy_and_is_idempotent():
    rules = [monday_rule(time(8), time(18))]
    grid = generate_slots(rules, horizon_dates(MONDAY - timedelta(days=1), 14), 20)
    busy = [
        BusyInterval(_at(8, 10), _at(8, 50)),
        BusyInterval(_at(12, 0), _at(13, 5)),
        BusyInterval(_at(17, 59), _at(19, 0)),
        BusyInterval(_at(9, 0, MONDAY + timedelta(days=7)), _at(15, 0, MONDAY + timedelta(days=7))),
    ]

    first = filter_conflicts(grid, busy, NOW)
    second = filter_conflicts(grid, busy, NOW)

    assert first == second
    for candidates in first.values():
        assert candidates
        for candidate in candidates:
            assert candidate.start > NOW
            for interval in busy:
                assert not (candidate.start < interval.end and candidate.end > interval.start)
