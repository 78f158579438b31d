from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator
from zoneinfo import ZoneInfo

from booking_engine.domain.entities.availability_rule import AvailabilityRule, sunday_based_weekday
from booking_engine.domain.entities.slot import SlotCandidate, SlotGrid


def horizon_dates(today: date, days: int) -> list[date]:
    """Dates from tomorrow through today + days, inclusive."""
    return [today + timedelta(days=offset) for offset in range(1, days + 1)]


def generate_slots(rules: Iterable[AvailabilityRule], dates: Iterable[date], duration_minutes: int) -> SlotGrid:
    """
    Expand weekly rules into a fixed-duration slot grid.

    Each matching rule window is stepped by the slot duration in UTC, so
    slots keep their real length across daylight-saving changes; a trailing
    remainder shorter than the duration is discarded. Candidates produced
    by overlapping rules on the same day are de-duplicated by start instant.
    """
    if duration_minutes <= 0:
        raise ValueError(f"Slot duration must be positive, got {duration_minutes}")

    step = timedelta(minutes=duration_minutes)
    rules = [rule for rule in rules if rule.active]
    grid: SlotGrid = {}

    for day in dates:
        weekday = sunday_based_weekday(day.weekday())
        by_start: dict[datetime, SlotCandidate] = {}
        for rule in rules:
            if not rule.matches(weekday):
                continue
            for candidate in _rule_candidates(rule, day, step):
                by_start.setdefault(candidate.start.astimezone(timezone.utc), candidate)

        if by_start:
            grid[day] = [by_start[instant] for instant in sorted(by_start)]

    return grid


def _rule_candidates(rule: AvailabilityRule, day: date, step: timedelta) -> Iterator[SlotCandidate]:
    tz = ZoneInfo(rule.timezone)
    cursor = datetime.combine(day, rule.start_time, tzinfo=tz).astimezone(timezone.utc)
    window_end = datetime.combine(day, rule.end_time, tzinfo=tz).astimezone(timezone.utc)

    while cursor + step <= window_end:
        start = cursor.astimezone(tz)
        # Second pass through a repeated hour: its HH:MM label already names the first pass.
        if not start.fold:
            yield SlotCandidate(date=day, start=start, end=(cursor + step).astimezone(tz))
        cursor += step
