from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from booking_engine.application.ports.booking_repository import BookingRepositoryPort
from booking_engine.application.ports.busy_interval_provider import BusyIntervalProviderPort
from booking_engine.application.utils.busy_fetch import BusyFetchOk, BusyFetchResult, fetch_busy_intervals
from booking_engine.application.utils.conflict_filter import filter_conflicts
from booking_engine.application.utils.slot_generator import generate_slots
from booking_engine.domain.entities.availability_rule import AvailabilityRule
from booking_engine.domain.entities.host import HostAccount
from booking_engine.domain.entities.slot import SlotGrid


@dataclass(frozen=True)
class OpenSlots:
    grid: SlotGrid
    busy_fetch: BusyFetchResult


def host_timezone(rules: Iterable[AvailabilityRule], default: str) -> str:
    """The host's timezone is the timezone of its first active rule."""
    for rule in rules:
        if rule.active:
            return rule.timezone
    return default


class SlotAvailabilityService:
    """
    Computes bookable slots from current rules, current external busy data
    and the host's already committed bookings.

    Used both to list availability and to re-validate a requested slot right
    before it is committed, so both paths apply identical rules.
    """

    def __init__(self, busy_provider: BusyIntervalProviderPort, bookings: BookingRepositoryPort) -> None:
        self._busy_provider = busy_provider
        self._bookings = bookings

    def open_slots(
        self,
        host: HostAccount,
        rules: list[AvailabilityRule],
        duration_minutes: int,
        dates: list[date],
        timezone: str,
        now: datetime,
    ) -> OpenSlots:
        candidates = generate_slots(rules, dates, duration_minutes)
        if not dates:
            return OpenSlots(grid={}, busy_fetch=BusyFetchOk())

        tz = ZoneInfo(timezone)
        range_start = datetime.combine(min(dates), time.min, tzinfo=tz)
        range_end = datetime.combine(max(dates) + timedelta(days=1), time.min, tzinfo=tz)

        busy_fetch = fetch_busy_intervals(self._busy_provider, host, range_start, range_end)
        held = self._bookings.held_intervals(host.id, range_start, range_end)

        grid = filter_conflicts(candidates, [*busy_fetch.intervals, *held], now)
        return OpenSlots(grid=grid, busy_fetch=busy_fetch)
