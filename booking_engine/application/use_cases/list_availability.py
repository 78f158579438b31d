from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from booking_engine.application.exceptions import BookingLinkNotFoundError, BookingValidationError
from booking_engine.application.ports.availability_store import AvailabilityStorePort
from booking_engine.application.use_cases.slot_availability import SlotAvailabilityService, host_timezone
from booking_engine.application.utils.slot_generator import horizon_dates
from booking_engine.domain.entities.booking_link import BookingLink
from booking_engine.domain.entities.host import HostAccount
from booking_engine.domain.entities.slot import SlotGrid


@dataclass(frozen=True)
class AvailabilityListing:
    link: BookingLink
    host: HostAccount
    timezone: str
    slots: SlotGrid
    degraded: bool = False


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ListAvailabilityUseCase:
    def __init__(
        self,
        store: AvailabilityStorePort,
        availability: SlotAvailabilityService,
        default_timezone: str,
        max_horizon_days: int,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._availability = availability
        self._default_timezone = default_timezone
        self._max_horizon_days = max_horizon_days
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def execute(self, slug: str, days: int) -> AvailabilityListing:
        if not 1 <= days <= self._max_horizon_days:
            raise BookingValidationError(f"days must be between 1 and {self._max_horizon_days}")

        link = self._store.get_active_link(slug)
        host = self._store.get_host(link.host_id) if link else None
        if not link or not host:
            raise BookingLinkNotFoundError("Booking link not found")

        rules = [rule for rule in self._store.list_rules(host.id) if rule.active]
        tz_name = host_timezone(rules, self._default_timezone)
        now = self._clock()
        today = now.astimezone(ZoneInfo(tz_name)).date()

        open_slots = self._availability.open_slots(
            host=host,
            rules=rules,
            duration_minutes=link.duration_minutes,
            dates=horizon_dates(today, days),
            timezone=tz_name,
            now=now,
        )

        self._logger.info(
            "Availability listed",
            extra={
                "host_id": host.id,
                "slug": slug,
                "days": days,
                "slot_count": sum(len(c) for c in open_slots.grid.values()),
                "degraded": open_slots.busy_fetch.degraded,
            },
        )
        return AvailabilityListing(
            link=link,
            host=host,
            timezone=tz_name,
            slots=open_slots.grid,
            degraded=open_slots.busy_fetch.degraded,
        )
