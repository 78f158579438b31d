from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum


class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CALENDAR_FAILED = "CALENDAR_FAILED"


class BookingStage(str, Enum):
    REQUESTED = "REQUESTED"
    VALIDATED = "VALIDATED"
    COMMITTED = "COMMITTED"
    CALENDAR_SYNCED = "CALENDAR_SYNCED"
    CALENDAR_FAILED = "CALENDAR_FAILED"


@dataclass(frozen=True)
class GuestContact:
    name: str
    email: str
    company: str | None = None
    role: str | None = None
    phone: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Booking:
    id: str
    host_id: str
    link_slug: str
    start: datetime
    duration_minutes: int
    guest: GuestContact
    status: BookingStatus = BookingStatus.CONFIRMED
    external_event_id: str | None = None
    meet_link: str | None = None
    created_at: datetime | None = None

    @property
    def end(self) -> datetime:
        # Elapsed time, not wall-clock time: the slot may span a daylight-saving change.
        end = self.start.astimezone(timezone.utc) + timedelta(minutes=self.duration_minutes)
        return end.astimezone(self.start.tzinfo)
