from __future__ import annotations

import logging
import threading
from datetime import datetime

from booking_engine.application.ports.busy_interval_provider import BusyIntervalProviderPort
from booking_engine.application.ports.calendar import (
    CalendarEventPublisherPort,
    CalendarEventRequest,
    CalendarEventResult,
)
from booking_engine.domain.entities.busy_interval import BusyInterval
from booking_engine.domain.entities.host import HostAccount


class MockCalendar(BusyIntervalProviderPort, CalendarEventPublisherPort):
    """In-process calendar: seeded busy ranges plus every event it created."""

    def __init__(self) -> None:
        self._busy: dict[str, list[BusyInterval]] = {}
        self._events: dict[str, tuple[str, CalendarEventRequest]] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def add_busy(self, host_id: str, start: datetime, end: datetime) -> None:
        with self._lock:
            self._busy.setdefault(host_id, []).append(BusyInterval(start=start, end=end))

    def is_connected(self, account: HostAccount) -> bool:
        return True

    def get_free_busy(self, account: HostAccount, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        with self._lock:
            intervals = list(self._busy.get(account.id, []))
            intervals.extend(
                BusyInterval(start=request.start, end=request.end)
                for host_id, request in self._events.values()
                if host_id == account.id
            )
        return [interval for interval in intervals if interval.overlaps(range_start, range_end)]

    def create_event(self, account: HostAccount, request: CalendarEventRequest) -> CalendarEventResult:
        with self._lock:
            event_id = f"mock_event_{len(self._events) + 1}"
            self._events[event_id] = (account.id, request)

        meeting_link = f"https://meet.example.com/{event_id}" if request.wants_video_link else None
        self._logger.info(
            "Mock calendar event created",
            extra={
                "event_id": event_id,
                "host_id": account.id,
                "start": request.start.isoformat(),
                "end": request.end.isoformat(),
                "title": request.title,
            },
        )
        return CalendarEventResult(event_id=event_id, meeting_link=meeting_link)

    def events_for(self, host_id: str) -> list[CalendarEventRequest]:
        with self._lock:
            return [request for owner, request in self._events.values() if owner == host_id]
