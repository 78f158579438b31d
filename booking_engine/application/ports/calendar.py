from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from booking_engine.domain.entities.host import HostAccount


@dataclass(frozen=True)
class CalendarEventRequest:
    title: str
    start: datetime
    end: datetime
    description: str | None = None
    attendees: list[str] = field(default_factory=list)
    wants_video_link: bool = False


@dataclass(frozen=True)
class CalendarEventResult:
    event_id: str
    meeting_link: str | None = None


class CalendarEventPublisherPort(ABC):
    @abstractmethod
    def is_connected(self, account: HostAccount) -> bool:
        """Whether the host has a calendar this publisher can write to."""
        raise NotImplementedError

    @abstractmethod
    def create_event(self, account: HostAccount, request: CalendarEventRequest) -> CalendarEventResult:
        """Create calendar event (and optionally a video link). May raise CalendarUpstreamError."""
        raise NotImplementedError
