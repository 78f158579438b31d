from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MeetingType(str, Enum):
    GOOGLE_MEET = "GOOGLE_MEET"
    PHONE = "PHONE"
    IN_PERSON = "IN_PERSON"


@dataclass(frozen=True)
class BookingLink:
    slug: str
    host_id: str
    title: str = "Quick Chat"
    description: str | None = None
    duration_minutes: int = 30
    meeting_type: MeetingType = MeetingType.GOOGLE_MEET
    active: bool = True
