from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from booking_engine.domain.entities.booking import Booking
from booking_engine.domain.entities.busy_interval import BusyInterval


class BookingRepositoryPort(ABC):
    @abstractmethod
    def held_intervals(self, host_id: str, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        """Intervals of bookings that hold their slot and overlap the window."""
        raise NotImplementedError

    @abstractmethod
    def commit_booking(self, booking: Booking) -> Booking:
        """
        Atomically re-check overlap and insert the booking.
        Raises SlotConflictError if any held booking of the host overlaps it.
        """
        raise NotImplementedError

    @abstractmethod
    def record_calendar_synced(self, booking_id: str, event_id: str, meet_link: str | None) -> None:
        raise NotImplementedError

    @abstractmethod
    def record_calendar_failed(self, booking_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError
