from __future__ import annotations

from abc import ABC, abstractmethod

from booking_engine.domain.entities.availability_rule import AvailabilityRule
from booking_engine.domain.entities.booking_link import BookingLink
from booking_engine.domain.entities.host import HostAccount


class AvailabilityStorePort(ABC):
    @abstractmethod
    def list_rules(self, host_id: str) -> list[AvailabilityRule]:
        """Active and inactive rules for a host, ordered by day and start time."""
        raise NotImplementedError

    @abstractmethod
    def get_active_link(self, slug: str) -> BookingLink | None:
        """Booking link by slug. Returns None if missing or inactive."""
        raise NotImplementedError

    @abstractmethod
    def get_host(self, host_id: str) -> HostAccount | None:
        raise NotImplementedError
