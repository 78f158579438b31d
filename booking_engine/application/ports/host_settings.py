from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from booking_engine.domain.entities.availability_rule import AvailabilityRule
from booking_engine.domain.entities.booking_link import BookingLink


class HostSettingsPort(ABC):
    """Write side of host configuration (rules and booking links)."""

    @abstractmethod
    def replace_rules(self, host_id: str, rules: list[AvailabilityRule]) -> list[AvailabilityRule]:
        """Delete existing rules and insert the new set in one transaction."""
        raise NotImplementedError

    @abstractmethod
    def list_links(self, host_id: str) -> list[BookingLink]:
        raise NotImplementedError

    @abstractmethod
    def create_link(self, link: BookingLink) -> BookingLink:
        """Raises SlugTakenError if the slug exists."""
        raise NotImplementedError

    @abstractmethod
    def update_link(self, host_id: str, slug: str, changes: dict[str, Any]) -> BookingLink | None:
        """Apply changes to the host's link. Returns None if the host has no such link."""
        raise NotImplementedError
