from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking_engine.application.exceptions import (
    BookingLinkNotFoundError,
    BookingValidationError,
    HostNotFoundError,
)
from booking_engine.application.ports.availability_store import AvailabilityStorePort
from booking_engine.application.ports.host_settings import HostSettingsPort
from booking_engine.application.utils.time_format import parse_hhmm
from booking_engine.domain.entities.availability_rule import AvailabilityRule
from booking_engine.domain.entities.booking_link import BookingLink, MeetingType

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{0,62}$")
UPDATABLE_LINK_FIELDS = {"title", "description", "duration_minutes", "meeting_type", "active"}


@dataclass(frozen=True)
class RuleInput:
    day_of_week: int
    start_time: str
    end_time: str
    active: bool = True
    timezone: str | None = None


class HostSettingsUseCase:
    """Host-side configuration of weekly availability and booking links."""

    def __init__(
        self,
        store: AvailabilityStorePort,
        settings_store: HostSettingsPort,
        default_timezone: str,
    ) -> None:
        self._store = store
        self._settings_store = settings_store
        self._default_timezone = default_timezone
        self._logger = logging.getLogger(__name__)

    def list_rules(self, host_id: str) -> list[AvailabilityRule]:
        self._require_host(host_id)
        return self._store.list_rules(host_id)

    def replace_rules(self, host_id: str, inputs: list[RuleInput]) -> list[AvailabilityRule]:
        self._require_host(host_id)
        rules = [self._to_rule(item) for item in inputs]
        # Slots are listed and booked in the host timezone, so every rule shares it.
        if len({rule.timezone for rule in rules}) > 1:
            raise BookingValidationError("All availability rules must use the same timezone")
        saved = self._settings_store.replace_rules(host_id, rules)
        self._logger.info("Availability replaced", extra={"host_id": host_id, "rule_count": len(saved)})
        return saved

    def list_links(self, host_id: str) -> list[BookingLink]:
        self._require_host(host_id)
        return self._settings_store.list_links(host_id)

    def create_link(
        self,
        host_id: str,
        slug: str | None,
        title: str | None = None,
        description: str | None = None,
        duration_minutes: int | None = None,
        meeting_type: str | None = None,
    ) -> BookingLink:
        self._require_host(host_id)
        if not slug or not slug.strip():
            raise BookingValidationError("Slug is required")
        slug = slug.strip().lower()
        if not SLUG_PATTERN.match(slug):
            raise BookingValidationError("Slug may only contain lowercase letters, digits and hyphens")

        link = BookingLink(
            slug=slug,
            host_id=host_id,
            title=title or "Quick Chat",
            description=description or None,
            duration_minutes=_valid_duration(duration_minutes or 30),
            meeting_type=_meeting_type(meeting_type) if meeting_type else MeetingType.GOOGLE_MEET,
        )
        created = self._settings_store.create_link(link)
        self._logger.info("Booking link created", extra={"host_id": host_id, "slug": slug})
        return created

    def update_link(self, host_id: str, slug: str, changes: dict[str, Any]) -> BookingLink:
        self._require_host(host_id)
        unknown = set(changes) - UPDATABLE_LINK_FIELDS
        if unknown:
            raise BookingValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        changes = dict(changes)
        if "duration_minutes" in changes:
            changes["duration_minutes"] = _valid_duration(changes["duration_minutes"])
        if "meeting_type" in changes:
            changes["meeting_type"] = _meeting_type(changes["meeting_type"])

        updated = self._settings_store.update_link(host_id, slug, changes)
        if updated is None:
            raise BookingLinkNotFoundError("Booking link not found")
        return updated

    def _require_host(self, host_id: str) -> None:
        if self._store.get_host(host_id) is None:
            raise HostNotFoundError("Host not found")

    def _to_rule(self, item: RuleInput) -> AvailabilityRule:
        if not 0 <= item.day_of_week <= 6:
            raise BookingValidationError("Day must be between 0 (Sunday) and 6 (Saturday)")
        start = parse_hhmm(item.start_time, "startTime")
        end = parse_hhmm(item.end_time, "endTime")
        if end <= start:
            raise BookingValidationError("End time must be after start time")

        tz_name = item.timezone or self._default_timezone
        try:
            ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise BookingValidationError(f"Unknown timezone: {tz_name}")

        return AvailabilityRule(
            day_of_week=item.day_of_week,
            start_time=start,
            end_time=end,
            timezone=tz_name,
            active=item.active,
        )


def _valid_duration(value: int) -> int:
    if not 5 <= int(value) <= 480:
        raise BookingValidationError("Duration must be between 5 and 480 minutes")
    return int(value)


def _meeting_type(value: str | MeetingType) -> MeetingType:
    try:
        return MeetingType(value)
    except ValueError:
        allowed = ", ".join(m.value for m in MeetingType)
        raise BookingValidationError(f"meetingType must be one of: {allowed}")
