from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from booking_engine.application.exceptions import (
    BookingLinkNotFoundError,
    BookingValidationError,
    SlotConflictError,
)
from booking_engine.application.ports.availability_store import AvailabilityStorePort
from booking_engine.application.ports.booking_repository import BookingRepositoryPort
from booking_engine.application.ports.calendar import CalendarEventPublisherPort, CalendarEventRequest
from booking_engine.application.ports.notification import NotificationPort
from booking_engine.application.use_cases.list_availability import utc_now
from booking_engine.application.use_cases.slot_availability import SlotAvailabilityService, host_timezone
from booking_engine.application.utils.time_format import format_hhmm, parse_hhmm, parse_iso_date
from booking_engine.domain.entities.booking import Booking, BookingStage, BookingStatus, GuestContact
from booking_engine.domain.entities.booking_link import BookingLink, MeetingType
from booking_engine.domain.entities.host import HostAccount

SLOT_TAKEN_MESSAGE = "This time slot is no longer available. Please refresh availability and choose another time."
CALENDAR_WARNING = "Calendar event could not be created, but booking is noted"
CALENDAR_RECORD_WARNING = "Booking is confirmed, but its calendar details could not be saved"


@dataclass(frozen=True)
class BookingCommand:
    slug: str
    date: str | None
    time: str | None
    name: str | None
    email: str | None
    company: str | None = None
    role: str | None = None
    notes: str | None = None
    phone: str | None = None
    meeting_type: str | None = None


@dataclass(frozen=True)
class BookingOutcome:
    booking: Booking
    link: BookingLink
    host: HostAccount
    stage: BookingStage
    local_date: date
    local_time: str
    warning: str | None = None


class BookingAllocator:
    """
    Turns a guest's slot choice into a committed booking.

    REQUESTED -> VALIDATED -> COMMITTED -> CALENDAR_SYNCED | CALENDAR_FAILED

    The slot is consumed at COMMITTED. Calendar and notification failures
    downgrade the outcome but never undo the commit.
    """

    def __init__(
        self,
        store: AvailabilityStorePort,
        availability: SlotAvailabilityService,
        bookings: BookingRepositoryPort,
        calendar: CalendarEventPublisherPort,
        notifier: NotificationPort,
        default_timezone: str,
        max_horizon_days: int,
        notifications_enabled: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._availability = availability
        self._bookings = bookings
        self._calendar = calendar
        self._notifier = notifier
        self._default_timezone = default_timezone
        self._max_horizon_days = max_horizon_days
        self._notifications_enabled = notifications_enabled
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def book(
        self,
        command: BookingCommand,
        defer: Callable[..., object] | None = None,
    ) -> BookingOutcome:
        """
        Validate and commit the requested slot, then sync it to the calendar.

        `defer` schedules the confirmation message (e.g. BackgroundTasks.add_task);
        without it the message is sent inline.
        """
        if not (_filled(command.date) and _filled(command.time) and _filled(command.name) and _filled(command.email)):
            raise BookingValidationError("Date, time, name, and email are required")

        requested_date = parse_iso_date(command.date)
        requested_time = parse_hhmm(command.time)
        meeting_type = self._resolve_meeting_type(command.meeting_type)

        link = self._store.get_active_link(command.slug)
        host = self._store.get_host(link.host_id) if link else None
        if not link or not host:
            raise BookingLinkNotFoundError("Booking link not found")
        meeting_type = meeting_type or link.meeting_type

        self._log_stage(BookingStage.REQUESTED, host.id, command.slug)

        rules = [rule for rule in self._store.list_rules(host.id) if rule.active]
        tz_name = host_timezone(rules, self._default_timezone)
        tz = ZoneInfo(tz_name)
        now = self._clock()
        today = now.astimezone(tz).date()

        if not today < requested_date <= today + timedelta(days=self._max_horizon_days):
            raise SlotConflictError(SLOT_TAKEN_MESSAGE)

        requested_start = datetime.combine(requested_date, requested_time, tzinfo=tz)
        open_slots = self._availability.open_slots(
            host=host,
            rules=rules,
            duration_minutes=link.duration_minutes,
            dates=[requested_date],
            timezone=tz_name,
            now=now,
        )
        candidate = next(
            (c for c in open_slots.grid.get(requested_date, []) if c.start == requested_start),
            None,
        )
        if candidate is None:
            self._logger.info(
                "Requested slot not available",
                extra={"host_id": host.id, "slug": command.slug, "reason": "not_in_open_slots"},
            )
            raise SlotConflictError(SLOT_TAKEN_MESSAGE)

        self._log_stage(BookingStage.VALIDATED, host.id, command.slug)

        booking = Booking(
            id=uuid.uuid4().hex,
            host_id=host.id,
            link_slug=link.slug,
            start=candidate.start,
            duration_minutes=link.duration_minutes,
            guest=GuestContact(
                name=command.name.strip(),
                email=command.email.strip(),
                company=command.company,
                role=command.role,
                phone=command.phone,
                notes=command.notes,
            ),
            status=BookingStatus.CONFIRMED,
            created_at=now,
        )
        booking = self._bookings.commit_booking(booking)
        self._log_stage(BookingStage.COMMITTED, host.id, command.slug, booking.id)

        outcome = self._sync_calendar(
            BookingOutcome(
                booking=booking,
                link=link,
                host=host,
                stage=BookingStage.COMMITTED,
                local_date=requested_date,
                local_time=format_hhmm(requested_time),
            ),
            meeting_type,
        )

        if self._notifications_enabled:
            if defer is not None:
                defer(self.send_confirmation, outcome)
            else:
                self.send_confirmation(outcome)

        return outcome

    def send_confirmation(self, outcome: BookingOutcome) -> None:
        """Fire-and-forget guest confirmation. Errors are logged only."""
        booking = outcome.booking
        subject = f"Confirmed: {outcome.link.title} with {outcome.host.display_name}"
        try:
            self._notifier.send(
                outcome.host,
                booking.guest.email,
                subject,
                _confirmation_body(outcome),
            )
        except Exception as e:
            self._logger.error(
                "Error sending confirmation",
                extra={"booking_id": booking.id, "host_id": booking.host_id, "error": str(e)},
            )

    def _sync_calendar(self, outcome: BookingOutcome, meeting_type: MeetingType) -> BookingOutcome:
        booking = outcome.booking
        if not self._calendar.is_connected(outcome.host):
            self._logger.info(
                "Host calendar not connected; skipping event",
                extra={"booking_id": booking.id, "host_id": booking.host_id},
            )
            return outcome

        request = CalendarEventRequest(
            title=f"{outcome.link.title} - {booking.guest.name}",
            description=_event_description(booking.guest),
            start=booking.start,
            end=booking.end,
            attendees=[booking.guest.email],
            wants_video_link=meeting_type == MeetingType.GOOGLE_MEET,
        )
        try:
            event = self._calendar.create_event(outcome.host, request)
        except Exception as e:
            self._logger.error(
                "Error creating calendar event",
                extra={"booking_id": booking.id, "host_id": booking.host_id, "error": str(e)},
            )
            self._record_calendar_outcome(booking, self._bookings.record_calendar_failed, booking.id)
            self._log_stage(BookingStage.CALENDAR_FAILED, booking.host_id, booking.link_slug, booking.id)
            return replace(
                outcome,
                booking=replace(booking, status=BookingStatus.CALENDAR_FAILED),
                stage=BookingStage.CALENDAR_FAILED,
                warning=CALENDAR_WARNING,
            )

        saved = self._record_calendar_outcome(
            booking, self._bookings.record_calendar_synced, booking.id, event.event_id, event.meeting_link
        )
        self._log_stage(BookingStage.CALENDAR_SYNCED, booking.host_id, booking.link_slug, booking.id)
        return replace(
            outcome,
            booking=replace(booking, external_event_id=event.event_id, meet_link=event.meeting_link),
            stage=BookingStage.CALENDAR_SYNCED,
            warning=None if saved else CALENDAR_RECORD_WARNING,
        )

    def _record_calendar_outcome(self, booking: Booking, record: Callable[..., None], *args: object) -> bool:
        """The booking is already committed; a failed bookkeeping write is logged, never raised."""
        try:
            record(*args)
        except Exception as e:
            self._logger.error(
                "Error saving calendar outcome",
                extra={"booking_id": booking.id, "host_id": booking.host_id, "error": str(e)},
            )
            return False
        return True

    def _resolve_meeting_type(self, value: str | None) -> MeetingType | None:
        if not _filled(value):
            return None
        try:
            return MeetingType(value.strip().upper())
        except ValueError:
            allowed = ", ".join(m.value for m in MeetingType)
            raise BookingValidationError(f"meetingType must be one of: {allowed}")

    def _log_stage(self, stage: BookingStage, host_id: str, slug: str, booking_id: str | None = None) -> None:
        self._logger.info(
            "Booking stage",
            extra={"stage": stage.value, "host_id": host_id, "slug": slug, "booking_id": booking_id},
        )


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def _event_description(guest: GuestContact) -> str:
    lines = [f"Booking with {guest.name}", f"Email: {guest.email}"]
    if guest.company:
        lines.append(f"Company: {guest.company}")
    if guest.role:
        lines.append(f"Role: {guest.role}")
    if guest.phone:
        lines.append(f"Phone: {guest.phone}")
    if guest.notes:
        lines.extend(["", "Notes:", guest.notes])
    return "\n".join(lines)


def _confirmation_body(outcome: BookingOutcome) -> str:
    booking = outcome.booking
    start = booking.start
    end = booking.end
    lines = [
        f"Hi {booking.guest.name},",
        "",
        "Your meeting has been confirmed!",
        "",
        "Meeting Details:",
        f"- Title: {outcome.link.title}",
        f"- Date: {start.strftime('%A, %B')} {start.day}, {start.year}",
        f"- Time: {start.strftime('%I:%M %p').lstrip('0')} - {end.strftime('%I:%M %p').lstrip('0')}",
        f"- Duration: {booking.duration_minutes} minutes",
    ]
    if booking.meet_link:
        lines.append(f"- Join: {booking.meet_link}")
    if outcome.stage == BookingStage.CALENDAR_SYNCED:
        lines.extend(["", "A calendar invite has been sent to your email."])
    lines.extend(["", "Best,", outcome.host.display_name])
    return "\n".join(lines)
