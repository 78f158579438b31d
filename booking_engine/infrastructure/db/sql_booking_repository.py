from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from booking_engine.application.exceptions import SlotConflictError
from booking_engine.application.ports.booking_repository import BookingRepositoryPort
from booking_engine.domain.entities.booking import Booking, BookingStatus, GuestContact
from booking_engine.domain.entities.busy_interval import BusyInterval
from booking_engine.infrastructure.db.database import Database
from booking_engine.infrastructure.db.models import BookingRow, HostRow
from booking_engine.infrastructure.db.time_utils import from_utc_naive, to_utc_naive

# Both statuses hold the slot: a calendar failure does not release it.
HELD_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.CALENDAR_FAILED.value)
CONFLICT_MESSAGE = "This time slot was just booked by someone else. Please refresh availability and choose another time."


class SqlBookingRepository(BookingRepositoryPort):
    """
    Booking persistence with an atomic check-and-insert.

    The commit boundary for a host is:
    - a per-host lock serializing bookers in this process,
    - SELECT ... FOR UPDATE on the host row (serializes processes on Postgres),
    - an overlap query against held bookings inside the same transaction,
    - the (host_id, start_at) unique constraint as the last line of defence.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, host_id: str) -> threading.Lock:
        with self._lock_lock:
            if host_id not in self._locks:
                self._locks[host_id] = threading.Lock()
            return self._locks[host_id]

    def held_intervals(self, host_id: str, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        start, end = to_utc_naive(range_start), to_utc_naive(range_end)
        with self._db.session() as session:
            rows = (
                session.query(BookingRow.start_at, BookingRow.end_at)
                .filter(
                    BookingRow.host_id == host_id,
                    BookingRow.status.in_(HELD_STATUSES),
                    BookingRow.start_at < end,
                    BookingRow.end_at > start,
                )
                .order_by(BookingRow.start_at)
                .all()
            )
            return [BusyInterval(start=from_utc_naive(s), end=from_utc_naive(e)) for s, e in rows]

    def commit_booking(self, booking: Booking) -> Booking:
        start, end = to_utc_naive(booking.start), to_utc_naive(booking.end)

        with self._get_lock(booking.host_id):
            try:
                with self._db.session() as session, session.begin():
                    session.query(HostRow.id).filter(HostRow.id == booking.host_id).with_for_update().one_or_none()

                    clash = (
                        session.query(BookingRow.id)
                        .filter(
                            BookingRow.host_id == booking.host_id,
                            BookingRow.status.in_(HELD_STATUSES),
                            BookingRow.start_at < end,
                            BookingRow.end_at > start,
                        )
                        .first()
                    )
                    if clash is not None:
                        self._logger.info(
                            "Booking overlaps a held booking",
                            extra={"host_id": booking.host_id, "booking_id": booking.id, "reason": "overlap"},
                        )
                        raise SlotConflictError(CONFLICT_MESSAGE)

                    session.add(_row_from_booking(booking, start, end))
            except IntegrityError as e:
                self._logger.info(
                    "Booking rejected by unique constraint",
                    extra={"host_id": booking.host_id, "booking_id": booking.id, "reason": "unique_violation"},
                )
                raise SlotConflictError(CONFLICT_MESSAGE) from e

        return booking

    def record_calendar_synced(self, booking_id: str, event_id: str, meet_link: str | None) -> None:
        with self._db.session() as session, session.begin():
            row = session.get(BookingRow, booking_id)
            if row is not None:
                row.external_event_id = event_id
                row.meet_link = meet_link

    def record_calendar_failed(self, booking_id: str) -> None:
        with self._db.session() as session, session.begin():
            row = session.get(BookingRow, booking_id)
            if row is not None:
                row.status = BookingStatus.CALENDAR_FAILED.value

    def get(self, booking_id: str) -> Booking | None:
        with self._db.session() as session:
            row = session.get(BookingRow, booking_id)
            return _booking_from_row(row) if row else None


def _row_from_booking(booking: Booking, start: datetime, end: datetime) -> BookingRow:
    guest = booking.guest
    return BookingRow(
        id=booking.id,
        host_id=booking.host_id,
        link_slug=booking.link_slug,
        start_at=start,
        end_at=end,
        duration_minutes=booking.duration_minutes,
        guest_name=guest.name,
        guest_email=guest.email,
        guest_company=guest.company,
        guest_role=guest.role,
        guest_phone=guest.phone,
        notes=guest.notes,
        status=booking.status.value,
        external_event_id=booking.external_event_id,
        meet_link=booking.meet_link,
        created_at=to_utc_naive(booking.created_at) if booking.created_at else to_utc_naive(datetime.now(timezone.utc)),
    )


def _booking_from_row(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        host_id=row.host_id,
        link_slug=row.link_slug,
        start=from_utc_naive(row.start_at),
        duration_minutes=row.duration_minutes,
        guest=GuestContact(
            name=row.guest_name,
            email=row.guest_email,
            company=row.guest_company,
            role=row.guest_role,
            phone=row.guest_phone,
            notes=row.notes,
        ),
        status=BookingStatus(row.status),
        external_event_id=row.external_event_id,
        meet_link=row.meet_link,
        created_at=from_utc_naive(row.created_at),
    )
