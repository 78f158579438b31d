from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Any

from sqlalchemy.exc import IntegrityError

from booking_engine.application.exceptions import SlugTakenError
from booking_engine.application.ports.availability_store import AvailabilityStorePort
from booking_engine.application.ports.host_settings import HostSettingsPort
from booking_engine.domain.entities.availability_rule import AvailabilityRule
from booking_engine.domain.entities.booking_link import BookingLink, MeetingType
from booking_engine.domain.entities.host import HostAccount
from booking_engine.infrastructure.db.database import Database
from booking_engine.infrastructure.db.models import AvailabilityRuleRow, BookingLinkRow, HostRow
from booking_engine.infrastructure.db.time_utils import from_utc_naive, to_utc_naive

_LINK_COLUMNS = {
    "title": "title",
    "description": "description",
    "duration_minutes": "duration_minutes",
    "meeting_type": "meeting_type",
    "active": "is_active",
}


class SqlHostStore(AvailabilityStorePort, HostSettingsPort):
    def __init__(self, db: Database) -> None:
        self._db = db
        self._logger = logging.getLogger(__name__)

    def list_rules(self, host_id: str) -> list[AvailabilityRule]:
        with self._db.session() as session:
            rows = (
                session.query(AvailabilityRuleRow)
                .filter(AvailabilityRuleRow.host_id == host_id)
                .order_by(AvailabilityRuleRow.day_of_week, AvailabilityRuleRow.start_time, AvailabilityRuleRow.id)
                .all()
            )
            return [_rule_from_row(row) for row in rows]

    def get_active_link(self, slug: str) -> BookingLink | None:
        with self._db.session() as session:
            row = (
                session.query(BookingLinkRow)
                .filter(BookingLinkRow.slug == slug, BookingLinkRow.is_active.is_(True))
                .one_or_none()
            )
            return _link_from_row(row) if row else None

    def get_host(self, host_id: str) -> HostAccount | None:
        with self._db.session() as session:
            row = session.get(HostRow, host_id)
            return _host_from_row(row) if row else None

    def replace_rules(self, host_id: str, rules: list[AvailabilityRule]) -> list[AvailabilityRule]:
        with self._db.session() as session, session.begin():
            session.query(AvailabilityRuleRow).filter(AvailabilityRuleRow.host_id == host_id).delete()
            session.add_all(
                AvailabilityRuleRow(
                    host_id=host_id,
                    day_of_week=rule.day_of_week,
                    start_time=rule.start_time.strftime("%H:%M"),
                    end_time=rule.end_time.strftime("%H:%M"),
                    timezone=rule.timezone,
                    is_active=rule.active,
                )
                for rule in rules
            )
        return self.list_rules(host_id)

    def list_links(self, host_id: str) -> list[BookingLink]:
        with self._db.session() as session:
            rows = (
                session.query(BookingLinkRow)
                .filter(BookingLinkRow.host_id == host_id)
                .order_by(BookingLinkRow.id)
                .all()
            )
            return [_link_from_row(row) for row in rows]

    def create_link(self, link: BookingLink) -> BookingLink:
        try:
            with self._db.session() as session, session.begin():
                if session.query(BookingLinkRow.id).filter(BookingLinkRow.slug == link.slug).first():
                    raise SlugTakenError("This URL slug is already taken")
                session.add(
                    BookingLinkRow(
                        host_id=link.host_id,
                        slug=link.slug,
                        title=link.title,
                        description=link.description,
                        duration_minutes=link.duration_minutes,
                        meeting_type=link.meeting_type.value,
                        is_active=link.active,
                    )
                )
        except IntegrityError as e:
            raise SlugTakenError("This URL slug is already taken") from e
        return link

    def update_link(self, host_id: str, slug: str, changes: dict[str, Any]) -> BookingLink | None:
        with self._db.session() as session, session.begin():
            row = (
                session.query(BookingLinkRow)
                .filter(BookingLinkRow.host_id == host_id, BookingLinkRow.slug == slug)
                .one_or_none()
            )
            if row is None:
                return None
            for key, value in changes.items():
                if isinstance(value, MeetingType):
                    value = value.value
                setattr(row, _LINK_COLUMNS[key], value)
            session.flush()
            return _link_from_row(row)

    def upsert_host(self, host: HostAccount) -> HostAccount:
        with self._db.session() as session, session.begin():
            row = session.get(HostRow, host.id) or HostRow(id=host.id)
            row.name = host.name
            row.email = host.email
            row.google_access_token = host.google_access_token
            row.google_refresh_token = host.google_refresh_token
            row.token_expires_at = to_utc_naive(host.token_expires_at) if host.token_expires_at else None
            session.add(row)
        return host

    def update_tokens(self, host_id: str, access_token: str, expires_at: datetime) -> None:
        with self._db.session() as session, session.begin():
            row = session.get(HostRow, host_id)
            if row is None:
                self._logger.warning("Token refresh for unknown host", extra={"host_id": host_id})
                return
            row.google_access_token = access_token
            row.token_expires_at = to_utc_naive(expires_at)


def _parse_time(value: str) -> time:
    hour, minute = value.split(":")
    return time(hour=int(hour), minute=int(minute))


def _rule_from_row(row: AvailabilityRuleRow) -> AvailabilityRule:
    return AvailabilityRule(
        day_of_week=row.day_of_week,
        start_time=_parse_time(row.start_time),
        end_time=_parse_time(row.end_time),
        timezone=row.timezone,
        active=bool(row.is_active),
    )


def _link_from_row(row: BookingLinkRow) -> BookingLink:
    return BookingLink(
        slug=row.slug,
        host_id=row.host_id,
        title=row.title,
        description=row.description,
        duration_minutes=row.duration_minutes,
        meeting_type=MeetingType(row.meeting_type),
        active=bool(row.is_active),
    )


def _host_from_row(row: HostRow) -> HostAccount:
    return HostAccount(
        id=row.id,
        name=row.name,
        email=row.email,
        google_access_token=row.google_access_token,
        google_refresh_token=row.google_refresh_token,
        token_expires_at=from_utc_naive(row.token_expires_at),
    )
