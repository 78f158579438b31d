from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from booking_engine.application.use_cases.book_slot import BookingAllocator
from booking_engine.application.use_cases.list_availability import ListAvailabilityUseCase
from booking_engine.application.use_cases.slot_availability import SlotAvailabilityService
from booking_engine.domain.entities.availability_rule import AvailabilityRule
from booking_engine.domain.entities.booking_link import BookingLink
from booking_engine.domain.entities.host import HostAccount
from booking_engine.infrastructure.calendar.mock_calendar import MockCalendar
from booking_engine.infrastructure.db.database import Database
from booking_engine.infrastructure.db.sql_booking_repository import SqlBookingRepository
from booking_engine.infrastructure.db.sql_host_store import SqlHostStore
from booking_engine.infrastructure.notifications.mock_notifier import MockNotifier

HOST_ID = "host-1"
HOST_TZ = "America/New_York"
# Sunday 11:00 in New York; the first bookable day is Monday 2026-10-19
NOW = datetime(2026, 10, 18, 15, 0, tzinfo=timezone.utc)
MONDAY = date(2026, 10, 19)


def monday_rule(start: time = time(9, 0), end: time = time(10, 0)) -> AvailabilityRule:
    return AvailabilityRule(day_of_week=1, start_time=start, end_time=end, timezone=HOST_TZ)


@pytest.fixture
def db(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'bookings.db'}")
    database.create_all()
    yield database
    database.engine.dispose()


@pytest.fixture
def host_store(db):
    return SqlHostStore(db)


@pytest.fixture
def bookings(db):
    return SqlBookingRepository(db)


@pytest.fixture
def calendar():
    return MockCalendar()


@pytest.fixture
def notifier():
    return MockNotifier()


@pytest.fixture
def seeded(host_store):
    """Host with a Monday 09:00-10:00 window and a 30 minute 'intro' link."""
    host_store.upsert_host(HostAccount(id=HOST_ID, name="Ada Host", email="ada@example.com"))
    host_store.replace_rules(HOST_ID, [monday_rule()])
    host_store.create_link(BookingLink(slug="intro", host_id=HOST_ID, title="Intro Call", duration_minutes=30))
    return host_store


@pytest.fixture
def make_allocator(host_store, bookings, calendar, notifier):
    def _make(publisher=None, busy_provider=None, notifier_override=None, repository=None) -> BookingAllocator:
        repository = repository or bookings
        availability = SlotAvailabilityService(busy_provider=busy_provider or calendar, bookings=repository)
        return BookingAllocator(
            store=host_store,
            availability=availability,
            bookings=repository,
            calendar=publisher or calendar,
            notifier=notifier_override or notifier,
            default_timezone=HOST_TZ,
            max_horizon_days=60,
            clock=lambda: NOW,
        )

    return _make


@pytest.fixture
def make_listing(host_store, bookings, calendar):
    def _make(busy_provider=None) -> ListAvailabilityUseCase:
        availability = SlotAvailabilityService(busy_provider=busy_provider or calendar, bookings=bookings)
        return ListAvailabilityUseCase(
            store=host_store,
            availability=availability,
            default_timezone=HOST_TZ,
            max_horizon_days=60,
            clock=lambda: NOW,
        )

    return _make
