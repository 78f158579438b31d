from functools import lru_cache
import logging

import httpx

from booking_engine.application.ports.busy_interval_provider import BusyIntervalProviderPort
from booking_engine.application.ports.calendar import CalendarEventPublisherPort
from booking_engine.application.ports.notification import NotificationPort
from booking_engine.application.use_cases.book_slot import BookingAllocator
from booking_engine.application.use_cases.list_availability import ListAvailabilityUseCase
from booking_engine.application.use_cases.manage_host_settings import HostSettingsUseCase
from booking_engine.application.use_cases.slot_availability import SlotAvailabilityService
from booking_engine.core.config import settings
from booking_engine.infrastructure.calendar.google_calendar import GoogleCalendar
from booking_engine.infrastructure.calendar.mock_calendar import MockCalendar
from booking_engine.infrastructure.db.database import Database
from booking_engine.infrastructure.db.sql_booking_repository import SqlBookingRepository
from booking_engine.infrastructure.db.sql_host_store import SqlHostStore
from booking_engine.infrastructure.google.token_provider import GoogleTokenProvider
from booking_engine.infrastructure.notifications.gmail_notifier import GmailNotifier
from booking_engine.infrastructure.notifications.mock_notifier import MockNotifier


def _use_mocks() -> bool:
    return settings.ENV.lower() in {"dev", "local"} or settings.CALENDAR_PROVIDER.lower() == "mock"


@lru_cache
def get_database() -> Database:
    return Database(settings.DATABASE_URL)


@lru_cache
def get_host_store() -> SqlHostStore:
    return SqlHostStore(get_database())


@lru_cache
def get_booking_repository() -> SqlBookingRepository:
    return SqlBookingRepository(get_database())


@lru_cache
def get_http_client() -> httpx.Client:
    return httpx.Client(timeout=settings.GOOGLE_API_TIMEOUT_SECONDS)


@lru_cache
def get_mock_calendar() -> MockCalendar:
    return MockCalendar()


@lru_cache
def get_google_calendar() -> GoogleCalendar:
    client = get_http_client()
    return GoogleCalendar(
        client=client,
        tokens=_token_provider(client),
        base_url=settings.GOOGLE_CALENDAR_BASE_URL,
        event_timezone=settings.EVENT_TIMEZONE,
    )


def _token_provider(client: httpx.Client) -> GoogleTokenProvider:
    return GoogleTokenProvider(
        client=client,
        token_url=settings.GOOGLE_TOKEN_URL,
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        on_refresh=get_host_store().update_tokens,
    )


def get_busy_provider() -> BusyIntervalProviderPort:
    if _use_mocks():
        return get_mock_calendar()
    return get_google_calendar()


def get_calendar_publisher() -> CalendarEventPublisherPort:
    if _use_mocks():
        return get_mock_calendar()
    return get_google_calendar()


@lru_cache
def get_notifier() -> NotificationPort:
    logger = logging.getLogger(__name__)
    if _use_mocks():
        logger.info("Using MockNotifier (ENV=%s, CALENDAR_PROVIDER=%s)", settings.ENV, settings.CALENDAR_PROVIDER)
        return MockNotifier()
    client = get_http_client()
    return GmailNotifier(client=client, tokens=_token_provider(client), base_url=settings.GOOGLE_GMAIL_BASE_URL)


def get_slot_availability() -> SlotAvailabilityService:
    return SlotAvailabilityService(busy_provider=get_busy_provider(), bookings=get_booking_repository())


def get_list_availability_use_case() -> ListAvailabilityUseCase:
    return ListAvailabilityUseCase(
        store=get_host_store(),
        availability=get_slot_availability(),
        default_timezone=settings.DEFAULT_TIMEZONE,
        max_horizon_days=settings.MAX_HORIZON_DAYS,
    )


def get_booking_allocator() -> BookingAllocator:
    return BookingAllocator(
        store=get_host_store(),
        availability=get_slot_availability(),
        bookings=get_booking_repository(),
        calendar=get_calendar_publisher(),
        notifier=get_notifier(),
        default_timezone=settings.DEFAULT_TIMEZONE,
        max_horizon_days=settings.MAX_HORIZON_DAYS,
        notifications_enabled=settings.NOTIFICATIONS_ENABLED,
    )


def get_host_settings_use_case() -> HostSettingsUseCase:
    store = get_host_store()
    return HostSettingsUseCase(store=store, settings_store=store, default_timezone=settings.DEFAULT_TIMEZONE)
